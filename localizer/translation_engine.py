"""Translation engine — runs the pre-scan, AI step and per-file translation."""

import logging
import os
from typing import Callable, Iterable, Optional

from .ai_client import GeminiClient
from .code_translator import translate_code
from .config import LocalizerConfig
from .dictionary import TranslationContext
from .dictionary_store import append_cached_words, load_merged_dictionary
from .file_manager import detect_file_type, get_output_path, read_file_safe, write_file_safe
from .html_translator import translate_html
from .json_translator import translate_json
from .missing_words import collect_from_paths, delete_missing_words, save_missing_words
from .project_model import FileOutcome, RunReport, TranslationResult

log = logging.getLogger(__name__)

CODE_TYPES = ("js", "ts", "tsx")

# Unreturned AI words listed individually before "... and N more"
MAX_LISTED_WORDS = 10


def translate_content(content: str, file_type: str,
                      context: TranslationContext) -> TranslationResult:
    """Route ``content`` to the translator for ``file_type``.

    Raises ValueError for types handled elsewhere (css) or not at all.
    """
    if file_type == "json":
        return translate_json(content, context)
    if file_type == "html":
        return translate_html(content, context)
    if file_type in CODE_TYPES:
        return translate_code(content, context, dialect=file_type)
    raise ValueError(f"Unsupported file type: {file_type}")


class TranslationEngine:
    """Translates a batch of project files into ``name-ar.ext`` siblings.

    ``css_transformer`` maps a stylesheet to its right-to-left version; when
    it is None, CSS files are reported as skipped.  ``ai_client`` defaults
    to a GeminiClient built from the config.
    """

    def __init__(self, config: LocalizerConfig,
                 css_transformer: Optional[Callable[[str], str]] = None,
                 ai_client: Optional[GeminiClient] = None):
        self.config = config
        self.css_transformer = css_transformer
        if ai_client is None and config.ai_enabled:
            ai_client = GeminiClient(config.api_keys, config.ai_models, config.ai_timeout)
        self.ai_client = ai_client

    # ── AI step ──────────────────────────────────────────────────

    def _ai_enabled(self) -> bool:
        return (self.config.ai_enabled and self.ai_client is not None
                and self.ai_client.is_available())

    def _fetch_ai_translations(self, missing: set) -> dict:
        """Ask the AI client for ``missing``; never raises.

        The hand-off file is removed whether or not the call succeeds.
        """
        path = self.config.missing_words_path
        try:
            save_missing_words(missing, path)
            return self.ai_client.translate_missing_words_file(path)
        except Exception as e:
            log.warning("AI translation failed: %s. Continuing with dictionary-only mode.", e)
            return {}
        finally:
            try:
                delete_missing_words(path)
            except OSError as e:
                log.warning("Could not remove %s: %s", path, e)

    def _warn_unreturned(self, missing: set, translations: dict):
        unreturned = sorted(w for w in missing if w not in translations)
        if not unreturned:
            return
        log.warning("%d word(s) were requested from AI but not returned:", len(unreturned))
        for word in unreturned[:MAX_LISTED_WORDS]:
            log.warning('  - "%s"', word)
        if len(unreturned) > MAX_LISTED_WORDS:
            log.warning("  ... and %d more", len(unreturned) - MAX_LISTED_WORDS)

    def prepare_dictionary(self, paths: list, report: RunReport) -> dict:
        """Pre-scan ``paths`` and fill dictionary gaps through the AI step."""
        dictionary = load_merged_dictionary(self.config.cached_words_path)
        log.info("Pre-scanning files for missing words...")
        missing = collect_from_paths(paths, self.config.project_root, dictionary)
        report.missing_words = len(missing)

        if not missing:
            log.info("All words found in dictionary. No AI translation needed.")
            return dictionary
        if not self._ai_enabled():
            log.info("Found %d missing word(s). AI translation is disabled.", len(missing))
            return dictionary

        log.info("Found %d missing word(s). Attempting AI translation...", len(missing))
        translations = self._fetch_ai_translations(missing)
        if not translations:
            log.info("No AI translations received. Continuing with dictionary-only mode.")
            return dictionary

        report.ai_translations = len(translations)
        try:
            append_cached_words(self.config.cached_words_path, translations)
        except OSError as e:
            log.warning("Could not persist AI translations: %s", e)
        log.info("AI translated %d word(s). Added to dictionary.", len(translations))
        self._warn_unreturned(missing, translations)
        return load_merged_dictionary(self.config.cached_words_path, translations)

    # ── Per-file translation ─────────────────────────────────────

    def translate_file(self, path: str, context: TranslationContext) -> FileOutcome:
        """Translate one file and write its sibling.  Never raises for I/O errors."""
        file_type = detect_file_type(path)
        output_path = get_output_path(path)
        name = os.path.basename(path)
        try:
            content = read_file_safe(path, self.config.project_root, self.config.tool_root)

            if file_type == "css":
                if self.css_transformer is None:
                    log.info("Skipped %s (no CSS transformer configured)", name)
                    return FileOutcome(path, file_type, "skipped")
                write_file_safe(output_path, self.css_transformer(content),
                                self.config.project_root)
                log.info("Translated: %s -> %s", name, os.path.basename(output_path))
                return FileOutcome(path, file_type, "translated", output_path)

            result = translate_content(content, file_type, context)
            if file_type == "json" and not result.ok:
                log.warning("Failed to translate %s: %s", name, result.error)
                return FileOutcome(path, file_type, "failed", error=result.error)

            # Unparseable code is still written out untouched
            write_file_safe(output_path, result.content, self.config.project_root)
        except (OSError, ValueError) as e:
            log.error("Failed to translate %s: %s", path, e)
            return FileOutcome(path, file_type, "failed", error=str(e))

        if not result.ok:
            log.warning("Copied %s unchanged: %s", name, result.error)
            return FileOutcome(path, file_type, "parse_failed", output_path, result.error)
        log.info("Translated: %s -> %s", name, os.path.basename(output_path))
        return FileOutcome(path, file_type, result.status, output_path)

    def translate_files(self, paths: Iterable[str]) -> RunReport:
        """Translate every file in ``paths``: non-CSS files first, then CSS."""
        paths = list(paths)
        report = RunReport()
        dictionary = self.prepare_dictionary(paths, report)
        context = TranslationContext(dictionary=dictionary)

        ordered = ([p for p in paths if detect_file_type(p) != "css"]
                   + [p for p in paths if detect_file_type(p) == "css"])
        log.info("Translating %d file(s)...", len(ordered))
        for path in ordered:
            report.add(self.translate_file(path, context))

        report.cache_size = len(context.cache)
        for line in report.summary().splitlines():
            log.info("%s", line)
        return report
