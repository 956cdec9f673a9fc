"""Pre-scan for words the dictionary cannot translate yet.

Reuses the JSON, HTML and code passes with a recording callback instead of
the resolver, so it sees exactly the strings the translation pass will see.
The resulting set is handed to the AI client through a transient JSON file.
"""

import json
import logging
import os
from typing import Iterable, Mapping

from . import WHITESPACE_RE
from .code_translator import scan_code
from .dictionary import strip_punctuation
from .file_manager import detect_file_type, read_file_safe
from .html_translator import scan_html
from .json_translator import walk_json
from .safety import in_dictionary, is_safe_to_translate, is_whitespace_only

log = logging.getLogger(__name__)


class MissingWordCollector:
    """Accumulates safe, untranslatable candidates across many files."""

    def __init__(self, dictionary: Mapping[str, str]):
        self.dictionary = dictionary
        self.words: set = set()

    def _add_if_missing(self, text: str):
        if (text and is_safe_to_translate(text, self.dictionary)
                and not in_dictionary(text, self.dictionary)):
            self.words.add(text)

    def visit(self, text: str) -> str:
        """Record ``text`` (and its fallback words) if unresolvable; return it unchanged."""
        if is_whitespace_only(text) or not is_safe_to_translate(text, self.dictionary):
            return text
        if in_dictionary(text, self.dictionary):
            return text

        self.words.add(text)
        for word in WHITESPACE_RE.split(text):
            self._add_if_missing(word)
            clean = strip_punctuation(word)
            if clean != word:
                self._add_if_missing(clean)
        return text

    def add_content(self, content: str, file_type: str) -> bool:
        """Scan one file's content.  Returns False if it could not be parsed."""
        if file_type == "json":
            try:
                data = json.loads(content)
            except json.JSONDecodeError as exc:
                log.warning("Skipping malformed JSON during pre-scan: %s", exc)
                return False
            walk_json(data, self.visit)
        elif file_type == "html":
            scan_html(content, self.visit, inject_direction=False)
        elif file_type in ("js", "ts", "tsx"):
            rewritten, error = scan_code(content, self.visit, file_type)
            if rewritten is None:
                log.warning("Skipping unparseable %s source during pre-scan: %s",
                            file_type, error)
                return False
        # CSS is flipped geometrically and never looked up in the dictionary
        return True


def collect_missing_words(files: Iterable[tuple[str, str]],
                          dictionary: Mapping[str, str]) -> set:
    """Collect missing words from (content, file_type) pairs."""
    collector = MissingWordCollector(dictionary)
    for content, file_type in files:
        collector.add_content(content, file_type)
    return collector.words


def collect_from_paths(paths: Iterable[str], project_root: str,
                       dictionary: Mapping[str, str]) -> set:
    """Read each non-CSS file and collect its missing words."""
    collector = MissingWordCollector(dictionary)
    for path in paths:
        file_type = detect_file_type(path)
        if file_type in ("css", "unknown"):
            continue
        try:
            content = read_file_safe(path, project_root)
        except (OSError, ValueError) as exc:
            log.warning("Could not read %s for missing words collection: %s", path, exc)
            continue
        collector.add_content(content, file_type)
    return collector.words


def save_missing_words(words: Iterable[str], path: str):
    """Write the hand-off file: {"word": "", ...}."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    data = {word: "" for word in sorted(words)}
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)


def load_missing_words(path: str) -> list:
    """Read the hand-off file back.  Missing file → []."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return []
    if not isinstance(data, dict):
        raise ValueError(f"Missing words file is not a JSON object: {path}")
    return list(data.keys())


def delete_missing_words(path: str):
    """Remove the hand-off file; a file that is already gone is fine."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
