"""Dictionary resolution shared by every file format.

Lookup order for a string: translation cache, exact key, lowercase key, then
a word-by-word fallback that also tries each word with its punctuation
stripped.  The cache lives in a TranslationContext that callers pass in
explicitly, one per run.
"""

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from . import PUNCTUATION_RE, WHITESPACE_RE
from .safety import is_safe_to_translate, is_whitespace_only


def merge(tiers: Iterable[Optional[Mapping[str, str]]]) -> dict:
    """Flatten dictionary tiers into one mapping; later tiers override earlier ones."""
    merged = {}
    for tier in tiers:
        if tier:
            merged.update(tier)
    return merged


@dataclass
class TranslationContext:
    """Merged dictionary plus the run-scoped translation cache."""
    dictionary: dict = field(default_factory=dict)
    cache: dict = field(default_factory=dict)

    def lookup(self, text: str) -> Optional[str]:
        """Exact, then lowercase dictionary hit; None on a miss.

        Empty values are placeholders for untranslated words and count as a miss.
        """
        return self.dictionary.get(text) or self.dictionary.get(text.lower()) or None

    def clear_cache(self):
        self.cache.clear()


def strip_punctuation(word: str) -> str:
    return PUNCTUATION_RE.sub("", word)


def translate_word(word: str, context: TranslationContext) -> str:
    """Translate one whitespace-delimited token, keeping its punctuation."""
    found = context.lookup(word)
    if found:
        return found

    clean = strip_punctuation(word)
    if clean and clean != word:
        found = context.lookup(clean)
        if found:
            return word.replace(clean, found, 1)
    return word


def resolve(text: str, context: TranslationContext) -> str:
    """Return the translation of ``text``, or ``text`` itself when nothing matches.

    A whole-string hit replaces the string exactly.  Otherwise every token is
    looked up on its own and, if any token matched, the tokens are rejoined
    with single spaces, so runs of several spaces collapse to one in that
    branch.
    """
    cached = context.cache.get(text)
    if cached is not None:
        return cached

    translated = context.lookup(text)
    if translated is None:
        words = WHITESPACE_RE.split(text)
        new_words = [translate_word(w, context) for w in words]
        # No token matched: keep the original spacing untouched
        translated = " ".join(new_words) if new_words != words else text

    if translated != text:
        context.cache[text] = translated
    return translated


def translate_text(text: str, context: TranslationContext) -> str:
    """Safety-checked translation used by the JSON, HTML and code translators."""
    if is_whitespace_only(text):
        return text
    cached = context.cache.get(text)
    if cached is not None:
        return cached
    if not is_safe_to_translate(text, context.dictionary):
        return text
    return resolve(text, context)
