"""Safety classifier — decides whether a string is human text or code.

Anything shaped like a URL, a code fragment, a number or an identifier is
rejected, unless the dictionary already knows the string.
Single capitalized words are let through so they can be queued for AI
translation even without a dictionary entry.
"""

import logging
import re
from typing import Mapping, Optional

log = logging.getLogger(__name__)

_URL_RES = (
    re.compile(r"^https?://", re.IGNORECASE),
    re.compile(r"^www\.", re.IGNORECASE),
    re.compile(r"^[a-z]+://", re.IGNORECASE),
)

# Substrings that only show up in code: interpolation, calls, arrows, literals
_CODE_PATTERNS = ("${", "function(", "=>", "()", "{}")

_NUMERIC_RE = re.compile(r"^[0-9\s\-_.,;:!?()]+\Z")  # 12.5, 1-2-3, (  ), ...
_CAMEL_RE = re.compile(r"^[a-z][a-zA-Z0-9_]*\Z")      # userName, api_key
_PASCAL_RE = re.compile(r"^[A-Z][a-zA-Z0-9_]*\Z")     # Welcome, MyClass2


def in_dictionary(text: str, dictionary: Optional[Mapping[str, str]]) -> bool:
    """True if the exact or lowercased text has a non-empty dictionary entry."""
    if not dictionary:
        return False
    return bool(dictionary.get(text) or dictionary.get(text.lower()))


def is_safe_to_translate(text: str,
                         dictionary: Optional[Mapping[str, str]] = None) -> bool:
    """Check if a string should be translated.

    Rules are applied in order and the first one that matches decides:
    blank, URL, code pattern and numeric-only strings are unsafe; a
    dictionary hit (exact or lowercase) is safe; lowercase-leading
    identifiers are unsafe; capitalized identifiers are unsafe when they
    hold a digit or underscore and safe otherwise; everything else is safe.
    """
    if not text or not text.strip():
        return _trace(text, False, "empty")

    if any(p.search(text) for p in _URL_RES):
        return _trace(text, False, "url")

    if any(p in text for p in _CODE_PATTERNS):
        return _trace(text, False, "code pattern")

    if _NUMERIC_RE.match(text):
        return _trace(text, False, "numeric/punctuation")

    if in_dictionary(text, dictionary):
        return _trace(text, True, "in dictionary")

    if _CAMEL_RE.match(text):
        return _trace(text, False, "camelCase identifier")

    if _PASCAL_RE.match(text):
        if any(c.isdigit() for c in text) or "_" in text:
            return _trace(text, False, "PascalCase with digits/underscore")
        return _trace(text, True, "capitalized word")

    return _trace(text, True, "default")


def is_whitespace_only(text: str) -> bool:
    return not text or text.isspace()


def _trace(text: str, verdict: bool, rule: str) -> bool:
    log.debug("%s %r (%s)", "allow" if verdict else "skip", text, rule)
    return verdict
