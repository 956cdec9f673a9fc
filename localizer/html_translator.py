"""HTML translator — regex passes over raw markup, no DOM parse.

Passes, in order:
  1. mark the first <html> tag with dir="rtl" lang="ar"
  2. translate text between '>' and '<' outside <script>/<style> bodies
  3. translate alt, title, placeholder and aria-label attribute values

Known limits of the regex approach: nested same-name raw elements, '>'
inside attribute values and text inside comments are not special-cased.
Anything that is not translated is emitted byte-for-byte.
"""

import re
from typing import Callable

from .dictionary import TranslationContext, translate_text
from .project_model import TranslationResult

# Text node: everything between a '>' and the next '<'
TEXT_NODE_RE = re.compile(r">([^<]+)<")

TRANSLATABLE_ATTRIBUTES = ("alt", "title", "placeholder", "aria-label")

_RAW_ELEMENTS = ("script", "style")

_HTML_TAG_RE = re.compile(r"<html(\s[^>]*)?>", re.IGNORECASE)


def _attr_value_re(name: str) -> re.Pattern:
    """name="value" / name='value' / name=value, not part of a longer name."""
    return re.compile(
        r"(?<![\w:-])" + re.escape(name) +
        r"""\s*=\s*(?:"[^"]*"|'[^']*'|[^\s"'>]+)""",
        re.IGNORECASE)


_DIR_RE = _attr_value_re("dir")
_LANG_RE = _attr_value_re("lang")

_ATTRIBUTE_RES = {
    name: re.compile(
        r"(?<![\w:-])(" + re.escape(name) + r""")(\s*=\s*)(?:"([^"]*)"|'([^']*)')""",
        re.IGNORECASE)
    for name in TRANSLATABLE_ATTRIBUTES
}


class RawElementIndex:
    """Answers "is this offset inside a <script> or <style> body?".

    An offset is inside when the nearest preceding opening tag comes after
    the nearest preceding closing tag of the same element.
    """

    def __init__(self, content: str):
        self._lower = content.lower()

    def inside(self, offset: int) -> bool:
        for tag in _RAW_ELEMENTS:
            opened = self._lower.rfind("<" + tag, 0, offset)
            closed = self._lower.rfind("</" + tag + ">", 0, offset)
            if opened > closed:
                return True
        return False


# ── Pass 1: root tag ─────────────────────────────────────────────

def _set_attribute(attrs: str, pattern: re.Pattern, value: str) -> str:
    if pattern.search(attrs):
        return pattern.sub(value, attrs, count=1)
    return f"{attrs} {value}" if attrs else value


def set_root_direction(content: str) -> str:
    """Set dir="rtl" and lang="ar" on the first <html> tag, keeping other attributes."""
    def replace(m):
        attrs = (m.group(1) or "").strip()
        attrs = _set_attribute(attrs, _DIR_RE, 'dir="rtl"')
        attrs = _set_attribute(attrs, _LANG_RE, 'lang="ar"')
        return f"<html {attrs}>"

    return _HTML_TAG_RE.sub(replace, content, count=1)


# ── Pass 2: text nodes ───────────────────────────────────────────

def rewrite_text_nodes(content: str, visit: Callable[[str], str],
                       pattern: re.Pattern = TEXT_NODE_RE) -> str:
    """Run ``visit`` over every text span matched by ``pattern``.

    ``pattern`` must capture the text in group 1.  The span is trimmed before
    ``visit`` sees it and its leading/trailing whitespace is re-emitted as-is.
    Spans inside script/style bodies are left alone.
    """
    raw = RawElementIndex(content)

    def replace(m):
        text = m.group(1)
        # +1 so a closing tag that ends right at this '>' is seen
        if raw.inside(m.start() + 1):
            return m.group(0)
        core = text.strip()
        if not core:
            return m.group(0)
        translated = visit(core)
        if translated == core:
            return m.group(0)
        leading = text[:len(text) - len(text.lstrip())]
        trailing = text[len(text.rstrip()):]
        return (content[m.start():m.start(1)] + leading + translated + trailing
                + content[m.end(1):m.end()])

    return pattern.sub(replace, content)


# ── Pass 3: attributes ───────────────────────────────────────────

def rewrite_attributes(content: str, visit: Callable[[str], str]) -> str:
    """Run ``visit`` over alt/title/placeholder/aria-label values.

    A changed value is written back double-quoted; unchanged ones keep their
    original bytes.
    """
    for pattern in _ATTRIBUTE_RES.values():
        raw = RawElementIndex(content)

        def replace(m, raw=raw, source=content):
            # Judge the tag that owns the attribute, so <script title=...> itself counts
            tag_start = source.rfind("<", 0, m.start())
            if raw.inside(max(tag_start, 0)):
                return m.group(0)
            value = m.group(3) if m.group(3) is not None else m.group(4)
            translated = visit(value)
            if translated == value:
                return m.group(0)
            escaped = translated.replace('"', "&quot;")
            return f'{m.group(1)}{m.group(2)}"{escaped}"'

        content = pattern.sub(replace, content)
    return content


def scan_html(content: str, visit: Callable[[str], str],
              inject_direction: bool = True) -> str:
    """Apply every pass with the same ``visit`` callback."""
    if inject_direction:
        content = set_root_direction(content)
    content = rewrite_text_nodes(content, visit)
    return rewrite_attributes(content, visit)


def translate_html(content: str, context: TranslationContext,
                   inject_direction: bool = True) -> TranslationResult:
    """Translate an HTML document to Arabic and mark it right-to-left."""
    changed = 0

    def visit(text: str) -> str:
        nonlocal changed
        translated = translate_text(text, context)
        if translated != text:
            changed += 1
        return translated

    rewritten = scan_html(content, visit, inject_direction=inject_direction)
    return TranslationResult.from_rewrite(content, rewritten, changed)
