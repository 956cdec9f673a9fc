"""JS/TS/JSX/TSX translator — rewrites string literals in place.

Stage A parses the source with tree-sitter and replaces string and template
literals by their UTF-8 byte range, keeping the original quote character.
Stage B runs the HTML text-node pass over the result to catch JSX text,
which the literal walk never sees.  A source that does not parse is returned
untouched.
"""

import logging
import re
from typing import Callable, Optional

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from .dictionary import TranslationContext, translate_text
from .html_translator import TRANSLATABLE_ATTRIBUTES, rewrite_text_nodes
from .project_model import Candidate, TranslationResult

log = logging.getLogger(__name__)

DIALECTS = ("js", "ts", "tsx")

# JSX text: between '>' and the next '<' ('=>' is an arrow, not a tag).
# A span that runs into '{' is code such as `a > b) {`, never text.
JSX_TEXT_RE = re.compile(r"(?<!=)>([^<{]+)(?=<)")

# \u{1F600}, \u0041, \x41, line continuations and single-char escapes
_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])")
_SIMPLE_ESCAPES = {
    "n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0",
    "\n": "", "\r\n": "", "\r": "", "\u2028": "", "\u2029": "",
}

_languages = {}


def _language(dialect: str) -> Language:
    if dialect not in _languages:
        if dialect == "ts":
            ptr = tree_sitter_typescript.language_typescript()
        elif dialect == "tsx":
            ptr = tree_sitter_typescript.language_tsx()
        else:
            ptr = tree_sitter_javascript.language()
        _languages[dialect] = Language(ptr)
    return _languages[dialect]


def dialect_for_extension(ext: str) -> str:
    ext = ext.lower()
    if ext == ".ts":
        return "ts"
    if ext == ".tsx":
        return "tsx"
    return "js"


# ── Literal decoding / encoding ──────────────────────────────────

def _unescape(m) -> str:
    seq = m.group(1)
    try:
        if seq.startswith("u{"):
            return chr(int(seq[2:-1], 16))
        if len(seq) == 5 and seq[0] == "u":
            return chr(int(seq[1:], 16))
        if len(seq) == 3 and seq[0] == "x":
            return chr(int(seq[1:], 16))
    except ValueError:
        return m.group(0)
    return _SIMPLE_ESCAPES.get(seq, seq)


def decode_js_string(raw: str) -> str:
    """Decode the escapes of a JS string body (quotes already removed)."""
    value = _ESCAPE_RE.sub(_unescape, raw)
    # Join \uD83D\uDE00-style surrogate pairs into one code point
    return value.encode("utf-16", "surrogatepass").decode("utf-16", "replace")


def encode_js_string(value: str, quote: str) -> str:
    """Quote ``value`` with ``quote`` so the literal stays valid."""
    out = value.replace("\\", "\\\\")
    if quote == "`":
        out = out.replace("`", "\\`").replace("${", "\\${")
    else:
        out = (out.replace(quote, "\\" + quote)
               .replace("\n", "\\n").replace("\r", "\\r"))
    return quote + out + quote


def encode_jsx_attribute(value: str, quote: str) -> str:
    """JSX attribute strings take HTML entities, not backslash escapes."""
    entity = "&quot;" if quote == '"' else "&apos;"
    return quote + value.replace(quote, entity) + quote


# ── Stage A: literals ────────────────────────────────────────────

def _jsx_attribute_name(node: Node) -> str:
    for child in node.children:
        if child.type in ("property_identifier", "jsx_namespace_name", "identifier"):
            return child.text.decode("utf-8")
    return ""


def _literal_candidate(node: Node, source: bytes) -> Optional[Candidate]:
    """Build a Candidate for a string/template literal node, or None to skip it."""
    parent = node.parent
    if node.type == "string":
        if parent is not None and parent.type == "literal_type":
            return None  # TS string literal type: 'primary' | 'secondary'
        kind, attribute = "literal", ""
        if parent is not None and parent.type == "jsx_attribute":
            attribute = _jsx_attribute_name(parent)
            if attribute.lower() not in TRANSLATABLE_ATTRIBUTES:
                return None
            kind = "attribute"
    elif node.type == "template_string":
        if parent is not None and parent.type == "call_expression":
            return None  # tagged template: css`...`, gql`...`
        kind, attribute = "literal", ""
    else:
        return None

    raw = source[node.start_byte:node.end_byte].decode("utf-8")
    if len(raw) < 2:
        return None
    quote = raw[0]
    body = raw[1:-1]
    text = body if kind == "attribute" else decode_js_string(body)
    return Candidate(text=text, kind=kind, start=node.start_byte,
                     end=node.end_byte, quote=quote, attribute=attribute)


def _iter_literals(root: Node, source: bytes):
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type in ("string", "template_string"):
            candidate = _literal_candidate(node, source)
            if candidate is not None:
                yield candidate
            if node.type == "string":
                continue
        stack.extend(reversed(node.children))


def _first_error(node: Node) -> str:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            row, col = current.start_point
            return f"syntax error at line {row + 1}, column {col + 1}"
        stack.extend(reversed(current.children))
    return "syntax error"


def rewrite_literals(content: str, visit: Callable[[str], str],
                     dialect: str = "js") -> tuple[Optional[str], str]:
    """Stage A.  Returns (rewritten, "") or (None, error) when parsing fails."""
    source = content.encode("utf-8")
    tree = Parser(_language(dialect)).parse(source)
    if tree.root_node.has_error:
        return None, _first_error(tree.root_node)

    replacements = []
    for candidate in _iter_literals(tree.root_node, source):
        if not candidate.text.strip():
            continue
        translated = visit(candidate.text)
        if translated == candidate.text:
            continue
        if candidate.kind == "attribute":
            literal = encode_jsx_attribute(translated, candidate.quote)
        else:
            literal = encode_js_string(translated, candidate.quote)
        replacements.append((candidate.start, candidate.end, literal.encode("utf-8")))

    # Highest offset first so earlier ranges stay valid
    replacements.sort(key=lambda r: r[0], reverse=True)
    for start, end, literal in replacements:
        source = source[:start] + literal + source[end:]
    return source.decode("utf-8"), ""


def scan_code(content: str, visit: Callable[[str], str],
              dialect: str = "js") -> tuple[Optional[str], str]:
    """Run both stages with the same ``visit`` callback."""
    rewritten, error = rewrite_literals(content, visit, dialect)
    if rewritten is None:
        return None, error
    return rewrite_text_nodes(rewritten, visit, JSX_TEXT_RE), ""


def translate_code(content: str, context: TranslationContext,
                   dialect: str = "js") -> TranslationResult:
    """Translate string literals and JSX text in a JS/TS source file."""
    changed = 0

    def visit(text: str) -> str:
        nonlocal changed
        translated = translate_text(text, context)
        if translated != text:
            changed += 1
        return translated

    rewritten, error = scan_code(content, visit, dialect)
    if rewritten is None:
        log.warning("Failed to parse %s source (%s), skipping translation", dialect, error)
        return TranslationResult.parse_failed(content, error)
    return TranslationResult.from_rewrite(content, rewritten, changed)
