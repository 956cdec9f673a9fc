"""JSON translator — rewrites string leaves, keeps the tree shape."""

import json
import logging
from typing import Callable

from .dictionary import TranslationContext, translate_text
from .project_model import TranslationResult

log = logging.getLogger(__name__)


def walk_json(value, visit: Callable[[str], str]):
    """Return a new tree with every string leaf replaced by ``visit(leaf)``.

    Keys, list order and nesting are preserved.  Numbers, booleans and null
    are returned as the very same objects.  The input is never mutated.
    """
    if isinstance(value, str):
        return visit(value)
    if isinstance(value, list):
        return [walk_json(item, visit) for item in value]
    if isinstance(value, dict):
        return {key: walk_json(item, visit) for key, item in value.items()}
    return value


def translate_json_value(value, context: TranslationContext):
    """Translate an already-parsed JSON value."""
    return walk_json(value, lambda s: translate_text(s, context))


def dumps(value) -> str:
    return json.dumps(value, ensure_ascii=False, indent=2)


def translate_json(content: str, context: TranslationContext) -> TranslationResult:
    """Translate a JSON document.

    Malformed JSON is reported as a parse failure rather than raised.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        return TranslationResult.parse_failed(content, f"Invalid JSON: {exc}")

    changed = 0

    def visit(text: str) -> str:
        nonlocal changed
        translated = translate_text(text, context)
        if translated != text:
            changed += 1
        return translated

    translated = walk_json(data, visit)
    result = TranslationResult(content=dumps(translated), replacements=changed)
    result.status = "translated" if changed else "unchanged"
    return result
