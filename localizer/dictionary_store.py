"""Load and persist the dictionary tiers: bundled, cached AI words, fresh AI results."""

import json
import logging
import os
from typing import Mapping, Optional

from .dictionary import merge

log = logging.getLogger(__name__)

BUNDLED_DICTIONARY = os.path.join(os.path.dirname(__file__), "data", "dictionary.json")


def _read_mapping(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Dictionary file is not a JSON object: {path}")
    return {str(k): v for k, v in data.items() if isinstance(v, str)}


def load_bundled_dictionary() -> dict:
    """The English → Arabic dictionary shipped with the package."""
    return _read_mapping(BUNDLED_DICTIONARY)


def load_cached_words(path: str) -> dict:
    """Words translated by earlier AI runs.  Missing or invalid file → {}."""
    try:
        return _read_mapping(path)
    except FileNotFoundError:
        return {}
    except (json.JSONDecodeError, ValueError, OSError) as e:
        log.warning("Could not load cached words from %s: %s", path, e)
        return {}


def save_cached_words(path: str, data: Mapping[str, str]):
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(dict(data), f, ensure_ascii=False, indent=2)


def append_cached_words(path: str, new: Mapping[str, str]) -> dict:
    """Merge ``new`` onto the cached words file (new entries win) and save it."""
    merged = merge([load_cached_words(path), new])
    save_cached_words(path, merged)
    log.info("Saved %d new words to %s (%d total)", len(new), path, len(merged))
    return merged


def load_merged_dictionary(cached_words_path: str,
                           extra: Optional[Mapping[str, str]] = None) -> dict:
    """Bundled < cached words < ``extra``."""
    return merge([load_bundled_dictionary(),
                  load_cached_words(cached_words_path),
                  extra])
