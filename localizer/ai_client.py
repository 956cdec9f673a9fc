"""Gemini REST wrapper for translating missing words, with API key rotation."""

import json
import logging
import re
from typing import Callable, Iterable, Optional

import requests

from .missing_words import load_missing_words

log = logging.getLogger(__name__)

API_BASE = "https://generativelanguage.googleapis.com"

PROMPT_HEADER = (
    "Translate these English words to Arabic. Return STRICT JSON ONLY with no "
    'explanations. Format: { "word": "translated" }.\n\n'
    "Words to translate:\n"
)

# Gemini answers invalid keys with 400 and one of these messages
_INVALID_KEY_MESSAGES = ("api key not valid", "invalid api key", "please pass a valid api key")

_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


class KeyRotator:
    """Round-robin over API keys.  The current index survives across requests."""

    def __init__(self, keys: Iterable[str]):
        self.keys = [k.strip() for k in keys if k and k.strip()]
        self.index = 0

    def __len__(self):
        return len(self.keys)

    @property
    def current(self) -> Optional[str]:
        if not self.keys:
            return None
        if self.index >= len(self.keys):
            self.index = 0
        return self.keys[self.index]

    def rotate(self):
        if self.keys:
            self.index = (self.index + 1) % len(self.keys)

    @staticmethod
    def is_invalid_key(status: int, body: str = "") -> bool:
        if status in (401, 403):
            return True
        if status == 400 and body:
            lower = body.lower()
            return any(msg in lower for msg in _INVALID_KEY_MESSAGES)
        return False

    @classmethod
    def should_rotate(cls, status: int, body: str = "") -> bool:
        """429 rate limit, or any invalid-key response."""
        return status == 429 or cls.is_invalid_key(status, body)

    @classmethod
    def skip_reason(cls, status: int, body: str = "") -> str:
        if status == 429:
            return "Rate limit reached"
        if cls.is_invalid_key(status, body):
            return "Invalid API key"
        if body:
            try:
                return json.loads(body)["error"]["message"]
            except (json.JSONDecodeError, KeyError, TypeError):
                return body[:100]
        return "Request failed"

    @staticmethod
    def mask(key: str) -> str:
        """First 8 characters only, for log lines."""
        if len(key) <= 8:
            return key[:4] + "****"
        return key[:8] + "..."


class GeminiClient:
    """Client for the Gemini generateContent REST API."""

    def __init__(self, keys: Iterable[str], models: Optional[list] = None,
                 timeout: int = 120):
        self.rotator = KeyRotator(keys)
        self.models = list(models or [])   # [(api_version, model_name), ...]
        self.timeout = timeout

    def is_available(self) -> bool:
        """True when at least one API key is configured."""
        return len(self.rotator) > 0

    # ── Transport ────────────────────────────────────────────────

    def _post_with_rotation(self, url_builder: Callable[[str], str],
                            payload: Optional[dict] = None) -> requests.Response:
        """Send a request with the current key, rotating on rate limits and bad keys.

        Each key is tried at most once.  A non-2xx response that is not a
        rotation case is returned for the caller to handle.  Raises
        ConnectionError when every key failed.
        """
        if not self.rotator.keys:
            raise ConnectionError("No API keys available. Set GEMINI_API_KEYS in .env")

        total = len(self.rotator)
        last_error = ""
        for _ in range(total):
            key = self.rotator.current
            number = self.rotator.index + 1
            log.debug("Using key #%d/%d (%s)", number, total, self.rotator.mask(key))
            url = url_builder(key)
            try:
                if payload is None:
                    r = requests.get(url, timeout=self.timeout)
                else:
                    r = requests.post(url, json=payload, timeout=self.timeout)
            except requests.RequestException as e:
                log.warning("Key #%d failed: network error (%s), trying next key", number, e)
                last_error = str(e)
                self.rotator.rotate()
                continue

            if r.ok:
                return r
            body = r.text or ""
            if self.rotator.should_rotate(r.status_code, body):
                log.warning("Key #%d failed: %s, trying next key", number,
                            self.rotator.skip_reason(r.status_code, body))
                last_error = f"HTTP {r.status_code} - {body[:200]}"
                self.rotator.rotate()
                continue
            return r

        raise ConnectionError(f"All {total} API key(s) failed. Last error: {last_error}")

    def list_models(self) -> list:
        """Model names the key can see, or [] if the listing fails."""
        try:
            r = self._post_with_rotation(lambda key: f"{API_BASE}/v1beta/models?key={key}")
            r.raise_for_status()
            data = r.json()
        except (ConnectionError, requests.RequestException, ValueError):
            return []
        models = data.get("models") if isinstance(data, dict) else None
        if not isinstance(models, list):
            return []
        return [m["name"].replace("models/", "", 1) for m in models
                if isinstance(m, dict) and isinstance(m.get("name"), str) and m["name"]]

    def _model_attempts(self) -> list:
        attempts = [("v1beta", name) for name in self.list_models()]
        for attempt in self.models:
            if tuple(attempt) not in attempts:
                attempts.append(tuple(attempt))
        return attempts

    # ── Response parsing ─────────────────────────────────────────

    @staticmethod
    def _extract_json_block(raw: str) -> Optional[str]:
        """Return the first balanced [...] or {...} block in ``raw``."""
        starts = [i for i in (raw.find("["), raw.find("{")) if i != -1]
        if not starts:
            return None
        start = min(starts)
        open_char = raw[start]
        close_char = "]" if open_char == "[" else "}"
        depth = 0
        for i in range(start, len(raw)):
            if raw[i] == open_char:
                depth += 1
            elif raw[i] == close_char:
                depth -= 1
                if depth == 0:
                    return raw[start:i + 1]
        end = raw.rfind(close_char)
        return raw[start:end + 1] if end > start else None

    @staticmethod
    def _flatten(parsed) -> dict:
        """Normalize array answers into one {english: arabic} mapping."""
        if isinstance(parsed, dict):
            return parsed
        result = {}
        for item in parsed:
            if not isinstance(item, dict):
                continue
            word, translated = item.get("word"), item.get("translated")
            if isinstance(word, str) and isinstance(translated, str):
                result[word] = translated
                continue
            for key, value in item.items():
                if key not in ("word", "translated"):
                    result[key] = value
        return result

    @classmethod
    def _parse_response(cls, raw: str) -> dict:
        """Parse the model's JSON answer.

        Handles clean JSON, markdown-fenced JSON and JSON embedded in text,
        in object or array form.  Only non-empty string values are kept.
        Raises ValueError if no JSON can be recovered.
        """
        # Try 1: direct parse
        parsed = None
        try:
            parsed = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            pass

        # Try 2: strip markdown fences
        if parsed is None:
            stripped = _FENCE_RE.sub("", raw).replace("```", "").strip()
            try:
                parsed = json.loads(stripped)
            except (json.JSONDecodeError, TypeError):
                # Try 3: first balanced block
                block = cls._extract_json_block(stripped)
                if block:
                    try:
                        parsed = json.loads(block)
                    except (json.JSONDecodeError, TypeError):
                        pass

        if not isinstance(parsed, (dict, list)):
            raise ValueError(f"Could not parse JSON from AI response: {raw[:200]}")

        return {str(k): v for k, v in cls._flatten(parsed).items()
                if isinstance(v, str) and v.strip()}

    @staticmethod
    def _response_text(data: dict) -> str:
        try:
            return data["candidates"][0]["content"]["parts"][0].get("text", "")
        except (KeyError, IndexError, TypeError, AttributeError):
            return ""

    # ── Translation ──────────────────────────────────────────────

    def translate_words(self, words: Iterable[str]) -> dict:
        """Translate English words to Arabic in one request.

        Tries discovered models first, then the configured fallbacks, until
        one answers.  Raises ConnectionError if none does and ValueError if
        the answer is not usable JSON.
        """
        words = list(words)
        if not words:
            return {}
        prompt = PROMPT_HEADER + json.dumps(words, ensure_ascii=False, indent=2)
        payload = {"contents": [{"parts": [{"text": prompt}]}]}

        response = None
        last_error = ""
        for version, model in self._model_attempts():
            try:
                r = self._post_with_rotation(
                    lambda key, v=version, m=model:
                        f"{API_BASE}/{v}/models/{m}:generateContent?key={key}",
                    payload)
            except ConnectionError as e:
                last_error = str(e)
                continue
            if r.ok:
                log.info("Translating %d words with %s (%s)", len(words), model, version)
                response = r
                break
            last_error = f"{model}: HTTP {r.status_code} - {r.text[:200]}"

        if response is None:
            raise ConnectionError(f"All model attempts failed. Last error: {last_error[:200]}")

        try:
            data = response.json()
        except ValueError as e:
            raise ValueError(f"AI response was not JSON: {e}") from e
        text = self._response_text(data)
        if not text:
            raise ValueError("AI returned an empty response")
        return self._parse_response(text)

    def translate_missing_words_file(self, path: str) -> dict:
        """Translate every word listed in the missing-words hand-off file."""
        words = load_missing_words(path)
        if not words:
            return {}
        return self.translate_words(words)
