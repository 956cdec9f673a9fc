"""
Tests for the Gemini client: key rotation, response parsing, model fallback.
All HTTP traffic is mocked.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from localizer.ai_client import GeminiClient, KeyRotator
from localizer.missing_words import save_missing_words


def fake_response(status=200, payload=None, text=None):
    r = MagicMock()
    r.status_code = status
    r.ok = 200 <= status < 300
    r.text = text if text is not None else json.dumps(payload or {})
    r.json.return_value = payload or {}
    if not r.ok:
        r.raise_for_status.side_effect = requests.HTTPError(f"HTTP {status}")
    return r


def gemini_answer(text):
    return fake_response(payload={"candidates": [{"content": {"parts": [{"text": text}]}}]})


class TestKeyRotator:

    def test_rotation_wraps(self):
        rotator = KeyRotator(["a", " b ", ""])
        assert rotator.keys == ["a", "b"]
        assert rotator.current == "a"
        rotator.rotate()
        assert rotator.current == "b"
        rotator.rotate()
        assert rotator.current == "a"

    @pytest.mark.parametrize("status, body, expected", [
        (429, "", True),
        (401, "", True),
        (403, "", True),
        (400, '{"error": {"message": "API key not valid. Please pass a valid API key."}}', True),
        (400, '{"error": {"message": "Invalid JSON payload"}}', False),
        (500, "", False),
        (404, "", False),
    ])
    def test_should_rotate(self, status, body, expected):
        assert KeyRotator.should_rotate(status, body) is expected

    def test_skip_reason(self):
        assert KeyRotator.skip_reason(429) == "Rate limit reached"
        assert KeyRotator.skip_reason(401) == "Invalid API key"
        assert KeyRotator.skip_reason(500, '{"error": {"message": "boom"}}') == "boom"

    def test_mask(self):
        assert KeyRotator.mask("AIzaSyExampleKey") == "AIzaSyEx..."
        assert KeyRotator.mask("short") == "shor****"


class TestPostWithRotation:

    def test_rotates_past_rate_limited_key(self):
        client = GeminiClient(["k1", "k2"])
        with patch("localizer.ai_client.requests.post") as post:
            post.side_effect = [fake_response(429), fake_response(200, {"ok": True})]
            r = client._post_with_rotation(lambda key: f"http://x?key={key}", {"a": 1})

        assert r.ok
        assert [c.args[0] for c in post.call_args_list] == ["http://x?key=k1", "http://x?key=k2"]
        assert client.rotator.current == "k2"

    def test_all_keys_fail(self):
        client = GeminiClient(["k1", "k2"])
        with patch("localizer.ai_client.requests.post", return_value=fake_response(403)):
            with pytest.raises(ConnectionError, match="All 2 API key"):
                client._post_with_rotation(lambda key: key, {})

    def test_network_error_rotates(self):
        client = GeminiClient(["k1", "k2"])
        with patch("localizer.ai_client.requests.post") as post:
            post.side_effect = [requests.ConnectionError("down"), fake_response(200)]
            assert client._post_with_rotation(lambda key: key, {}).ok

    def test_other_errors_returned(self):
        client = GeminiClient(["k1", "k2"])
        with patch("localizer.ai_client.requests.post", return_value=fake_response(500)) as post:
            r = client._post_with_rotation(lambda key: key, {})
        assert r.status_code == 500
        assert post.call_count == 1

    def test_no_keys(self):
        client = GeminiClient([])
        assert client.is_available() is False
        with pytest.raises(ConnectionError):
            client._post_with_rotation(lambda key: key, {})


class TestParseResponse:

    def test_plain_object(self):
        assert GeminiClient._parse_response('{"Hello": "مرحبا"}') == {"Hello": "مرحبا"}

    def test_fenced(self):
        raw = '```json\n{"Hello": "مرحبا"}\n```'
        assert GeminiClient._parse_response(raw) == {"Hello": "مرحبا"}

    def test_embedded_in_text(self):
        raw = 'Here you go: {"Hello": "مرحبا", "Bye": {"x": 1}} Enjoy!'
        assert GeminiClient._parse_response(raw) == {"Hello": "مرحبا"}

    def test_array_of_word_objects(self):
        raw = '[{"word": "Hello", "translated": "مرحبا"}, {"Bye": "وداعا"}]'
        assert GeminiClient._parse_response(raw) == {"Hello": "مرحبا", "Bye": "وداعا"}

    def test_empty_values_dropped(self):
        assert GeminiClient._parse_response('{"Hello": "", "Bye": "وداعا", "N": 3}') == {"Bye": "وداعا"}

    def test_garbage(self):
        with pytest.raises(ValueError):
            GeminiClient._parse_response("I cannot help with that.")


class TestListModels:

    def test_names_without_prefix(self):
        listing = fake_response(payload={"models": [{"name": "models/gemini-2.0-flash"}, {}]})
        with patch("localizer.ai_client.requests.get", return_value=listing):
            assert GeminiClient(["k1"]).list_models() == ["gemini-2.0-flash"]

    @pytest.mark.parametrize("body", [
        [],
        ["models/gemini-2.0-flash"],
        {"models": "gemini-2.0-flash"},
        {"models": ["models/gemini-2.0-flash", {"name": 7}]},
    ])
    def test_unexpected_listing_shape(self, body):
        listing = fake_response()
        listing.json.return_value = body
        with patch("localizer.ai_client.requests.get", return_value=listing):
            assert GeminiClient(["k1"]).list_models() == []

    def test_listing_not_json(self):
        listing = fake_response(text="<html>")
        listing.json.side_effect = ValueError("not json")
        with patch("localizer.ai_client.requests.get", return_value=listing):
            assert GeminiClient(["k1"]).list_models() == []


class TestTranslateWords:

    def test_uses_discovered_then_fallback_models(self):
        client = GeminiClient(["k1"], [("v1", "gemini-1.5-flash")])
        listing = fake_response(payload={"models": [{"name": "models/gemini-2.0-flash"}]})
        with patch("localizer.ai_client.requests.get", return_value=listing), \
                patch("localizer.ai_client.requests.post") as post:
            post.side_effect = [fake_response(404), gemini_answer('{"Hello": "مرحبا"}')]
            result = client.translate_words(["Hello"])

        assert result == {"Hello": "مرحبا"}
        urls = [c.args[0] for c in post.call_args_list]
        assert urls[0].endswith("/v1beta/models/gemini-2.0-flash:generateContent?key=k1")
        assert urls[1].endswith("/v1/models/gemini-1.5-flash:generateContent?key=k1")
        prompt = post.call_args.kwargs["json"]["contents"][0]["parts"][0]["text"]
        assert prompt.startswith("Translate these English words to Arabic.")
        assert '"Hello"' in prompt

    def test_every_model_fails(self):
        client = GeminiClient(["k1"], [("v1", "gemini-1.5-flash")])
        with patch("localizer.ai_client.requests.get", return_value=fake_response(500)), \
                patch("localizer.ai_client.requests.post", return_value=fake_response(404)):
            with pytest.raises(ConnectionError):
                client.translate_words(["Hello"])

    def test_empty_answer(self):
        client = GeminiClient(["k1"], [("v1", "gemini-1.5-flash")])
        with patch("localizer.ai_client.requests.get", return_value=fake_response(500)), \
                patch("localizer.ai_client.requests.post", return_value=fake_response(payload={})):
            with pytest.raises(ValueError):
                client.translate_words(["Hello"])

    def test_no_words(self):
        with patch("localizer.ai_client.requests.post") as post:
            assert GeminiClient(["k1"]).translate_words([]) == {}
        post.assert_not_called()


class TestMissingWordsFile:

    def test_reads_hand_off_file(self, tmp_path):
        path = tmp_path / "missing_words.json"
        save_missing_words({"Hello"}, str(path))
        client = GeminiClient(["k1"])
        with patch.object(client, "translate_words", return_value={"Hello": "مرحبا"}) as tw:
            assert client.translate_missing_words_file(str(path)) == {"Hello": "مرحبا"}
        tw.assert_called_once_with(["Hello"])

    def test_missing_file(self, tmp_path):
        client = GeminiClient(["k1"])
        assert client.translate_missing_words_file(str(tmp_path / "none.json")) == {}
