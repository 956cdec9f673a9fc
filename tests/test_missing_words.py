"""
Tests for the missing-words pre-scan and its hand-off file.
"""

import json

from localizer.missing_words import (
    collect_from_paths, collect_missing_words, delete_missing_words,
    load_missing_words, save_missing_words,
)

DICTIONARY = {"Welcome": "مرحبا"}


class TestCollectMissingWords:

    def test_json_strings(self):
        files = [('{"a": "Welcome", "b": "Goodbye friend", "c": "userName"}', "json")]
        assert collect_missing_words(files, DICTIONARY) == {"Goodbye friend", "Goodbye"}

    def test_tokens_and_stripped_forms(self):
        files = [('["Thanks, Bob!"]', "json")]
        assert collect_missing_words(files, {}) == {
            "Thanks, Bob!", "Thanks,", "Thanks", "Bob!", "Bob",
        }

    def test_known_tokens_not_repeated(self):
        files = [('["Welcome Friends"]', "json")]
        assert collect_missing_words(files, DICTIONARY) == {"Welcome Friends", "Friends"}

    def test_html_text_and_attributes(self):
        html = '<html><body><h1>Hello</h1><img alt="Picture"><h2>Welcome</h2></body></html>'
        assert collect_missing_words([(html, "html")], DICTIONARY) == {"Hello", "Picture"}

    def test_code_literals(self):
        code = 'const a = "Goodbye"; const b = "userName"; const c = "Welcome";'
        assert collect_missing_words([(code, "js")], DICTIONARY) == {"Goodbye"}

    def test_component_code_is_not_text(self):
        component = (
            "function Counter({ count, total }) {\n"
            "  if (count > total) {\n"
            "    return null;\n"
            "  }\n"
            "  return (\n"
            "    <div style={styles.box}>\n"
            "      <h1>Welcome</h1>\n"
            "    </div>\n"
            "  );\n"
            "}\n"
            "const styles = { box: { margin: 0 } };\n"
        )
        assert collect_missing_words([(component, "js")], DICTIONARY) == set()

    def test_css_skipped(self):
        assert collect_missing_words([("body { content: 'Hello'; }", "css")], {}) == set()

    def test_malformed_inputs_contribute_nothing(self):
        files = [('{"a": "Hello",', "json"), ('const = "Hello" {', "js")]
        assert collect_missing_words(files, {}) == set()


class TestCollectFromPaths:

    def test_reads_project_files(self, tmp_path):
        (tmp_path / "a.json").write_text('{"t": "Goodbye"}', encoding="utf-8")
        (tmp_path / "b.css").write_text("p { color: red }", encoding="utf-8")
        (tmp_path / "c.html").write_text("<p>Hello</p>", encoding="utf-8")
        paths = [str(tmp_path / n) for n in ("a.json", "b.css", "c.html", "missing.js")]

        words = collect_from_paths(paths, str(tmp_path), DICTIONARY)
        assert words == {"Goodbye", "Hello"}


class TestHandOffFile:

    def test_save_load_delete(self, tmp_path):
        path = tmp_path / "temp" / "missing_words.json"
        save_missing_words({"Hello", "Goodbye"}, str(path))

        assert json.loads(path.read_text(encoding="utf-8")) == {"Goodbye": "", "Hello": ""}
        assert load_missing_words(str(path)) == ["Goodbye", "Hello"]

        delete_missing_words(str(path))
        assert not path.exists()
        delete_missing_words(str(path))

    def test_load_missing_file(self, tmp_path):
        assert load_missing_words(str(tmp_path / "nope.json")) == []
