"""Arabic Localizer — translates English UI text in project files to Arabic.

Usage: python main.py [scan|translate|test] [--project PATH] [--no-ai]
"""

import argparse
import json
import logging
import os
import sys
import tempfile

from localizer.config import load_config
from localizer.file_manager import get_output_path
from localizer.scanner import count_by_type, scan_files
from localizer.translation_engine import TranslationEngine

log = logging.getLogger("localizer")

# Files listed by `scan` before "... and N more"
MAX_LISTED_FILES = 20

SAMPLE_HTML = """<!DOCTYPE html>
<html>
<head>
    <title>Test Page</title>
</head>
<body>
    <h1>Welcome</h1>
    <p>This is a test page for translation.</p>
    <img src="image.jpg" alt="Test Image" title="Image Title">
    <input type="text" placeholder="Enter your name" aria-label="Name input">
    <button>Submit</button>
</body>
</html>"""

SAMPLE_JSON = {
    "title": "Welcome",
    "message": "This is a test",
    "items": ["First", "Second", "Third"],
    "nested": {
        "key": "value",
        "description": "Nested object",
    },
}

SAMPLE_JS = """function greet() {
    const message = "Hello World";
    alert("Welcome to the application");
    console.log("This is a test message");
    return message;
}

const title = "Page Title";
const description = "This is a description";"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="main.py",
        description="Arabic Localization Helper: writes name-ar.ext translations "
                    "next to each JSON, HTML, JS/TS and CSS file.")
    parser.add_argument("command", nargs="?", choices=("scan", "translate", "test"),
                        help="scan: list files; translate: translate them; "
                             "test: run on sample files (default: scan + translate)")
    parser.add_argument("--project", "--target", dest="project", metavar="PATH",
                        help="project root to scan (default: parent of the tool directory)")
    parser.add_argument("--no-ai", action="store_true",
                        help="dictionary-only mode, never call the AI service")
    parser.add_argument("--settings", metavar="FILE",
                        help="settings file (default: _settings.json in the tool directory)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def cmd_scan(config) -> list:
    print(f"Scanning {config.project_root} for translatable files...\n")
    files = scan_files(config.project_root, config.tool_root, config.exclude_dirs)
    if not files:
        print("No files found. Run from your project root or pass --project.")
        return files

    print(f"Found {len(files)} file(s) to translate:\n")
    for i, path in enumerate(files[:MAX_LISTED_FILES], 1):
        print(f"  {i}. {os.path.relpath(path, config.project_root)}")
    if len(files) > MAX_LISTED_FILES:
        print(f"  ... and {len(files) - MAX_LISTED_FILES} more file(s)")
    by_type = ", ".join(f"{t}: {n}" for t, n in sorted(count_by_type(files).items()))
    print(f"\nTotal: {len(files)} file(s) ({by_type})")
    return files


def cmd_translate(config, files=None) -> int:
    if files is None:
        files = scan_files(config.project_root, config.tool_root, config.exclude_dirs)
    if not files:
        print("No files found to translate.")
        return 0
    report = TranslationEngine(config).translate_files(files)
    print("\n" + report.summary())
    return 1 if report.failed and not report.succeeded else 0


def cmd_test(config) -> int:
    sandbox = tempfile.mkdtemp(prefix="arabic-localization-test-")
    print(f"Created test sandbox: {sandbox}\n")
    samples = {
        "test.html": SAMPLE_HTML,
        "test.json": json.dumps(SAMPLE_JSON, indent=2),
        "test.js": SAMPLE_JS,
    }
    paths = []
    for name, content in samples.items():
        path = os.path.join(sandbox, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        paths.append(path)

    config.project_root = sandbox
    TranslationEngine(config).translate_files(paths)

    print("\n" + "=" * 50)
    print("TRANSLATED FILES OUTPUT:")
    print("=" * 50 + "\n")
    for path in paths:
        output = get_output_path(path)
        print(f"--- {os.path.basename(output)} ---")
        with open(output, "r", encoding="utf-8") as f:
            print(f.read())
        print()
    print(f"Test files are in: {sandbox}")
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.settings, args.project)
        if args.no_ai:
            config.ai_enabled = False

        if args.command == "scan":
            cmd_scan(config)
            return 0
        if args.command == "translate":
            return cmd_translate(config)
        if args.command == "test":
            return cmd_test(config)

        files = cmd_scan(config)
        print("\n" + "=" * 50 + "\n")
        return cmd_translate(config, files)
    except (OSError, ValueError) as e:
        log.error("Fatal error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
