"""Arabic localizer — translates English UI text in project files to Arabic."""

import re

# Characters stripped from a word before the punctuation-insensitive lookup.
PUNCTUATION_RE = re.compile(r"""[.,;:!?()\[\]{}'"]""")

# Runs of whitespace separating word tokens in the word-by-word fallback.
WHITESPACE_RE = re.compile(r"\s+")

# Suffix appended to translated sibling files: home.json -> home-ar.json
OUTPUT_SUFFIX = "-ar"
