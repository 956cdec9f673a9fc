"""Data model for translation candidates, per-file results and run state."""

from dataclasses import dataclass, field


@dataclass
class Candidate:
    """A code literal considered for translation."""
    text: str              # Decoded value (raw body for JSX attributes)
    kind: str              # "literal" | "attribute" (JSX attribute string)
    start: int = -1        # UTF-8 byte offsets of the literal, quotes included
    end: int = -1
    quote: str = ""        # Delimiter of the literal: " ' or `
    attribute: str = ""    # Attribute name for kind == "attribute"


@dataclass
class TranslationResult:
    """Outcome of translating one buffer.

    ``status`` is "translated" when at least one span changed, "unchanged"
    when nothing did, and "parse_failed" when the input could not be parsed
    (``content`` is then the original buffer).
    """
    content: str
    status: str = "unchanged"
    replacements: int = 0
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status != "parse_failed"

    @classmethod
    def from_rewrite(cls, original: str, rewritten: str,
                     replacements: int) -> "TranslationResult":
        status = "translated" if rewritten != original else "unchanged"
        return cls(content=rewritten, status=status, replacements=replacements)

    @classmethod
    def parse_failed(cls, original: str, error: str) -> "TranslationResult":
        return cls(content=original, status="parse_failed", error=error)


@dataclass
class FileOutcome:
    """What happened to one file during a run."""
    path: str
    file_type: str
    status: str            # "translated" | "unchanged" | "parse_failed" | "failed" | "skipped"
    output_path: str = ""
    error: str = ""


@dataclass
class RunReport:
    """Holds per-file outcomes and counters for one translation run."""
    outcomes: list = field(default_factory=list)
    missing_words: int = 0
    ai_translations: int = 0
    cache_size: int = 0

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.status in ("translated", "unchanged"))

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.status in ("failed", "parse_failed"))

    @property
    def skipped(self) -> int:
        return sum(1 for o in self.outcomes if o.status == "skipped")

    def add(self, outcome: FileOutcome):
        self.outcomes.append(outcome)

    def failures(self) -> list:
        """Return outcomes that failed or could not be parsed."""
        return [o for o in self.outcomes if o.status in ("failed", "parse_failed")]

    def summary(self) -> str:
        """Return a human-readable summary of the run."""
        lines = [f"Translation complete: {self.succeeded} succeeded, {self.failed} failed"]
        if self.skipped:
            lines.append(f"Skipped: {self.skipped}")
        if self.missing_words:
            lines.append(f"Missing words found: {self.missing_words}"
                         f" (AI translated {self.ai_translations})")
        lines.append(f"Cache size: {self.cache_size} entries")
        return "\n".join(lines)
