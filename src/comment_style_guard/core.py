# Comment style rules for r/ProgrammerHumor-flavoured posts and comments.
#
# Runs four compiled regex rules against the full text of a document and returns
# point diagnostics in a fixed order: import, semicolon, return, rick-roll.

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Iterator

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

RICK_ROLL_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


class DiagnosticCode(IntEnum):
    IMPORT = 2
    RETURN = 3
    SEMICOLON = 4
    RICK_ROLL = 5


class DiagnosticSeverity(IntEnum):
    """Numeric values match the Language Server Protocol."""

    ERROR = 1


MESSAGES: dict[DiagnosticCode, str] = {
    DiagnosticCode.IMPORT: 'All posts and comments should start with an "import" declaration.',
    DiagnosticCode.RETURN: "All comments must return a value",
    DiagnosticCode.SEMICOLON: "For comments, every sentence must end with a semicolon",
    DiagnosticCode.RICK_ROLL: (
        "Every post linking to something must contain a second, identical-looking link to a rick-roll"
    ),
}

# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Position:
    line: int
    character: int


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position

    @classmethod
    def point(cls, line: int, character: int) -> Range:
        pos = Position(line, character)
        return cls(start=pos, end=pos)


@dataclass(frozen=True)
class Diagnostic:
    code: DiagnosticCode
    range: Range
    severity: DiagnosticSeverity = DiagnosticSeverity.ERROR

    @classmethod
    def at(cls, code: DiagnosticCode, line: int, character: int = 0) -> Diagnostic:
        return cls(code=code, range=Range.point(line, character))

    @property
    def message(self) -> str:
        return MESSAGES[self.code]

    def to_payload(self) -> dict[str, object]:
        return {
            "type": "Diagnostic",
            "code": int(self.code),
            "severity": int(self.severity),
            "message": self.message,
            "range": {
                "start": {"line": self.range.start.line, "character": self.range.start.character},
                "end": {"line": self.range.end.line, "character": self.range.end.character},
            },
        }


@dataclass(frozen=True)
class LinkOccurrence:
    anchor: str
    target: str
    line: int
    column: int


@dataclass(frozen=True)
class Lines:
    """The lines of one document snapshot, in order."""

    items: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[str]:
        return iter(self.items)

    @property
    def first(self) -> str | None:
        return self.items[0] if self.items else None

    @property
    def last(self) -> str | None:
        return self.items[-1] if self.items else None

    @property
    def last_index(self) -> int:
        return len(self.items) - 1

    def with_lookahead(self) -> Iterator[tuple[int, str, bool]]:
        """Yield ``(index, line, is_last)`` for every line."""
        last = self.last_index
        for index, line in enumerate(self.items):
            yield index, line, index == last

    def internal(self) -> Iterator[tuple[int, str]]:
        """Lines that are neither first nor last."""
        for index, line, is_last in self.with_lookahead():
            if index == 0 or is_last:
                continue
            yield index, line


Rule = Callable[[Lines], list[Diagnostic]]

# ---------------------------------------------------------------------------
# Compiled patterns
# ---------------------------------------------------------------------------

_IMPORT_RE = re.compile(r"\bimport\b", re.IGNORECASE)
_RETURN_RE = re.compile(r"\breturn\b", re.IGNORECASE)
# Also flags numbered lists ("1. foo"); accepted.
_SENTENCE_END_RE = re.compile(r"\w\.\s|.+[^;]$")
_MARKDOWN_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")

# ---------------------------------------------------------------------------
# Line scanner
# ---------------------------------------------------------------------------


def scan_lines(text: str) -> Lines:
    """Split ``text`` on ``\\n`` (tolerating ``\\r\\n``).

    A trailing line terminator does not start a new line, so ``"a\\n"`` has one
    line and ``""`` has none.
    """
    if not text:
        return Lines(())
    raw = text.split("\n")
    if raw[-1] == "":
        raw.pop()
    return Lines(tuple(line[:-1] if line.endswith("\r") else line for line in raw))


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def check_import(lines: Lines) -> list[Diagnostic]:
    first = lines.first
    if first is None or _IMPORT_RE.search(first):
        return []
    return [Diagnostic.at(DiagnosticCode.IMPORT, 0)]


def check_return(lines: Lines) -> list[Diagnostic]:
    if not lines:
        return []
    # The import line can never double as the return line.
    if len(lines) == 1:
        return [Diagnostic.at(DiagnosticCode.RETURN, 0)]
    if _RETURN_RE.search(lines.last):
        return []
    return [Diagnostic.at(DiagnosticCode.RETURN, lines.last_index)]


def check_semicolons(lines: Lines) -> list[Diagnostic]:
    out: list[Diagnostic] = []
    for index, line in lines.internal():
        for m in _SENTENCE_END_RE.finditer(line):
            out.append(Diagnostic.at(DiagnosticCode.SEMICOLON, index, m.end() - 2))
    return out


def collate_links(lines: Lines) -> dict[str, list[LinkOccurrence]]:
    """Group every markdown link by anchor text, in first-seen order."""
    groups: dict[str, list[LinkOccurrence]] = {}
    for index, line in enumerate(lines):
        for m in _MARKDOWN_LINK_RE.finditer(line):
            occurrence = LinkOccurrence(anchor=m.group(1), target=m.group(2), line=index, column=m.start())
            groups.setdefault(occurrence.anchor, []).append(occurrence)
    return groups


def check_rick_rolls(lines: Lines) -> list[Diagnostic]:
    out: list[Diagnostic] = []
    for occurrences in collate_links(lines).values():
        if any(o.target == RICK_ROLL_URL for o in occurrences):
            continue
        out.extend(Diagnostic.at(DiagnosticCode.RICK_ROLL, o.line, o.column) for o in occurrences)
    return out


# ---------------------------------------------------------------------------
# Pipeline wiring
# ---------------------------------------------------------------------------

# Order is part of the output contract. Semicolon diagnostics only land on
# internal lines, which all precede the last line checked by the return rule.
RULES: tuple[Rule, ...] = (
    check_import,
    check_semicolons,
    check_return,
    check_rick_rolls,
)


def _run_pipeline(lines: Lines, rules: tuple[Rule, ...]) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for rule in rules:
        diagnostics.extend(rule(lines))
    return diagnostics


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def compute_diagnostics(text: str) -> list[Diagnostic]:
    """Check a full document snapshot against every comment style rule.

    Args:
        text: The complete current text of the post or comment.

    Returns:
        Point diagnostics ordered import, semicolon (by line), return, then
        rick-roll links grouped by anchor text in first-seen order. Empty text
        yields an empty list.
    """
    lines = scan_lines(text)
    if not lines:
        return []
    return _run_pipeline(lines, RULES)


def analyze_text(text: str) -> dict:
    """Check text and return a JSON-ready summary.

    Returns:
        Dict with keys: is_valid, diagnostic_count, codes (sorted distinct
        codes), diagnostics (list of payload dicts).
    """
    diagnostics = compute_diagnostics(text)
    return {
        "is_valid": not diagnostics,
        "diagnostic_count": len(diagnostics),
        "codes": sorted({int(d.code) for d in diagnostics}),
        "diagnostics": [d.to_payload() for d in diagnostics],
    }
