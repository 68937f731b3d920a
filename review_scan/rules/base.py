"""Rule variants, severities and the finding model."""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Literal

Severity = Literal["info", "warning", "error"]

SEVERITY_RANK: dict[str, int] = {"info": 0, "warning": 1, "error": 2}
SEVERITIES: tuple[Severity, ...] = ("info", "warning", "error")

ANY_LANGUAGE = "*"

COMMENT_LINE_RE = re.compile(r"^\s*(?://|#|/\*|\*|--|;)")

ContextFilter = Callable[[str, str], bool]


def is_comment_line(line: str) -> bool:
    """Return True when the line starts with a comment leader."""
    return COMMENT_LINE_RE.match(line) is not None


def severity_rank(severity: str) -> int:
    """Return the ordering rank for a severity name."""
    rank = SEVERITY_RANK.get(severity.lower())
    if rank is None:
        choices = ", ".join(SEVERITIES)
        raise ValueError(f"Unknown severity '{severity}'. Expected one of: {choices}")
    return rank


@dataclass(frozen=True, slots=True)
class Finding:
    """A single issue reported for a file."""

    rule_id: str
    rule_name: str
    severity: Severity
    line: int
    message: str
    suggestion: str

    def to_dict(self) -> dict[str, object]:
        return {
            "rule_id": self.rule_id,
            "rule_name": self.rule_name,
            "severity": self.severity,
            "line": self.line,
            "message": self.message,
            "suggestion": self.suggestion,
        }


@dataclass(frozen=True, slots=True)
class BlockIssue:
    """An issue located by a whole-file check."""

    line: int
    message: str
    suggestion: str


@dataclass(frozen=True, slots=True)
class LineRule:
    """Rule matched independently against each non-comment line.

    ``lookahead_lines`` lets the pattern see that many following lines; the
    match itself must still start on the line being scanned.
    """

    rule_id: str
    name: str
    category: str
    severity: Severity
    languages: frozenset[str]
    pattern: re.Pattern[str]
    message: str
    suggestion: str
    context_filter: ContextFilter | None = None
    lookahead_lines: int = 0

    def applies_to(self, language: str) -> bool:
        return ANY_LANGUAGE in self.languages or language in self.languages

    def matches(self, lines: Sequence[str], index: int, path: str) -> bool:
        line = lines[index]
        if self.lookahead_lines:
            window = "\n".join(
                "" if is_comment_line(text) else text
                for text in lines[index : index + 1 + self.lookahead_lines]
            )
            match = self.pattern.search(window)
            if match is None or match.start() > len(line):
                return False
        elif self.pattern.search(line) is None:
            return False

        if self.context_filter is not None and not self.context_filter(line, path):
            return False
        return True


@dataclass(frozen=True, slots=True)
class BlockRule:
    """Rule that inspects the whole file at once."""

    rule_id: str
    name: str
    category: str
    severity: Severity
    languages: frozenset[str]
    check: Callable[[Sequence[str]], list[BlockIssue]]
    description: str

    def applies_to(self, language: str) -> bool:
        return ANY_LANGUAGE in self.languages or language in self.languages


Rule = LineRule | BlockRule


def languages(*tags: str) -> frozenset[str]:
    """Build a language scope; no tags means every language."""
    return frozenset(tags) if tags else frozenset({ANY_LANGUAGE})
