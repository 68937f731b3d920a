"""Rule engine: applies the rule table to file contents."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from review_scan.languages import detect_language
from review_scan.rules import RULES
from review_scan.rules.base import (
    SEVERITY_RANK,
    BlockRule,
    Finding,
    Rule,
    is_comment_line,
    severity_rank,
)


@dataclass(frozen=True, slots=True)
class FileUnit:
    """A file to analyze, optionally scoped to the lines a diff touched."""

    path: str
    content: str
    changed_lines: frozenset[int] | None = None


@dataclass(slots=True)
class FileResult:
    """Findings for one analyzed file."""

    path: str
    findings: list[Finding] = field(default_factory=list)


def split_lines(content: str) -> list[str]:
    """Split content on newlines without a phantom line after a final newline."""
    if not content:
        return []
    lines = [line[:-1] if line.endswith("\r") else line for line in content.split("\n")]
    if lines[-1] == "":
        lines.pop()
    return lines


def analyze_file(
    path: str,
    content: str,
    min_severity: str = "warning",
    rules: Sequence[Rule] | None = None,
) -> list[Finding]:
    """Run every applicable rule against a file.

    Findings are ordered by rule declaration first and line number second.
    A line rule reports at most once per line. An unrecognized floor falls
    back to the lowest severity.
    """
    floor = SEVERITY_RANK.get(min_severity.lower(), 0)
    language = detect_language(path)
    lines = split_lines(content)
    findings: list[Finding] = []

    for rule in RULES if rules is None else rules:
        if severity_rank(rule.severity) < floor or not rule.applies_to(language):
            continue

        if isinstance(rule, BlockRule):
            for issue in rule.check(lines):
                findings.append(
                    Finding(
                        rule_id=rule.rule_id,
                        rule_name=rule.name,
                        severity=rule.severity,
                        line=issue.line,
                        message=issue.message,
                        suggestion=issue.suggestion,
                    )
                )
            continue

        for index, line in enumerate(lines):
            if is_comment_line(line):
                continue
            if rule.matches(lines, index, path):
                findings.append(
                    Finding(
                        rule_id=rule.rule_id,
                        rule_name=rule.name,
                        severity=rule.severity,
                        line=index + 1,
                        message=rule.message,
                        suggestion=rule.suggestion,
                    )
                )

    return findings


def analyze_diff(
    files: Sequence[FileUnit],
    min_severity: str = "warning",
    rules: Sequence[Rule] | None = None,
) -> list[FileResult]:
    """Analyze file units, keeping only findings on changed lines when known."""
    results: list[FileResult] = []
    for unit in files:
        if not unit.path or not unit.content:
            continue

        findings = analyze_file(unit.path, unit.content, min_severity, rules=rules)
        if unit.changed_lines:
            findings = [finding for finding in findings if finding.line in unit.changed_lines]
        results.append(FileResult(path=unit.path, findings=findings))
    return results
