"""Roll-up of findings across files."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from review_scan.engine import FileResult
from review_scan.rules.base import Finding

NO_ISSUES_MESSAGE = "No issues found. Code looks good!"


@dataclass(slots=True)
class SeverityCounts:
    """Finding totals per severity bucket."""

    total: int = 0
    error: int = 0
    warning: int = 0
    info: int = 0

    def buckets(self) -> list[tuple[str, int]]:
        """Severity buckets, most severe first."""
        return [("error", self.error), ("warning", self.warning), ("info", self.info)]

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "error": self.error,
            "warning": self.warning,
            "info": self.info,
        }


def count_findings(results: Iterable[FileResult]) -> SeverityCounts:
    counts = SeverityCounts()
    for result in results:
        for finding in result.findings:
            counts.total += 1
            if finding.severity == "error":
                counts.error += 1
            elif finding.severity == "warning":
                counts.warning += 1
            else:
                counts.info += 1
    return counts


def plural(count: int, word: str) -> str:
    return word if count == 1 else f"{word}s"


def generate_summary(results: Iterable[FileResult]) -> str:
    """Render a Markdown summary of all findings."""
    counts = count_findings(results)
    if counts.total == 0:
        return f"**Review scan**: {NO_ISSUES_MESSAGE}"

    lines = [
        "## Review scan summary",
        "",
        f"Found **{counts.total}** {plural(counts.total, 'issue')}:",
    ]
    for label, value in counts.buckets():
        if value > 0:
            lines.append(f"- **{value}** {plural(value, label)}")
    return "\n".join(lines)


def format_review_comment(finding: Finding) -> str:
    """Render the body of a line-anchored review comment."""
    return "\n".join(
        [
            f"**{finding.rule_name}** ({finding.severity}): {finding.message}",
            "",
            f"Suggestion: {finding.suggestion}",
            "",
            f"<sub>Rule: {finding.rule_id}</sub>",
        ]
    )
