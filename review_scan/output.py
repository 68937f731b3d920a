"""Output rendering."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import click

from review_scan import __version__
from review_scan.engine import FileResult
from review_scan.summary import SeverityCounts, plural

SEVERITY_COLORS = {"error": "red", "warning": "yellow", "info": "blue"}
SEPARATOR = "-" * 33


def render_human(results: list[FileResult], counts: SeverityCounts, *, files_analyzed: int) -> str:
    """Render a colorized per-file listing followed by totals."""
    lines: list[str] = [
        click.style("Review scan", bold=True),
        click.style(
            f"Analyzed {files_analyzed} {plural(files_analyzed, 'file')}.", dim=True
        ),
        "",
    ]

    for result in results:
        if not result.findings:
            continue
        lines.append(click.style(result.path, bold=True))
        for finding in result.findings:
            severity = click.style(
                finding.severity.upper().ljust(7), fg=SEVERITY_COLORS.get(finding.severity)
            )
            location = click.style(f"L{finding.line:>4}", dim=True)
            lines.append(f"  {location}  {severity}  {finding.rule_id}  {finding.message}")
        lines.append("")

    lines.append(click.style(SEPARATOR, bold=True))
    if counts.total == 0:
        lines.append(click.style("No issues found! Code looks good.", fg="green"))
        return "\n".join(lines)

    total = click.style(str(counts.total), bold=True)
    lines.append(f"Found {total} {plural(counts.total, 'issue')}:")
    for label, value in counts.buckets():
        if value > 0:
            lines.append(
                click.style(f"  * {value} {plural(value, label)}", fg=SEVERITY_COLORS[label])
            )
    return "\n".join(lines)


def render_json(
    results: list[FileResult],
    counts: SeverityCounts,
    *,
    severity: str,
    input_source: str,
) -> str:
    """Render stable JSON output for CI and automation."""
    return json.dumps(
        build_json_payload(results, counts, severity=severity, input_source=input_source),
        sort_keys=True,
    )


def build_json_payload(
    results: list[FileResult],
    counts: SeverityCounts,
    *,
    severity: str,
    input_source: str,
) -> dict[str, Any]:
    return {
        "files": [
            {
                "path": result.path,
                "findings": [finding.to_dict() for finding in result.findings],
            }
            for result in results
        ],
        "counts": counts.to_dict(),
        "meta": {
            "generated_at": datetime.now(tz=UTC)
            .replace(microsecond=0)
            .isoformat()
            .replace("+00:00", "Z"),
            "input_source": input_source,
            "severity": severity,
            "version": __version__,
        },
    }
