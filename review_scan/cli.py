"""CLI entrypoint for review-scan."""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Annotated

import typer

from review_scan import __version__
from review_scan.config import (
    FAIL_ON_CHOICES,
    AppConfig,
    default_config_template,
    load_app_config,
)
from review_scan.diff_parser import build_file_units
from review_scan.discover import collect_files
from review_scan.engine import FileResult, analyze_diff, analyze_file
from review_scan.git import GitError, get_diff
from review_scan.github import (
    GitHubClient,
    GitHubError,
    load_pull_request_context,
    post_review,
    write_action_outputs,
)
from review_scan.output import render_human, render_json
from review_scan.rules import build_rules, list_rule_info
from review_scan.rules.base import SEVERITIES, Rule, severity_rank
from review_scan.summary import count_findings, generate_summary

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="review-scan",
    no_args_is_help=True,
    help="Scan source files and diffs for security, bug, performance and style issues.",
)


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    """Root command callback."""
    _ = version
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("scan")
def scan_command(
    targets: Annotated[
        list[Path] | None, typer.Argument(help="Files or directories to scan.", show_default=".")
    ] = None,
    severity: Annotated[
        str | None,
        typer.Option("--severity", "-s", help="Minimum severity: info|warning|error."),
    ] = None,
    format: Annotated[
        str | None, typer.Option(help="Output format: human|json.", show_default="human")
    ] = None,
    fail_on: Annotated[
        str | None,
        typer.Option(help="Exit nonzero at this severity: info|warning|error|never."),
    ] = None,
    include: Annotated[list[str] | None, typer.Option(help="Include glob pattern.")] = None,
    exclude: Annotated[list[str] | None, typer.Option(help="Exclude glob pattern.")] = None,
    repo: Annotated[Path, typer.Option(help="Directory holding the config file.")] = Path("."),
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Scan files or directories."""
    app_config = _load_config_or_raise(repo, config_file)
    resolved_severity = _choice_or_default(
        value=severity,
        default=app_config.severity,
        allowed=set(SEVERITIES),
        field_name="--severity",
    )
    output_format = _choice_or_default(
        value=format, default=app_config.format, allowed={"human", "json"}, field_name="--format"
    )
    resolved_fail_on = _choice_or_default(
        value=fail_on, default=app_config.fail_on, allowed=FAIL_ON_CHOICES, field_name="--fail-on"
    )
    rules = _build_configured_rules_or_raise(app_config)

    paths = collect_files(
        targets or [Path(".")],
        include=include if include is not None else app_config.include,
        exclude=exclude if exclude is not None else app_config.exclude,
        excluded_dirs=app_config.exclude_dirs,
    )
    results: list[FileResult] = []
    for path in paths:
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable file %s: %s", path, exc)
            continue
        display_path = _display_path(path)
        logger.debug("Analyzing %s", display_path)
        results.append(
            FileResult(
                path=display_path,
                findings=analyze_file(display_path, content, resolved_severity, rules=rules),
            )
        )

    _emit_results(
        results,
        output_format=output_format,
        severity=resolved_severity,
        input_source="files",
    )
    if _reaches_fail_threshold(results, resolved_fail_on):
        raise typer.Exit(code=1)


@app.command("diff")
def diff_command(
    diff_file: Annotated[Path | None, typer.Option(help="Path to unified diff file.")] = None,
    stdin: Annotated[bool, typer.Option(help="Read unified diff from stdin.")] = False,
    repo: Annotated[Path, typer.Option(help="Repository path.")] = Path("."),
    base: Annotated[str | None, typer.Option(help="Base git revision.")] = None,
    head: Annotated[str | None, typer.Option(help="Head git revision.")] = None,
    severity: Annotated[
        str | None,
        typer.Option("--severity", "-s", help="Minimum severity: info|warning|error."),
    ] = None,
    format: Annotated[
        str | None, typer.Option(help="Output format: human|json.", show_default="human")
    ] = None,
    fail_on: Annotated[
        str | None,
        typer.Option(help="Exit nonzero at this severity: info|warning|error|never."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Scan only the lines added by a unified diff."""
    app_config = _load_config_or_raise(repo, config_file)
    resolved_severity = _choice_or_default(
        value=severity,
        default=app_config.severity,
        allowed=set(SEVERITIES),
        field_name="--severity",
    )
    output_format = _choice_or_default(
        value=format, default=app_config.format, allowed={"human", "json"}, field_name="--format"
    )
    resolved_fail_on = _choice_or_default(
        value=fail_on, default=app_config.fail_on, allowed=FAIL_ON_CHOICES, field_name="--fail-on"
    )
    if diff_file and stdin:
        raise typer.BadParameter("Use either --diff-file or --stdin, not both.")
    if (base is None) ^ (head is None):
        raise typer.BadParameter("Provide both --base and --head together.")

    rules = _build_configured_rules_or_raise(app_config)
    diff_text, input_source = _resolve_diff_input(
        diff_file=diff_file, stdin=stdin, repo=repo, base=base, head=head
    )
    try:
        units = build_file_units(diff_text)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="diff") from exc

    logger.debug("Found %d files to analyze", len(units))
    results = analyze_diff(units, resolved_severity, rules=rules)
    _emit_results(
        results,
        output_format=output_format,
        severity=resolved_severity,
        input_source=input_source,
    )
    if _reaches_fail_threshold(results, resolved_fail_on):
        raise typer.Exit(code=1)


@app.command("github")
def github_command(
    token: Annotated[
        str | None,
        typer.Option(envvar="GITHUB_TOKEN", help="GitHub token.", show_default=False),
    ] = None,
    severity: Annotated[
        str | None,
        typer.Option("--severity", "-s", help="Minimum severity: info|warning|error."),
    ] = None,
    max_comments: Annotated[
        int | None, typer.Option(help="Maximum inline review comments.", min=0)
    ] = None,
    api_url: Annotated[str | None, typer.Option(help="GitHub API base URL.")] = None,
    repo: Annotated[Path, typer.Option(help="Directory holding the config file.")] = Path("."),
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Review the current pull request and post findings to GitHub."""
    app_config = _load_config_or_raise(repo, config_file)
    resolved_severity = _choice_or_default(
        value=severity,
        default=app_config.severity,
        allowed=set(SEVERITIES),
        field_name="--severity",
    )
    resolved_max_comments = (
        max_comments if max_comments is not None else app_config.github.max_comments
    )
    rules = _build_configured_rules_or_raise(app_config)

    if not token:
        typer.echo("error: GitHub token is required", err=True)
        raise typer.Exit(code=1)

    try:
        ctx = load_pull_request_context(os.environ)
        if ctx is None:
            typer.echo("Not a pull request event. Skipping.")
            return

        logger.info("Analyzing PR #%d in %s/%s", ctx.number, ctx.owner, ctx.repo)
        with GitHubClient(token, api_url=api_url or app_config.github.api_url) as client:
            units = build_file_units(client.get_pull_request_diff(ctx))
            logger.info("Found %d files to analyze", len(units))
            results = analyze_diff(units, resolved_severity, rules=rules)
            outcome = post_review(client, ctx, results, max_comments=resolved_max_comments)
    except (GitHubError, ValueError) as exc:
        typer.echo(f"error: review failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    counts = count_findings(results)
    summary = generate_summary(results)
    output_path = os.environ.get("GITHUB_OUTPUT")
    if output_path:
        write_action_outputs(Path(output_path), issues_found=counts.total, summary=summary)

    typer.echo(summary)
    if outcome.fell_back_to_summary:
        typer.echo("Inline comments were rejected; posted a summary comment instead.", err=True)
    if counts.error:
        typer.echo(
            f"Found {counts.total} issues including errors. Review recommended.", err=True
        )


@app.command("rules")
def rules_command(
    repo: Annotated[Path, typer.Option(help="Directory holding the config file.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """List available rules."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(repo, config_file)
    active_ids = {rule.rule_id for rule in _build_configured_rules_or_raise(app_config)}
    rule_info = list_rule_info()

    if output_format == "json":
        payload = {
            "rules": [
                {
                    "rule_id": item.rule_id,
                    "name": item.name,
                    "description": item.description,
                    "category": item.category,
                    "severity": item.severity,
                    "languages": list(item.languages),
                    "kind": item.kind,
                    "enabled": item.rule_id in active_ids,
                }
                for item in rule_info
            ],
            "meta": {"config_source": app_config.source},
        }
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = ["Available rules:"]
    for item in rule_info:
        status = "enabled" if item.rule_id in active_ids else "disabled"
        lines.append(
            f"- {item.rule_id} [{item.severity}, {status}] {item.name}: {item.description}"
        )
    typer.echo("\n".join(lines))


@app.command("config")
def config_command(
    repo: Annotated[Path, typer.Option(help="Directory holding the config file.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Show resolved configuration."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(repo, config_file)
    payload = app_config.to_dict()
    payload["active_rule_ids"] = [
        rule.rule_id for rule in _build_configured_rules_or_raise(app_config)
    ]

    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = [
        "Resolved configuration:",
        f"- source: {payload['source'] or 'defaults'}",
        f"- severity: {payload['severity']}",
        f"- format: {payload['format']}",
        f"- fail_on: {payload['fail_on']}",
        f"- include: {payload['include']}",
        f"- exclude: {payload['exclude']}",
        f"- rules.enable: {payload['rules']['enable']}",
        f"- rules.disable: {payload['rules']['disable']}",
        f"- github.max_comments: {payload['github']['max_comments']}",
        f"- active_rule_ids: {payload['active_rule_ids']}",
    ]
    typer.echo("\n".join(lines))


@app.command("config-init")
def config_init_command(
    out: Annotated[Path, typer.Option(help="Output path for starter config TOML.")] = Path(
        ".review-scan.toml"
    ),
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite if file already exists."),
    ] = False,
) -> None:
    """Create a starter repository config file."""
    out_path = out.resolve()
    if out_path.exists() and not force:
        raise typer.BadParameter(
            f"Refusing to overwrite existing file: {out_path}. Use --force to overwrite."
        )
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(default_config_template(), encoding="utf-8")
    typer.echo(f"Wrote starter config: {out_path}")


def main() -> None:
    """Console script entrypoint."""
    app()


def _emit_results(
    results: list[FileResult],
    *,
    output_format: str,
    severity: str,
    input_source: str,
) -> None:
    counts = count_findings(results)
    if output_format == "json":
        typer.echo(
            render_json(results, counts, severity=severity, input_source=input_source)
        )
    else:
        typer.echo(render_human(results, counts, files_analyzed=len(results)))


def _reaches_fail_threshold(results: list[FileResult], fail_on: str) -> bool:
    if fail_on == "never":
        return False
    threshold = severity_rank(fail_on)
    return any(
        severity_rank(finding.severity) >= threshold
        for result in results
        for finding in result.findings
    )


def _resolve_diff_input(
    *,
    diff_file: Path | None,
    stdin: bool,
    repo: Path,
    base: str | None,
    head: str | None,
) -> tuple[str, str]:
    if diff_file is not None:
        return (diff_file.read_text(encoding="utf-8"), f"diff_file:{diff_file}")

    if stdin:
        return (sys.stdin.read(), "stdin")

    try:
        diff_text = get_diff(repo, base, head)
    except GitError as exc:
        raise typer.BadParameter(str(exc)) from exc
    return (diff_text, "git_range" if base is not None else "git_working_tree")


def _display_path(path: Path) -> str:
    try:
        return path.resolve().relative_to(Path.cwd().resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def _load_config_or_raise(repo: Path, config_file: Path | None = None) -> AppConfig:
    try:
        return load_app_config(repo, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _build_configured_rules_or_raise(app_config: AppConfig) -> tuple[Rule, ...]:
    try:
        return build_rules(
            enabled_rule_ids=app_config.rule_enable,
            disabled_rule_ids=app_config.rule_disable,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config.rules") from exc


def _choice_or_default(
    *,
    value: str | None,
    default: str,
    allowed: set[str],
    field_name: str,
) -> str:
    resolved = (value or default).lower()
    if resolved not in allowed:
        choices = ", ".join(sorted(allowed))
        raise typer.BadParameter(f"{field_name} must be one of: {choices}", param_hint=field_name)
    return resolved
