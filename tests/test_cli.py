"""CLI tests for scan, diff, rules and config commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from review_scan import __version__
from review_scan.cli import app

runner = CliRunner()

RISKY_DIFF = "\n".join(
    [
        "diff --git a/src/app.js b/src/app.js",
        "index 1111111..2222222 100644",
        "--- a/src/app.js",
        "+++ b/src/app.js",
        "@@ -1,2 +1,3 @@",
        " const a = eval(legacy);",
        "+const b = eval(input);",
        " module.exports = a;",
        "",
    ]
)


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / "node_modules" / "dep").mkdir(parents=True)
    (root / "src" / "app.js").write_text(
        "const result = eval(input);\nconsole.log(result);\n", encoding="utf-8"
    )
    (root / "src" / "clean.py").write_text("def add(a, b):\n    return a + b\n", encoding="utf-8")
    (root / "node_modules" / "dep" / "index.js").write_text("eval(x);\n", encoding="utf-8")
    monkeypatch.chdir(root)
    return root


def test_root_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("scan", "diff", "rules", "config-init", "github"):
        assert command in result.stdout


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_scan_json_reports_findings_and_fails_on_error(project: Path) -> None:
    result = runner.invoke(app, ["scan", "--format", "json"])
    assert result.exit_code == 1

    payload = json.loads(result.stdout)
    assert set(payload.keys()) == {"files", "counts", "meta"}
    assert [item["path"] for item in payload["files"]] == ["src/app.js", "src/clean.py"]
    findings = payload["files"][0]["findings"]
    assert [(item["rule_id"], item["line"]) for item in findings] == [("SEC002", 1)]
    assert payload["counts"] == {"total": 1, "error": 1, "warning": 0, "info": 0}
    assert payload["meta"]["severity"] == "warning"
    assert payload["meta"]["input_source"] == "files"


def test_scan_severity_info_and_fail_on_never(project: Path) -> None:
    result = runner.invoke(
        app, ["scan", "src", "-s", "info", "--fail-on", "never", "--format", "json"]
    )
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    rule_ids = [item["rule_id"] for item in payload["files"][0]["findings"]]
    assert rule_ids == ["SEC002", "BUG005"]


def test_scan_human_output_for_clean_file(project: Path) -> None:
    result = runner.invoke(app, ["scan", "src/clean.py"])
    assert result.exit_code == 0
    assert "Analyzed 1 file." in result.stdout
    assert "No issues found! Code looks good." in result.stdout


def test_scan_exclude_glob(project: Path) -> None:
    result = runner.invoke(app, ["scan", "--exclude", "*.js", "--format", "json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert [item["path"] for item in payload["files"]] == ["src/clean.py"]


def test_scan_uses_config_defaults(project: Path) -> None:
    (project / ".review-scan.toml").write_text(
        "\n".join(
            [
                'format = "json"',
                'fail_on = "never"',
                "",
                "[rules]",
                'disable = ["SEC002"]',
            ]
        ),
        encoding="utf-8",
    )
    result = runner.invoke(app, ["scan"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["counts"]["total"] == 0


def test_scan_rejects_bad_severity(project: Path) -> None:
    result = runner.invoke(app, ["scan", "--severity", "fatal"])
    assert result.exit_code == 2
    assert "--severity must be one of" in result.output


def test_scan_rejects_unknown_rule_ids_in_config(project: Path) -> None:
    (project / ".review-scan.toml").write_text('[rules]\nenable = ["NOPE1"]\n', encoding="utf-8")
    result = runner.invoke(app, ["scan"])
    assert result.exit_code == 2
    assert "Unknown rule ids: NOPE1" in result.output


def test_diff_stdin_scopes_to_added_lines(tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        ["diff", "--repo", str(tmp_path), "--stdin", "--format", "json"],
        input=RISKY_DIFF,
    )
    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["meta"]["input_source"] == "stdin"
    assert payload["files"][0]["path"] == "src/app.js"
    findings = payload["files"][0]["findings"]
    assert [(item["rule_id"], item["line"]) for item in findings] == [("SEC002", 2)]


def test_diff_file_input(tmp_path: Path) -> None:
    diff_path = tmp_path / "change.diff"
    diff_path.write_text(RISKY_DIFF, encoding="utf-8")
    result = runner.invoke(
        app,
        [
            "diff",
            "--repo",
            str(tmp_path),
            "--diff-file",
            str(diff_path),
            "--fail-on",
            "never",
        ],
    )
    assert result.exit_code == 0
    assert "src/app.js" in result.stdout
    assert "SEC002" in result.stdout


def test_diff_rejects_conflicting_inputs(tmp_path: Path) -> None:
    diff_path = tmp_path / "change.diff"
    diff_path.write_text(RISKY_DIFF, encoding="utf-8")
    result = runner.invoke(
        app, ["diff", "--repo", str(tmp_path), "--diff-file", str(diff_path), "--stdin"]
    )
    assert result.exit_code == 2

    result = runner.invoke(app, ["diff", "--repo", str(tmp_path), "--base", "HEAD~1"])
    assert result.exit_code == 2


def test_diff_rejects_invalid_hunk_header(tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        ["diff", "--repo", str(tmp_path), "--stdin"],
        input="--- a/x.py\n+++ b/x.py\n@@ nonsense @@\n+x = 1\n",
    )
    assert result.exit_code == 2
    assert "Invalid hunk header" in result.output


def test_rules_command_json_lists_enabled_state(tmp_path: Path) -> None:
    (tmp_path / ".review-scan.toml").write_text(
        '[rules]\ndisable = ["GEN001", "GEN002"]\n', encoding="utf-8"
    )
    result = runner.invoke(app, ["rules", "--repo", str(tmp_path), "--format", "json"])
    assert result.exit_code == 0

    payload = json.loads(result.stdout)
    rules_by_id = {item["rule_id"]: item for item in payload["rules"]}
    assert rules_by_id["SEC001"]["enabled"] is True
    assert rules_by_id["GEN001"]["enabled"] is False
    assert rules_by_id["REACT002"]["kind"] == "block"
    assert payload["meta"]["config_source"] == str(tmp_path.resolve() / ".review-scan.toml")


def test_rules_command_human(tmp_path: Path) -> None:
    result = runner.invoke(app, ["rules", "--repo", str(tmp_path)])
    assert result.exit_code == 0
    assert "Available rules:" in result.stdout
    assert "- SEC001 [error, enabled] SQL Injection Risk:" in result.stdout


def test_config_command_json(tmp_path: Path) -> None:
    (tmp_path / ".review-scan.toml").write_text(
        "\n".join(['severity = "error"', "", "[rules]", 'enable = ["PY001", "SEC001"]']),
        encoding="utf-8",
    )
    result = runner.invoke(app, ["config", "--repo", str(tmp_path), "--format", "json"])
    assert result.exit_code == 0

    payload = json.loads(result.stdout)
    assert payload["severity"] == "error"
    assert payload["rules"]["enable"] == ["PY001", "SEC001"]
    assert payload["active_rule_ids"] == ["SEC001", "PY001"]
    assert payload["github"]["max_comments"] == 20


def test_config_init_writes_template_and_refuses_overwrite(tmp_path: Path) -> None:
    out = tmp_path / ".review-scan.toml"
    result = runner.invoke(app, ["config-init", "--out", str(out)])
    assert result.exit_code == 0
    assert out.exists()

    result = runner.invoke(app, ["config", "--repo", str(tmp_path), "--format", "json"])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["rules"]["disable"] == ["GEN001"]

    result = runner.invoke(app, ["config-init", "--out", str(out)])
    assert result.exit_code == 2
    assert "Refusing to overwrite" in result.output

    result = runner.invoke(app, ["config-init", "--out", str(out), "--force"])
    assert result.exit_code == 0


def test_github_requires_token(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    result = runner.invoke(app, ["github", "--repo", str(tmp_path)])
    assert result.exit_code == 1
    assert "GitHub token is required" in result.output


def test_github_skips_non_pull_request_events(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    event_path = tmp_path / "event.json"
    event_path.write_text(json.dumps({"ref": "refs/heads/main"}), encoding="utf-8")
    monkeypatch.setenv("GITHUB_REPOSITORY", "acme/widgets")
    monkeypatch.setenv("GITHUB_EVENT_PATH", str(event_path))

    result = runner.invoke(app, ["github", "--repo", str(tmp_path), "--token", "t0ken"])
    assert result.exit_code == 0
    assert "Not a pull request event. Skipping." in result.stdout
