"""Target discovery tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from review_scan.config import DEFAULT_EXCLUDED_DIRS
from review_scan.discover import collect_files
from review_scan.languages import detect_language


def _touch(root: Path, rel_path: str) -> None:
    target = root / rel_path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text("x = 1\n", encoding="utf-8")


def test_walks_directories_in_sorted_order(tmp_path: Path) -> None:
    for rel_path in [
        "src/b.py",
        "src/a.js",
        "src/nested/c.go",
        "src/README.md",
        "node_modules/dep/index.js",
        ".venv/lib/site.py",
    ]:
        _touch(tmp_path, rel_path)

    files = collect_files([tmp_path], excluded_dirs=DEFAULT_EXCLUDED_DIRS)
    assert [path.relative_to(tmp_path).as_posix() for path in files] == [
        "src/a.js",
        "src/b.py",
        "src/nested/c.go",
    ]


def test_explicit_file_targets_are_kept(tmp_path: Path) -> None:
    _touch(tmp_path, "notes/setup.txt")
    files = collect_files([tmp_path / "notes" / "setup.txt"])
    assert files == [tmp_path / "notes" / "setup.txt"]


def test_include_and_exclude_globs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for rel_path in ["src/app.js", "src/app.test.js", "lib/util.py"]:
        _touch(tmp_path, rel_path)
    monkeypatch.chdir(tmp_path)

    files = collect_files([Path(".")], include=["src/*"], exclude=["*.test.js"])
    assert [path.as_posix() for path in files] == ["src/app.js"]


def test_missing_target_is_logged_and_skipped(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING, logger="review_scan.discover"):
        files = collect_files([tmp_path / "missing.py"])
    assert files == []
    assert "not found, skipping" in caplog.text


@pytest.mark.parametrize(
    ("path", "language"),
    [
        ("src/App.TSX", "tsx"),
        ("lib/util.py", "py"),
        ("cmd/main.go", "go"),
        ("web/index.mjs", "js"),
        ("Makefile", "makefile"),
        ("notes/readme.txt", "txt"),
        ("dir.with.dots/file.rb", "rb"),
    ],
)
def test_detect_language(path: str, language: str) -> None:
    assert detect_language(path) == language
