"""Tests for unified diff parsing and file unit reconstruction."""

from __future__ import annotations

import pytest

from review_scan.diff_parser import build_file_units, parse_unified_diff, should_skip_path

SIMPLE_DIFF = """\
diff --git a/src/app.js b/src/app.js
index 1111111..2222222 100644
--- a/src/app.js
+++ b/src/app.js
@@ -1,3 +1,4 @@
 const a = 1;
-const b = eval(old);
+const b = eval(input);
+const c = eval(more);
 module.exports = a;
"""

NEW_AND_DELETED_DIFF = """\
diff --git a/old.js b/old.js
deleted file mode 100644
index 3333333..0000000
--- a/old.js
+++ /dev/null
@@ -1,2 +0,0 @@
-eval(x);
-eval(y);
diff --git a/pkg/new.py b/pkg/new.py
new file mode 100644
index 0000000..4444444
--- /dev/null
+++ b/pkg/new.py
@@ -0,0 +1,2 @@
+def collect(items=[]):
+    return items
"""


def test_parse_simple_diff() -> None:
    parsed = parse_unified_diff(SIMPLE_DIFF)
    assert len(parsed) == 1

    file_diff = parsed[0]
    assert file_diff.path == "src/app.js"
    assert file_diff.is_deleted_file is False
    assert len(file_diff.hunks) == 1

    hunk = file_diff.hunks[0]
    assert (hunk.old_start, hunk.old_count, hunk.new_start, hunk.new_count) == (1, 3, 1, 4)
    assert [line.kind for line in hunk.lines] == ["context", "delete", "add", "add", "context"]

    deleted = hunk.lines[1]
    assert deleted.content == "const b = eval(old);"
    assert deleted.old_lineno == 2
    assert deleted.new_lineno is None

    added = hunk.lines[2]
    assert added.content == "const b = eval(input);"
    assert added.old_lineno is None
    assert added.new_lineno == 2


def test_changed_lines_and_reconstruction() -> None:
    file_diff = parse_unified_diff(SIMPLE_DIFF)[0]
    assert file_diff.changed_lines() == frozenset({2, 3})
    assert file_diff.reconstruct_content() == "\n".join(
        [
            "const a = 1;",
            "const b = eval(input);",
            "const c = eval(more);",
            "module.exports = a;",
        ]
    )


def test_reconstruction_pads_unseen_lines() -> None:
    diff_text = "\n".join(
        [
            "--- a/src/late.py",
            "+++ b/src/late.py",
            "@@ -10,2 +10,3 @@",
            " first = 1",
            "+second = eval(x)",
            " third = 3",
            "",
        ]
    )
    file_diff = parse_unified_diff(diff_text)[0]
    lines = file_diff.reconstruct_content().split("\n")
    assert len(lines) == 12
    assert lines[:9] == [""] * 9
    assert lines[9:] == ["first = 1", "second = eval(x)", "third = 3"]
    assert file_diff.changed_lines() == frozenset({11})


def test_parse_new_and_deleted_files() -> None:
    parsed = parse_unified_diff(NEW_AND_DELETED_DIFF)
    assert [file_diff.path for file_diff in parsed] == ["old.js", "pkg/new.py"]
    assert parsed[0].is_deleted_file is True
    assert [line.kind for line in parsed[0].hunks[0].lines] == ["delete", "delete"]
    assert parsed[1].is_deleted_file is False
    assert [line.new_lineno for line in parsed[1].hunks[0].lines] == [1, 2]


def test_blank_line_inside_hunk_is_context() -> None:
    diff_text = "\n".join(
        [
            "--- a/notes.py",
            "+++ b/notes.py",
            "@@ -1,3 +1,3 @@",
            " a = 1",
            "",
            "-b = 2",
            "+b = 3",
        ]
    )
    hunk = parse_unified_diff(diff_text)[0].hunks[0]
    assert [line.kind for line in hunk.lines] == ["context", "context", "delete", "add"]
    assert hunk.lines[3].new_lineno == 3


def test_removed_line_that_looks_like_a_header() -> None:
    diff_text = "\n".join(
        [
            "--- a/schema.sql",
            "+++ b/schema.sql",
            "@@ -1,2 +1,1 @@",
            "--- drop the legacy table",
            " create table t(id int);",
        ]
    )
    parsed = parse_unified_diff(diff_text)
    assert len(parsed) == 1
    lines = parsed[0].hunks[0].lines
    assert [line.kind for line in lines] == ["delete", "context"]
    assert lines[0].content == "-- drop the legacy table"


def test_plain_diff_with_multiple_files() -> None:
    diff_text = "\n".join(
        [
            "--- a/one.py",
            "+++ b/one.py",
            "@@ -1 +1 @@",
            "-x = 1",
            "+x = 2",
            "--- a/two.py",
            "+++ b/two.py",
            "@@ -1 +1 @@",
            "-y = 1",
            "+y = 2",
        ]
    )
    parsed = parse_unified_diff(diff_text)
    assert [file_diff.path for file_diff in parsed] == ["one.py", "two.py"]
    assert all(len(file_diff.hunks) == 1 for file_diff in parsed)


def test_invalid_hunk_header_raises() -> None:
    diff_text = "--- a/x.py\n+++ b/x.py\n@@ -a,b +c @@\n+x = 1\n"
    with pytest.raises(ValueError, match="Invalid hunk header"):
        parse_unified_diff(diff_text)


@pytest.mark.parametrize(
    ("path", "skipped"),
    [
        ("package-lock.json", True),
        ("web/yarn.lock", True),
        ("go.sum", True),
        ("static/app.min.js", True),
        ("static/app.js.map", True),
        ("assets/logo.svg", True),
        ("node_modules/left-pad/index.js", True),
        ("services/api/vendor/lib.go", True),
        ("src/app.js", False),
        ("pkg/builder.py", False),
    ],
)
def test_should_skip_path(path: str, skipped: bool) -> None:
    assert should_skip_path(path) is skipped


def test_build_file_units_drops_deleted_and_skipped_files() -> None:
    diff_text = NEW_AND_DELETED_DIFF + "\n".join(
        [
            "diff --git a/yarn.lock b/yarn.lock",
            "--- a/yarn.lock",
            "+++ b/yarn.lock",
            "@@ -1 +1 @@",
            "-a",
            "+b",
            "",
        ]
    )
    units = build_file_units(diff_text)
    assert [unit.path for unit in units] == ["pkg/new.py"]
    assert units[0].changed_lines == frozenset({1, 2})
    assert units[0].content == "def collect(items=[]):\n    return items"
