"""Unified diff parsing into analyzable file units."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal

from review_scan.engine import FileUnit

HUNK_HEADER_RE = re.compile(
    r"^@@ -(?P<old_start>\d+)(?:,(?P<old_count>\d+))? "
    r"\+(?P<new_start>\d+)(?:,(?P<new_count>\d+))? @@(?P<section>.*)$"
)

SKIPPED_ASSET_RE = re.compile(r"\.(?:lock|min\.|map|woff|ttf|png|jpg|gif|svg|ico|pdf)")
SKIPPED_DIR_RE = re.compile(r"(?:^|/)(?:node_modules|vendor|dist|build|\.next)/")
LOCKFILE_NAMES = frozenset(
    {"package-lock.json", "yarn.lock", "pnpm-lock.yaml", "Cargo.lock", "go.sum"}
)

DEV_NULL = "/dev/null"


@dataclass(slots=True)
class Line:
    """A single line within a diff hunk."""

    kind: Literal["context", "add", "delete", "meta"]
    content: str
    old_lineno: int | None
    new_lineno: int | None


@dataclass(slots=True)
class Hunk:
    """A diff hunk."""

    header: str
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: list[Line] = field(default_factory=list)


@dataclass(slots=True)
class FileDiff:
    """A parsed file-level diff."""

    old_path: str | None
    new_path: str | None
    hunks: list[Hunk] = field(default_factory=list)

    @property
    def path(self) -> str:
        """Best-effort canonical path for reporting."""
        if self.new_path and self.new_path != DEV_NULL:
            return self.new_path
        if self.old_path and self.old_path != DEV_NULL:
            return self.old_path
        return "<unknown>"

    @property
    def is_deleted_file(self) -> bool:
        return self.new_path == DEV_NULL and self.old_path not in {None, DEV_NULL}

    def changed_lines(self) -> frozenset[int]:
        """New-side line numbers of added lines."""
        return frozenset(
            line.new_lineno
            for hunk in self.hunks
            for line in hunk.lines
            if line.kind == "add" and line.new_lineno is not None
        )

    def reconstruct_content(self) -> str:
        """Rebuild the post-change file from the lines the diff shows.

        Context and added lines land on their new line numbers; lines the
        diff does not show stay empty so numbering matches the real file.
        """
        placed: dict[int, str] = {}
        for hunk in self.hunks:
            for line in hunk.lines:
                if line.kind in {"context", "add"} and line.new_lineno is not None:
                    placed[line.new_lineno] = line.content
        if not placed:
            return ""
        return "\n".join(placed.get(lineno, "") for lineno in range(1, max(placed) + 1))


def parse_unified_diff(diff_text: str) -> list[FileDiff]:
    """Parse unified diff text into file/hunk/line models."""
    files: list[FileDiff] = []
    current_file: FileDiff | None = None
    current_hunk: Hunk | None = None
    old_lineno = 0
    new_lineno = 0

    def flush_file() -> None:
        nonlocal current_file, current_hunk
        if current_file is not None and current_hunk is not None:
            current_file.hunks.append(current_hunk)
        if current_file is not None:
            files.append(current_file)
        current_file = None
        current_hunk = None

    for raw_line in diff_text.split("\n"):
        if raw_line.startswith("diff --git "):
            flush_file()
            current_file = _file_from_git_header(raw_line)
            continue

        if current_hunk is None or _hunk_exhausted(current_hunk, old_lineno, new_lineno):
            if raw_line.startswith("--- "):
                if current_file is None or current_file.hunks or current_hunk is not None:
                    flush_file()
                    current_file = FileDiff(old_path=None, new_path=None)
                current_file.old_path = _parse_path(raw_line[4:])
                continue
            if raw_line.startswith("+++ ") and current_file is not None:
                current_file.new_path = _parse_path(raw_line[4:])
                continue

        if raw_line.startswith("@@ "):
            if current_file is None:
                current_file = FileDiff(old_path=None, new_path=None)
            if current_hunk is not None:
                current_file.hunks.append(current_hunk)
            current_hunk = _start_hunk(raw_line)
            old_lineno = current_hunk.old_start
            new_lineno = current_hunk.new_start
            continue

        if current_hunk is None:
            continue

        if raw_line.startswith("+"):
            current_hunk.lines.append(
                Line(kind="add", content=raw_line[1:], old_lineno=None, new_lineno=new_lineno)
            )
            new_lineno += 1
        elif raw_line.startswith("-"):
            current_hunk.lines.append(
                Line(kind="delete", content=raw_line[1:], old_lineno=old_lineno, new_lineno=None)
            )
            old_lineno += 1
        elif raw_line.startswith("\\"):
            current_hunk.lines.append(
                Line(kind="meta", content=raw_line[2:], old_lineno=None, new_lineno=None)
            )
        elif raw_line.startswith(" ") or (
            raw_line == "" and not _hunk_exhausted(current_hunk, old_lineno, new_lineno)
        ):
            current_hunk.lines.append(
                Line(
                    kind="context",
                    content=raw_line[1:],
                    old_lineno=old_lineno,
                    new_lineno=new_lineno,
                )
            )
            old_lineno += 1
            new_lineno += 1

    flush_file()
    return files


def should_skip_path(path: str) -> bool:
    """True for lockfiles, generated/binary assets and vendored directories."""
    name = path.rsplit("/", 1)[-1]
    if name in LOCKFILE_NAMES:
        return True
    return bool(SKIPPED_ASSET_RE.search(path) or SKIPPED_DIR_RE.search(path))


def build_file_units(diff_text: str) -> list[FileUnit]:
    """Turn a unified diff into file units scoped to their added lines."""
    units: list[FileUnit] = []
    for file_diff in parse_unified_diff(diff_text):
        if file_diff.is_deleted_file or should_skip_path(file_diff.path):
            continue
        content = file_diff.reconstruct_content()
        if not content:
            continue
        units.append(
            FileUnit(
                path=file_diff.path,
                content=content,
                changed_lines=file_diff.changed_lines(),
            )
        )
    return units


def _hunk_exhausted(hunk: Hunk, old_lineno: int, new_lineno: int) -> bool:
    return (
        old_lineno >= hunk.old_start + hunk.old_count
        and new_lineno >= hunk.new_start + hunk.new_count
    )


def _start_hunk(header: str) -> Hunk:
    match = HUNK_HEADER_RE.match(header)
    if match is None:
        raise ValueError(f"Invalid hunk header: {header}")

    old_count = match.group("old_count")
    new_count = match.group("new_count")
    return Hunk(
        header=header,
        old_start=int(match.group("old_start")),
        old_count=int(old_count) if old_count is not None else 1,
        new_start=int(match.group("new_start")),
        new_count=int(new_count) if new_count is not None else 1,
    )


def _file_from_git_header(line: str) -> FileDiff:
    parts = line.split(maxsplit=3)
    old_path = _strip_ab_prefix(parts[2]) if len(parts) > 2 else None
    new_path = _strip_ab_prefix(parts[3]) if len(parts) > 3 else None
    return FileDiff(old_path=old_path, new_path=new_path)


def _parse_path(value: str) -> str:
    token = value.strip().split("\t", 1)[0]
    return _strip_ab_prefix(token)


def _strip_ab_prefix(path: str) -> str:
    if path.startswith(("a/", "b/")):
        return path[2:]
    return path
