"""Target resolution for directory scans."""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Iterable
from pathlib import Path

from review_scan.languages import SUPPORTED_EXTENSIONS

logger = logging.getLogger(__name__)


def collect_files(
    targets: Iterable[Path],
    *,
    include: list[str] | None = None,
    exclude: list[str] | None = None,
    excluded_dirs: Iterable[str] = (),
) -> list[Path]:
    """Expand file and directory targets into the files to analyze.

    Explicit file targets are kept regardless of extension; directories are
    walked in sorted order and only contribute supported source files.
    """
    skip_dirs = set(excluded_dirs)
    collected: list[Path] = []
    for target in targets:
        if target.is_dir():
            collected.extend(_walk(target, skip_dirs))
        elif target.is_file():
            collected.append(target)
        else:
            logger.warning("%s not found, skipping", target)

    return [
        path
        for path in collected
        if _selected(path.as_posix(), includes=include or [], excludes=exclude or [])
    ]


def _walk(root: Path, skip_dirs: set[str]) -> list[Path]:
    files: list[Path] = []
    for entry in sorted(root.iterdir(), key=lambda item: item.name):
        if entry.is_dir():
            if entry.name in skip_dirs:
                continue
            files.extend(_walk(entry, skip_dirs))
        elif entry.is_file() and entry.suffix.lower() in SUPPORTED_EXTENSIONS:
            files.append(entry)
    return files


def _selected(path: str, *, includes: list[str], excludes: list[str]) -> bool:
    if includes and not any(fnmatch.fnmatch(path, pattern) for pattern in includes):
        return False
    if excludes and any(fnmatch.fnmatch(path, pattern) for pattern in excludes):
        return False
    return True
