"""Git subprocess helpers."""

from __future__ import annotations

import logging
from pathlib import Path
from subprocess import CalledProcessError, run

logger = logging.getLogger(__name__)


class GitError(RuntimeError):
    """Raised when git command execution fails."""


def get_diff(repo: Path, base: str | None = None, head: str | None = None) -> str:
    """Return the working tree diff, or the diff between two revisions."""
    args = ["diff", "--no-color"]
    if base is not None and head is not None:
        args.append(f"{base}..{head}")
    elif base is not None or head is not None:
        raise GitError("both base and head revisions are required for a range diff")
    return _run_git(repo, args)


def _run_git(repo: Path, args: list[str]) -> str:
    logger.debug("running git %s in %s", " ".join(args), repo)
    try:
        completed = run(
            ["git", *args],
            cwd=repo,
            check=True,
            capture_output=True,
            text=True,
        )
    except CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        raise GitError(stderr or f"git {' '.join(args)} failed") from exc
    except FileNotFoundError as exc:
        raise GitError("git executable not found") from exc

    return completed.stdout
