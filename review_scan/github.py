"""Pull-request review posting through the GitHub REST API."""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from review_scan.config import DEFAULT_API_URL
from review_scan.engine import FileResult
from review_scan.summary import format_review_comment, generate_summary

logger = logging.getLogger(__name__)

DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"
JSON_MEDIA_TYPE = "application/vnd.github+json"


class GitHubError(RuntimeError):
    """Raised when the GitHub API rejects a request or cannot be reached."""


@dataclass(frozen=True, slots=True)
class PullRequestContext:
    """Coordinates of the pull request under review."""

    owner: str
    repo: str
    number: int


@dataclass(frozen=True, slots=True)
class ReviewOutcome:
    """What was actually posted for a review run."""

    inline_comments: int
    fell_back_to_summary: bool


def load_pull_request_context(environ: Mapping[str, str]) -> PullRequestContext | None:
    """Read the pull request from the Actions environment.

    Returns None when the triggering event is not a pull request.
    """
    repository = environ.get("GITHUB_REPOSITORY", "")
    event_path = environ.get("GITHUB_EVENT_PATH")
    if not event_path or "/" not in repository:
        return None

    try:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise GitHubError(f"Could not read event payload {event_path}: {exc}") from exc

    pull_request = payload.get("pull_request") if isinstance(payload, dict) else None
    if not isinstance(pull_request, dict) or not isinstance(pull_request.get("number"), int):
        return None

    owner, repo = repository.split("/", 1)
    return PullRequestContext(owner=owner, repo=repo, number=pull_request["number"])


class GitHubClient:
    """Minimal client for the pull-request endpoints used by the review flow."""

    def __init__(
        self,
        token: str,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=api_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": JSON_MEDIA_TYPE,
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def get_pull_request_diff(self, ctx: PullRequestContext) -> str:
        response = self._request(
            "GET",
            f"/repos/{ctx.owner}/{ctx.repo}/pulls/{ctx.number}",
            headers={"Accept": DIFF_MEDIA_TYPE},
        )
        return response.text

    def create_review(
        self,
        ctx: PullRequestContext,
        *,
        body: str,
        comments: list[dict[str, Any]],
        event: str = "COMMENT",
    ) -> None:
        self._request(
            "POST",
            f"/repos/{ctx.owner}/{ctx.repo}/pulls/{ctx.number}/reviews",
            json={"body": body, "event": event, "comments": comments},
        )

    def create_issue_comment(self, ctx: PullRequestContext, *, body: str) -> None:
        self._request(
            "POST",
            f"/repos/{ctx.owner}/{ctx.repo}/issues/{ctx.number}/comments",
            json={"body": body},
        )

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise GitHubError(
                f"GitHub API {method} {url} failed with {exc.response.status_code}: "
                f"{exc.response.text.strip()[:200]}"
            ) from exc
        except httpx.HTTPError as exc:
            raise GitHubError(f"GitHub API {method} {url} failed: {exc}") from exc
        return response


def build_review_comments(results: list[FileResult], max_comments: int) -> list[dict[str, Any]]:
    """Line-anchored review comments in result order, capped at max_comments."""
    comments: list[dict[str, Any]] = []
    for result in results:
        for finding in result.findings:
            if len(comments) >= max_comments:
                return comments
            comments.append(
                {
                    "path": result.path,
                    "line": finding.line,
                    "side": "RIGHT",
                    "body": format_review_comment(finding),
                }
            )
    return comments


def post_review(
    client: GitHubClient,
    ctx: PullRequestContext,
    results: list[FileResult],
    *,
    max_comments: int,
) -> ReviewOutcome:
    """Post findings as a review, falling back to one summary comment.

    GitHub rejects the whole review when any comment points outside the diff;
    in that case only the aggregate summary is posted.
    """
    summary = generate_summary(results)
    comments = build_review_comments(results, max_comments)

    if not comments:
        client.create_issue_comment(ctx, body=summary)
        logger.info("Posted summary comment on PR #%d", ctx.number)
        return ReviewOutcome(inline_comments=0, fell_back_to_summary=False)

    try:
        client.create_review(ctx, body=summary, comments=comments)
    except GitHubError as exc:
        logger.warning("Could not post inline comments: %s", exc)
        client.create_issue_comment(ctx, body=summary)
        return ReviewOutcome(inline_comments=0, fell_back_to_summary=True)

    logger.info("Posted review with %d comments on PR #%d", len(comments), ctx.number)
    return ReviewOutcome(inline_comments=len(comments), fell_back_to_summary=False)


def write_action_outputs(path: Path, *, issues_found: int, summary: str) -> None:
    """Append step outputs in the GITHUB_OUTPUT file format."""
    delimiter = f"review_scan_{uuid.uuid4().hex}"
    with path.open("a", encoding="utf-8") as handle:
        handle.write(f"issues-found={issues_found}\n")
        handle.write(f"summary<<{delimiter}\n{summary}\n{delimiter}\n")
