"""GitHub issue comment resource: list, create, update, delete."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .errors import MalformedResponseError
from .transport import Requester

PER_PAGE = 100


@dataclass(frozen=True)
class ThreadKey:
    """An issue or pull request, addressed by repo slug and number."""

    repo: str
    issue: int

    def __post_init__(self) -> None:
        owner, sep, name = self.repo.partition("/")
        if not sep or not owner.strip() or not name.strip() or "/" in name:
            raise ValueError(f"repo must be in owner/name format, got {self.repo!r}")
        if isinstance(self.issue, bool) or not isinstance(self.issue, int) or self.issue <= 0:
            raise ValueError(f"issue must be a positive integer, got {self.issue!r}")

    def __str__(self) -> str:
        return f"{self.repo}#{self.issue}"


@dataclass(frozen=True)
class IssueComment:
    id: int
    body: str


def _parse_comment(raw: Any, path: str) -> IssueComment:
    if not isinstance(raw, dict):
        raise MalformedResponseError(f"{path}: expected comment object, got {type(raw).__name__}")
    comment_id = raw.get("id")
    if isinstance(comment_id, bool) or not isinstance(comment_id, int):
        raise MalformedResponseError(f"{path}: comment id must be an integer, got {comment_id!r}")
    body = raw.get("body")
    # GitHub sends null for comments whose body was cleared.
    if body is None:
        body = ""
    if not isinstance(body, str):
        raise MalformedResponseError(f"{path}: comment {comment_id} body must be a string")
    return IssueComment(id=comment_id, body=body)


def _parse_optional_comment(raw: Any, path: str) -> IssueComment | None:
    if raw is None:
        return None
    return _parse_comment(raw, path)


class CommentClient:
    """Comment operations for a thread, over an injected requester.

    NOTE: FakeGitHub in tests/conftest.py routes on the paths built here. Keep
    the two in step.
    """

    def __init__(self, requester: Requester) -> None:
        self._requester = requester

    def list_comments(self, thread: ThreadKey, page: int = 1, per_page: int = PER_PAGE) -> list[IssueComment]:
        """Return one page of comments, oldest first. Past the last page this is empty."""
        path = f"/repos/{thread.repo}/issues/{thread.issue}/comments?per_page={per_page}&page={page}"
        payload = self._requester.request("GET", path)
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise MalformedResponseError(f"{path}: expected a list of comments, got {type(payload).__name__}")
        return [_parse_comment(item, path) for item in payload]

    def create_comment(self, thread: ThreadKey, body: str) -> IssueComment | None:
        """Create comment."""
        path = f"/repos/{thread.repo}/issues/{thread.issue}/comments"
        return _parse_optional_comment(self._requester.request("POST", path, {"body": body}), path)

    def update_comment(self, thread: ThreadKey, comment_id: int, body: str) -> IssueComment | None:
        """Update comment."""
        path = f"/repos/{thread.repo}/issues/comments/{comment_id}"
        return _parse_optional_comment(self._requester.request("PATCH", path, {"body": body}), path)

    def delete_comment(self, thread: ThreadKey, comment_id: int) -> None:
        """Delete comment."""
        path = f"/repos/{thread.repo}/issues/comments/{comment_id}"
        self._requester.request("DELETE", path)
