"""Shared fixtures: an in-memory GitHub comment API."""
from __future__ import annotations

import re
import sys
from pathlib import Path
from urllib.parse import parse_qs

import pytest

ROOT_DIR = Path(__file__).parent.parent

# Make `pkg.cathy` importable without installing.
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from pkg.cathy import CommentClient, ThreadKey, TransportError  # noqa: E402

# Mirrors the paths built by pkg/cathy/client.py.
_LIST_OR_CREATE = re.compile(r"^/repos/[^/]+/[^/]+/issues/(\d+)/comments(?:\?(.*))?$")
_SINGLE = re.compile(r"^/repos/[^/]+/[^/]+/issues/comments/(\d+)$")


class FakeGitHub:
    """Requester that stores comments per issue number and records every call."""

    def __init__(self) -> None:
        self.threads: dict[int, list[dict]] = {}
        self.calls: list[tuple[str, str, dict | None]] = []
        self._next_id = 1000

    def seed(self, issue: int, bodies: list[str]) -> list[int]:
        ids = []
        for body in bodies:
            ids.append(self._add(issue, body)["id"])
        return ids

    def bodies(self, issue: int) -> list[str]:
        return [c["body"] for c in self.threads.get(issue, [])]

    @property
    def mutations(self) -> list[tuple[str, str, dict | None]]:
        return [call for call in self.calls if call[0] != "GET"]

    @property
    def list_calls(self) -> list[str]:
        return [path for method, path, _ in self.calls if method == "GET"]

    def _add(self, issue: int, body: str) -> dict:
        comment = {"id": self._next_id, "body": body, "html_url": f"https://github.test/c/{self._next_id}"}
        self._next_id += 1
        self.threads.setdefault(issue, []).append(comment)
        return comment

    def _locate(self, comment_id: int) -> tuple[list[dict], dict]:
        for comments in self.threads.values():
            for comment in comments:
                if comment["id"] == comment_id:
                    return comments, comment
        raise TransportError(f"GitHub API error: 404 comment {comment_id}", status=404, detail="Not Found")

    def request(self, method: str, path: str, body: dict | None = None):
        self.calls.append((method, path, body))

        match = _LIST_OR_CREATE.match(path)
        if match and method == "GET":
            issue = int(match.group(1))
            query = parse_qs(match.group(2) or "")
            per_page = int(query.get("per_page", ["30"])[0])
            page = int(query.get("page", ["1"])[0])
            start = (page - 1) * per_page
            return [dict(c) for c in self.threads.get(issue, [])[start:start + per_page]]
        if match and method == "POST":
            return dict(self._add(int(match.group(1)), body["body"]))

        match = _SINGLE.match(path)
        if match and method == "PATCH":
            _, comment = self._locate(int(match.group(1)))
            comment["body"] = body["body"]
            return dict(comment)
        if match and method == "DELETE":
            comments, comment = self._locate(int(match.group(1)))
            comments.remove(comment)
            return None

        raise AssertionError(f"unexpected request: {method} {path}")


@pytest.fixture()
def github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture()
def client(github: FakeGitHub) -> CommentClient:
    return CommentClient(github)


@pytest.fixture()
def thread() -> ThreadKey:
    return ThreadKey("owner/repo", 42)
