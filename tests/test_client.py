"""Tests for pkg.cathy.client."""
from __future__ import annotations

import pytest

from pkg.cathy import CommentClient, IssueComment, MalformedResponseError, ThreadKey, TransportError


class _StaticRequester:
    def __init__(self, payload):
        self.payload = payload
        self.calls = []

    def request(self, method, path, body=None):
        self.calls.append((method, path, body))
        return self.payload


class TestThreadKey:
    def test_valid(self):
        key = ThreadKey("owner/repo", 7)
        assert str(key) == "owner/repo#7"

    @pytest.mark.parametrize("repo", ["repo", "/repo", "owner/", "a/b/c", ""])
    def test_rejects_bad_repo(self, repo):
        with pytest.raises(ValueError, match="owner/name"):
            ThreadKey(repo, 1)

    @pytest.mark.parametrize("issue", [0, -3, True])
    def test_rejects_bad_issue(self, issue):
        with pytest.raises(ValueError, match="positive integer"):
            ThreadKey("owner/repo", issue)


class TestPaths:
    def test_list_path(self, github, client, thread):
        client.list_comments(thread, page=3, per_page=100)
        assert github.calls == [("GET", "/repos/owner/repo/issues/42/comments?per_page=100&page=3", None)]

    def test_create_path_and_payload(self, github, client, thread):
        created = client.create_comment(thread, "hello")
        assert github.calls == [("POST", "/repos/owner/repo/issues/42/comments", {"body": "hello"})]
        assert created == IssueComment(id=1000, body="hello")

    def test_update_path_and_payload(self, github, client, thread):
        (cid,) = github.seed(42, ["old"])
        updated = client.update_comment(thread, cid, "new")
        assert github.calls == [("PATCH", f"/repos/owner/repo/issues/comments/{cid}", {"body": "new"})]
        assert updated == IssueComment(id=cid, body="new")

    def test_delete_path(self, github, client, thread):
        (cid,) = github.seed(42, ["old"])
        client.delete_comment(thread, cid)
        assert github.calls == [("DELETE", f"/repos/owner/repo/issues/comments/{cid}", None)]
        assert github.bodies(42) == []


class TestResponses:
    def test_beyond_last_page_is_empty(self, github, client, thread):
        github.seed(42, ["one"])
        assert client.list_comments(thread, page=2) == []

    def test_null_list_is_empty(self, thread):
        assert CommentClient(_StaticRequester(None)).list_comments(thread) == []

    def test_null_body_reads_as_empty(self, thread):
        client = CommentClient(_StaticRequester([{"id": 1, "body": None}]))
        assert client.list_comments(thread) == [IssueComment(id=1, body="")]

    def test_ignores_extra_fields(self, thread):
        client = CommentClient(_StaticRequester([{"id": 1, "body": "x", "user": {"login": "bot"}}]))
        assert client.list_comments(thread) == [IssueComment(id=1, body="x")]

    def test_list_must_be_array(self, thread):
        with pytest.raises(MalformedResponseError, match="list of comments"):
            CommentClient(_StaticRequester({"message": "nope"})).list_comments(thread)

    def test_comment_id_must_be_int(self, thread):
        with pytest.raises(MalformedResponseError, match="id"):
            CommentClient(_StaticRequester([{"id": "IC_abc", "body": "x"}])).list_comments(thread)

    def test_comment_must_be_object(self, thread):
        with pytest.raises(MalformedResponseError, match="comment object"):
            CommentClient(_StaticRequester(["x"])).list_comments(thread)

    def test_empty_create_response_returns_none(self, thread):
        assert CommentClient(_StaticRequester(None)).create_comment(thread, "x") is None

    def test_transport_errors_propagate(self, client, thread):
        with pytest.raises(TransportError) as excinfo:
            client.update_comment(thread, 999999, "x")
        assert excinfo.value.status == 404
