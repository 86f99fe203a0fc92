"""Publish and withdraw managed comments.

Entry points callers use. Each publish makes one lookup pass and at most one
write; each withdraw makes one lookup and at most one delete.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .client import CommentClient, IssueComment, ThreadKey
from .engine import UpsertOptions, plan_upsert
from .markers import DEFAULT_TAG, get_message_header, normalize_tags
from .resolver import find_previous_comment, find_previous_comments


@dataclass(frozen=True)
class UpsertResult:
    updated_previous_comment: bool
    posted: bool = True
    comment: IssueComment | None = None


NOT_POSTED = UpsertResult(updated_previous_comment=False, posted=False)


def _single_tag(tag: str | None) -> str:
    return normalize_tags(tag if tag is not None else DEFAULT_TAG)[0]


class Commenter:
    """Comment upsert operations bound to one comment client."""

    def __init__(self, client: CommentClient) -> None:
        self.client = client

    def publish(
        self,
        thread: ThreadKey,
        message: str,
        *,
        identity: str | Iterable[str] | None = None,
        update_existing: bool = False,
        append_to_existing: bool = False,
    ) -> UpsertResult:
        """Create or update the comment for ``identity`` on ``thread``.

        An empty message is a no-op and makes no requests.

        Raises:
            TransportError: GitHub rejected a request
            MalformedResponseError: GitHub returned an unexpected payload
        """
        if not message:
            return NOT_POSTED

        options = UpsertOptions.build(
            message,
            identity,
            update_existing=update_existing,
            append_to_existing=append_to_existing,
        )
        plan = plan_upsert(self.client, thread, options)

        if plan.existing is not None:
            written = self.client.update_comment(thread, plan.existing.id, plan.body)
        else:
            written = self.client.create_comment(thread, plan.body)

        return UpsertResult(updated_previous_comment=plan.updates_existing, comment=written)

    def withdraw(self, thread: ThreadKey, tag: str | None = None) -> bool:
        """Delete the comment carrying ``tag``'s marker. Returns False if there was none."""
        existing = find_previous_comment(self.client, thread, get_message_header(_single_tag(tag)))
        if existing is None:
            return False
        self.client.delete_comment(thread, existing.id)
        return True

    def purge(self, thread: ThreadKey, tag: str | None = None) -> int:
        """Delete every comment carrying ``tag``'s marker, including duplicates."""
        matches = find_previous_comments(self.client, thread, get_message_header(_single_tag(tag)))
        for comment in matches:
            self.client.delete_comment(thread, comment.id)
        return len(matches)


def publish(
    client: CommentClient,
    thread: ThreadKey,
    message: str,
    *,
    identity: str | Iterable[str] | None = None,
    update_existing: bool = False,
    append_to_existing: bool = False,
) -> UpsertResult:
    """Publish."""
    return Commenter(client).publish(
        thread,
        message,
        identity=identity,
        update_existing=update_existing,
        append_to_existing=append_to_existing,
    )


def withdraw(client: CommentClient, thread: ThreadKey, tag: str | None = None) -> bool:
    """Withdraw."""
    return Commenter(client).withdraw(thread, tag)
