"""Locate previously posted comments by marker.

Pages are fetched one at a time so that a match on an early page never costs a
request for a later one.
"""

from __future__ import annotations

import enum
from typing import Callable

from .client import PER_PAGE, CommentClient, IssueComment, ThreadKey


class SearchAction(enum.Enum):
    STOP = "stop"
    CONTINUE = "continue"


OnFound = Callable[[IssueComment], SearchAction]


def find_previous_comment(
    client: CommentClient,
    thread: ThreadKey,
    marker: str,
    on_found: OnFound | None = None,
) -> IssueComment | None:
    """Return the first comment whose body contains ``marker``.

    Args:
        client: Comment resource to page through
        thread: Issue or pull request to search
        marker: Text to look for anywhere in a comment body. Usually the result
            of ``get_message_header``.
        on_found: Optional visitor called with every match. Returning
            ``SearchAction.STOP`` ends the search with that match;
            ``SearchAction.CONTINUE`` keeps scanning.

    Returns:
        The matching comment, or None when the thread has been exhausted.
    """
    page = 1
    while True:
        comments = client.list_comments(thread, page=page, per_page=PER_PAGE)
        if not comments:
            break

        for comment in comments:
            if marker not in comment.body:
                continue
            if on_found is None:
                return comment
            if on_found(comment) is SearchAction.STOP:
                return comment

        # A short page is the last page.
        if len(comments) < PER_PAGE:
            break
        page += 1

    return None


def find_previous_comments(client: CommentClient, thread: ThreadKey, marker: str) -> list[IssueComment]:
    """Collect every comment containing ``marker``, oldest first."""
    found: list[IssueComment] = []

    def _collect(comment: IssueComment) -> SearchAction:
        found.append(comment)
        return SearchAction.CONTINUE

    find_previous_comment(client, thread, marker, _collect)
    return found
