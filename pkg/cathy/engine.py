"""Decide how a message lands on a thread: create, overwrite, or append.

An identity is an ordered tuple of tags. A typical multi-tag identity pairs a
stable slot tag with a per-run tag, e.g. ``("test-coverage", "run-17")``.
Appending only happens when the previous comment carries every tag of the
current identity; a comment that shares only some of them is replaced whole.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .client import CommentClient, IssueComment, ThreadKey
from .markers import get_message_header, has_all_headers, normalize_tags, render_headers
from .resolver import find_previous_comment

APPEND_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class UpsertOptions:
    """Fully defaulted publish options. Build with ``UpsertOptions.build``."""

    message: str
    tags: tuple[str, ...]
    update_existing: bool = False
    append_to_existing: bool = False

    @classmethod
    def build(
        cls,
        message: str,
        identity: str | Iterable[str] | None = None,
        *,
        update_existing: bool = False,
        append_to_existing: bool = False,
    ) -> "UpsertOptions":
        """Normalize caller input. Appending implies updating."""
        if not isinstance(message, str):
            raise TypeError(f"message must be a string, got {type(message).__name__}")
        append = bool(append_to_existing)
        return cls(
            message=message,
            tags=normalize_tags(identity),
            update_existing=bool(update_existing) or append,
            append_to_existing=append,
        )


@dataclass(frozen=True)
class UpsertPlan:
    """The single write a publish will make."""

    body: str
    existing: IssueComment | None = None
    appended: bool = False

    @property
    def updates_existing(self) -> bool:
        return self.existing is not None


def find_existing(client: CommentClient, thread: ThreadKey, tags: tuple[str, ...]) -> IssueComment | None:
    """Search tag by tag, in order, and stop at the first tag that matches."""
    for tag in tags:
        found = find_previous_comment(client, thread, get_message_header(tag))
        if found is not None:
            return found
    return None


def compose_body(options: UpsertOptions, existing: IssueComment | None) -> tuple[str, bool]:
    """Return the final comment body and whether it appends to ``existing``."""
    headers = render_headers(options.tags)
    append = (
        options.append_to_existing
        and existing is not None
        and has_all_headers(existing.body, options.tags)
    )
    if append:
        return f"{headers}{existing.body}{APPEND_SEPARATOR}{options.message}", True
    return f"{headers}{options.message}", False


def plan_upsert(client: CommentClient, thread: ThreadKey, options: UpsertOptions) -> UpsertPlan:
    """Look up the previous comment (when asked to) and decide the new body.

    Makes read requests only.
    """
    existing = None
    if options.update_existing:
        existing = find_existing(client, thread, options.tags)
    body, appended = compose_body(options, existing)
    return UpsertPlan(body=body, existing=existing, appended=appended)
