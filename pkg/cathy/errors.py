"""Error types raised by the comment upsert engine and its transports."""

from __future__ import annotations


class CathyError(Exception):
    """Base class for every error raised by cathy."""


class TransportError(CathyError):
    """GitHub API returned a non-success response."""

    def __init__(self, message: str, *, status: int | None = None, detail: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.detail = detail


class CommentPermissionError(TransportError):
    """Token lacks pull-requests: write permission."""


class TransientGitHubError(TransportError):
    """GitHub API returned a transient error (5xx)."""


class MalformedResponseError(CathyError):
    """GitHub API returned a payload that is not the expected shape."""


class ConfigError(CathyError):
    """Invalid or missing configuration."""
