"""Idempotent status comments on GitHub issues and pull requests."""

from .client import PER_PAGE, CommentClient, IssueComment, ThreadKey
from .commenter import Commenter, UpsertResult, publish, withdraw
from .config import CathyConfig, load_config
from .engine import UpsertOptions, UpsertPlan, plan_upsert
from .errors import (
    CathyError,
    CommentPermissionError,
    ConfigError,
    MalformedResponseError,
    TransientGitHubError,
    TransportError,
)
from .markers import DEFAULT_TAG, get_message_header, normalize_tags
from .resolver import SearchAction, find_previous_comment, find_previous_comments
from .transport import GhCliRequester, Requester, RestRequester

__all__ = [
    "CathyConfig",
    "CathyError",
    "CommentClient",
    "CommentPermissionError",
    "Commenter",
    "ConfigError",
    "DEFAULT_TAG",
    "GhCliRequester",
    "IssueComment",
    "MalformedResponseError",
    "PER_PAGE",
    "Requester",
    "RestRequester",
    "SearchAction",
    "ThreadKey",
    "TransientGitHubError",
    "TransportError",
    "UpsertOptions",
    "UpsertPlan",
    "UpsertResult",
    "find_previous_comment",
    "find_previous_comments",
    "get_message_header",
    "load_config",
    "normalize_tags",
    "plan_upsert",
    "publish",
    "withdraw",
]
