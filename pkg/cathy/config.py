"""Runtime configuration: defaults, then an optional YAML file, then environment.

YAML example::

    repo: owner/name
    issue: 42
    transport: gh
    identity: [test-coverage]
    update_existing: true
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from .client import CommentClient, ThreadKey
from .errors import ConfigError
from .markers import normalize_tags
from .transport import DEFAULT_API_URL, DEFAULT_TIMEOUT_SECONDS, GhCliRequester, HttpOpen, RestRequester

TRANSPORTS = {"rest", "gh"}

_PULL_REF_RE = re.compile(r"^refs/pull/(\d+)/")

# YAML key -> environment variable
ENV_KEYS = {
    "repo": "GITHUB_REPOSITORY",
    "issue": "CATHY_ISSUE",
    "token": "GITHUB_TOKEN",
    "api_url": "GITHUB_API_URL",
    "transport": "CATHY_TRANSPORT",
    "timeout_seconds": "CATHY_TIMEOUT_SECONDS",
}


@dataclass(frozen=True)
class CathyConfig:
    """Data class for Cathy Config."""
    repo: str | None = None
    issue: int | None = None
    token: str | None = None
    api_url: str = DEFAULT_API_URL
    transport: str = "rest"
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    identity: tuple[str, ...] | None = None
    update_existing: bool = False
    append_to_existing: bool = False

    def thread(self) -> ThreadKey:
        """Thread addressed by repo + issue."""
        if not self.repo:
            raise ConfigError("repo: missing (set GITHUB_REPOSITORY or pass --repo)")
        if self.issue is None:
            raise ConfigError("issue: missing (set CATHY_ISSUE or pass --issue)")
        try:
            return ThreadKey(self.repo, self.issue)
        except ValueError as e:
            raise ConfigError(str(e)) from e

    def build_client(self, opener: HttpOpen | None = None) -> CommentClient:
        """Comment client over the configured transport."""
        if self.transport == "gh":
            return CommentClient(GhCliRequester())
        if not self.token:
            raise ConfigError("token: missing (set GITHUB_TOKEN or use transport: gh)")
        return CommentClient(
            RestRequester(
                token=self.token,
                api_url=self.api_url,
                timeout_seconds=self.timeout_seconds,
                opener=opener,
            )
        )


def _require_mapping(value: Any, ctx: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ConfigError(f"{ctx}: expected mapping")
    return value


def _require_str(value: Any, ctx: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{ctx}: expected string")
    s = value.strip()
    if not s:
        raise ConfigError(f"{ctx}: must be non-empty")
    return s


def _require_bool(value: Any, ctx: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{ctx}: expected boolean")
    return value


def _require_positive_int(value: Any, ctx: str) -> int:
    # Environment values arrive as strings.
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise ConfigError(f"{ctx}: expected integer") from None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{ctx}: expected integer")
    if value < 1:
        raise ConfigError(f"{ctx}: must be >= 1")
    return value


def _require_transport(value: Any, ctx: str) -> str:
    s = _require_str(value, ctx).lower()
    if s not in TRANSPORTS:
        raise ConfigError(f"{ctx}: must be one of {sorted(TRANSPORTS)}")
    return s


def _require_identity(value: Any, ctx: str) -> tuple[str, ...]:
    if isinstance(value, str):
        return normalize_tags(value)
    if not isinstance(value, list):
        raise ConfigError(f"{ctx}: expected string or list of strings")
    for idx, item in enumerate(value):
        if not isinstance(item, str):
            raise ConfigError(f"{ctx}[{idx}]: expected string")
    return normalize_tags(value)


def _load_yaml(path: Path) -> Any:
    try:
        return yaml.safe_load(path.read_text())
    except FileNotFoundError:
        raise ConfigError(f"missing config file: {path}") from None
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e


def _issue_from_ref(ref: str | None) -> int | None:
    """PR number from a pull request ref such as ``refs/pull/42/merge``."""
    if not ref:
        return None
    match = _PULL_REF_RE.match(ref)
    return int(match.group(1)) if match else None


def _merge_file(raw: dict[str, Any], values: dict[str, Any]) -> None:
    if "repo" in raw:
        values["repo"] = _require_str(raw["repo"], "config.repo")
    if "issue" in raw:
        values["issue"] = _require_positive_int(raw["issue"], "config.issue")
    if "token" in raw:
        values["token"] = _require_str(raw["token"], "config.token")
    if "api_url" in raw:
        values["api_url"] = _require_str(raw["api_url"], "config.api_url")
    if "transport" in raw:
        values["transport"] = _require_transport(raw["transport"], "config.transport")
    if "timeout_seconds" in raw:
        values["timeout_seconds"] = _require_positive_int(raw["timeout_seconds"], "config.timeout_seconds")
    if "identity" in raw:
        values["identity"] = _require_identity(raw["identity"], "config.identity")
    if "update_existing" in raw:
        values["update_existing"] = _require_bool(raw["update_existing"], "config.update_existing")
    if "append_to_existing" in raw:
        values["append_to_existing"] = _require_bool(raw["append_to_existing"], "config.append_to_existing")


def _merge_env(env: Mapping[str, str], values: dict[str, Any]) -> None:
    found: dict[str, str] = {}
    for key, var in ENV_KEYS.items():
        value = env.get(var)
        if value is not None and value.strip():
            found[key] = value

    if "repo" in found:
        values["repo"] = _require_str(found["repo"], ENV_KEYS["repo"])
    if "issue" in found:
        values["issue"] = _require_positive_int(found["issue"], ENV_KEYS["issue"])
    elif values.get("issue") is None:
        values["issue"] = _issue_from_ref(env.get("GITHUB_REF"))
    if "token" in found:
        values["token"] = found["token"].strip()
    if "api_url" in found:
        values["api_url"] = _require_str(found["api_url"], ENV_KEYS["api_url"])
    if "transport" in found:
        values["transport"] = _require_transport(found["transport"], ENV_KEYS["transport"])
    if "timeout_seconds" in found:
        values["timeout_seconds"] = _require_positive_int(found["timeout_seconds"], ENV_KEYS["timeout_seconds"])


def load_config(path: Path | None = None, env: Mapping[str, str] | None = None) -> CathyConfig:
    """Load config from ``path`` (or ``$CATHY_CONFIG``) and the environment."""
    env = os.environ if env is None else env
    if path is None and env.get("CATHY_CONFIG"):
        path = Path(env["CATHY_CONFIG"])

    values: dict[str, Any] = {}
    if path is not None:
        raw = _load_yaml(path)
        # An empty file is an empty mapping.
        if raw is not None:
            _merge_file(_require_mapping(raw, "config"), values)
    _merge_env(env, values)
    return CathyConfig(**values)
