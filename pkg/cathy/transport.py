"""Requesters that carry GitHub REST calls.

A requester has a single method, ``request(method, path, body=None)``, which
returns the decoded JSON payload (or ``None`` for an empty response) and raises
``TransportError`` on any non-success status.
"""

from __future__ import annotations

import http.client
import json
import random
import re
import subprocess
import sys
import time
from dataclasses import dataclass
from typing import Any, Callable, Protocol
from urllib import error
from urllib import request

from .errors import CommentPermissionError, MalformedResponseError, TransientGitHubError, TransportError

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT_SECONDS = 30
USER_AGENT = "cathy"

HttpOpen = Callable[[request.Request, int], Any]

_STATUS_RE = re.compile(r"http (\d{3})", re.IGNORECASE)


class Requester(Protocol):
    def request(self, method: str, path: str, body: dict[str, Any] | None = None) -> Any:
        ...


def _decode_json(text: str, path: str) -> Any:
    if not text.strip():
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"invalid JSON from {path}: {exc}") from exc


def _read_text(response: object) -> str:
    read = getattr(response, "read", None)
    if read is None:
        return ""
    raw = read()
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        return raw
    return ""


def _default_opener(req: request.Request, timeout_seconds: int) -> Any:
    return request.urlopen(req, timeout=timeout_seconds)


@dataclass
class RestRequester:
    """Talks to the GitHub REST API directly with a bearer token."""

    token: str
    api_url: str = DEFAULT_API_URL
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    opener: HttpOpen | None = None

    def _headers(self, has_body: bool) -> dict[str, str]:
        headers = {
            "User-Agent": USER_AGENT,
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
        }
        if has_body:
            headers["Content-Type"] = "application/json"
        return headers

    def request(self, method: str, path: str, body: dict[str, Any] | None = None) -> Any:
        """Request."""
        data = json.dumps(body).encode() if body is not None else None
        req = request.Request(
            f"{self.api_url.rstrip('/')}{path}",
            data=data,
            method=method,
            headers=self._headers(data is not None),
        )
        opener = self.opener or _default_opener

        try:
            with opener(req, self.timeout_seconds) as response:
                status = int(getattr(response, "status", 200))
                text = _read_text(response)
        except error.HTTPError as exc:
            # urllib raises for non-2xx, but the error still carries status + body.
            detail = _read_text(exc)
            raise TransportError(
                f"GitHub API error: {exc.code} {detail}".rstrip(),
                status=exc.code,
                detail=detail,
            ) from exc
        except error.URLError as exc:
            reason = str(exc.reason) if hasattr(exc, "reason") else str(exc)
            raise TransportError(f"GitHub API request failed: {reason}") from exc
        except (OSError, http.client.HTTPException) as exc:
            # Read timeouts and dropped connections surface from inside the with block.
            raise TransportError(f"GitHub API request failed: {exc}") from exc

        if status >= 400:
            raise TransportError(f"GitHub API error: {status} {text}".rstrip(), status=status, detail=text)
        return _decode_json(text, path)


def _is_transient_error(stderr: str) -> bool:
    """Check if error is a transient GitHub API error (5xx)."""
    transient_codes = ("502", "503", "504")
    lower_stderr = stderr.lower()
    # gh prints "(HTTP 503)", raw API errors print "HTTP 503"
    return any(
        f"(http {code})" in lower_stderr or f"http {code}" in lower_stderr
        for code in transient_codes
    )


def _status_from_stderr(stderr: str) -> int | None:
    match = _STATUS_RE.search(stderr)
    return int(match.group(1)) if match else None


@dataclass
class GhCliRequester:
    """Routes requests through ``gh api`` so the caller's gh login is used."""

    max_retries: int = 3
    base_delay: float = 1.0

    def _run_gh(self, args: list[str], stdin: str | None) -> subprocess.CompletedProcess[str]:
        """Run a gh CLI command, retrying transient 5xx failures.

        Raises:
            CommentPermissionError: Token lacks pull-requests: write permission
            TransientGitHubError: GitHub API returned 5xx after all retries
            TransportError: Any other gh failure
        """
        for attempt in range(self.max_retries):
            try:
                result = subprocess.run(
                    ["gh", *args], input=stdin, capture_output=True, text=True, check=False
                )
            except OSError as exc:
                raise TransportError(f"unable to run gh: {exc}") from exc

            if result.returncode == 0:
                return result

            stderr = result.stderr or ""
            lower_stderr = stderr.lower()

            if any(s in lower_stderr for s in ("403", "resource not accessible", "insufficient")):
                raise CommentPermissionError(
                    "Unable to write PR comment: token lacks pull-requests: write permission.\n"
                    "Add this to your workflow:\n"
                    "permissions:\n"
                    "  contents: read\n"
                    "  pull-requests: write",
                    status=403,
                    detail=stderr,
                )

            if _is_transient_error(stderr):
                if attempt < self.max_retries - 1:
                    # Exponential backoff with jitter: 1s, 2s, 4s + random jitter
                    delay = self.base_delay * (2 ** attempt) + random.uniform(0, 0.5)
                    print(
                        f"::warning::GitHub API error (attempt {attempt + 1}/{self.max_retries}), "
                        f"retrying in {delay:.1f}s...",
                        file=sys.stderr,
                    )
                    time.sleep(delay)
                    continue
                raise TransientGitHubError(
                    f"GitHub API returned transient error after {self.max_retries} attempts: {stderr}",
                    status=_status_from_stderr(stderr),
                    detail=stderr,
                )

            raise TransportError(
                f"gh api failed (exit {result.returncode}): {stderr.strip()}",
                status=_status_from_stderr(stderr),
                detail=stderr,
            )

        raise TransportError("gh api retry loop exited without a result")

    def request(self, method: str, path: str, body: dict[str, Any] | None = None) -> Any:
        """Request."""
        args = ["api", "-X", method, path.lstrip("/")]
        stdin = None
        if body is not None:
            args.extend(["--input", "-"])
            stdin = json.dumps(body)
        result = self._run_gh(args, stdin)
        return _decode_json(result.stdout or "", path)
