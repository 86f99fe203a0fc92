"""Command line entry point.

Commands:
  publish   Create or update the comment for an identity
  withdraw  Delete the comment for a tag, if present
  find      Print ids of comments carrying a tag's marker (JSON)
  purge     Delete every comment carrying a tag's marker

Exit codes: 0 success, 1 GitHub request failed, 2 configuration or usage error.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from pathlib import Path

from .commenter import Commenter
from .config import CathyConfig, load_config
from .errors import ConfigError, MalformedResponseError, TransportError
from .markers import DEFAULT_TAG, get_message_header, normalize_tags
from .resolver import find_previous_comment, find_previous_comments


def notice(message: str) -> None:
    """Notice."""
    print(f"::notice::{message}", file=sys.stderr)


def error(message: str) -> None:
    """Error."""
    print(f"::error::{message}", file=sys.stderr)


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", help="YAML config file (default: $CATHY_CONFIG)")
    common.add_argument("--repo", help="owner/repo (default: $GITHUB_REPOSITORY)")
    common.add_argument("--issue", type=int, help="issue or PR number (default: $CATHY_ISSUE)")

    parser = argparse.ArgumentParser(prog="cathy", description="Idempotent GitHub issue/PR comments.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    publish = sub.add_parser("publish", parents=[common], help="create or update a comment")
    source = publish.add_mutually_exclusive_group()
    source.add_argument("--body", help="comment body")
    source.add_argument("--body-file", help="path to comment body markdown ('-' for stdin)")
    publish.add_argument(
        "--id",
        dest="ids",
        action="append",
        help="identity tag; repeat for multi-tag identities",
    )
    publish.add_argument("--update-existing", action="store_true", help="overwrite a matching comment")
    publish.add_argument("--append", action="store_true", help="append to a matching comment")

    withdraw = sub.add_parser("withdraw", parents=[common], help="delete the comment for a tag")
    withdraw.add_argument("--id", default=DEFAULT_TAG)

    find = sub.add_parser("find", parents=[common], help="print matching comment ids")
    find.add_argument("--id", default=DEFAULT_TAG)
    find.add_argument("--all", action="store_true", help="list every match, not just the first")

    purge = sub.add_parser("purge", parents=[common], help="delete every comment for a tag")
    purge.add_argument("--id", default=DEFAULT_TAG)

    return parser


def _resolve_config(args: argparse.Namespace) -> CathyConfig:
    cfg = load_config(Path(args.config) if args.config else None)
    overrides = {}
    if args.repo:
        overrides["repo"] = args.repo
    if args.issue is not None:
        overrides["issue"] = args.issue
    return dataclasses.replace(cfg, **overrides) if overrides else cfg


def _read_body(args: argparse.Namespace) -> str:
    if args.body is not None:
        return args.body
    if args.body_file and args.body_file != "-":
        path = Path(args.body_file)
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"unable to read body file {path}: {exc}") from exc
    # Never block on an interactive terminal.
    if args.body_file != "-" and sys.stdin.isatty():
        raise ConfigError("no body given: pass --body, --body-file, or pipe it on stdin")
    return sys.stdin.read()


def _run(args: argparse.Namespace, cfg: CathyConfig) -> int:
    thread = cfg.thread()
    client = cfg.build_client()
    commenter = Commenter(client)

    if args.cmd == "publish":
        body = _read_body(args)
        result = commenter.publish(
            thread,
            body,
            identity=args.ids or cfg.identity,
            update_existing=args.update_existing or cfg.update_existing,
            append_to_existing=args.append or cfg.append_to_existing,
        )
        if not result.posted:
            notice(f"empty body, nothing posted to {thread}")
            print("skipped")
        elif result.updated_previous_comment:
            notice(f"updated previous comment on {thread}")
            print("updated")
        else:
            notice(f"created comment on {thread}")
            print("created")
        return 0

    if args.cmd == "withdraw":
        if commenter.withdraw(thread, args.id):
            print("deleted")
        else:
            notice(f"no comment for id {args.id!r} on {thread}")
            print("absent")
        return 0

    if args.cmd == "find":
        marker = get_message_header(normalize_tags(args.id)[0])
        if args.all:
            ids = [c.id for c in find_previous_comments(client, thread, marker)]
        else:
            found = find_previous_comment(client, thread, marker)
            ids = [found.id] if found is not None else []
        print(json.dumps(ids))
        return 0

    removed = commenter.purge(thread, args.id)
    print(removed)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main."""
    args = _build_parser().parse_args(argv)

    try:
        cfg = _resolve_config(args)
        return _run(args, cfg)
    except ConfigError as exc:
        print(f"cathy: config error: {exc}", file=sys.stderr)
        return 2
    except (TransportError, MalformedResponseError) as exc:
        error(str(exc))
        return 1


if __name__ == "__main__":
    sys.exit(main())
