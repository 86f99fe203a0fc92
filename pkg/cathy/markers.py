"""Hidden HTML markers used to identify cathy-managed comments.

The marker template is matched as a literal substring by later runs. Changing
it orphans every comment created with the previous template.
"""

from __future__ import annotations

from typing import Iterable

DEFAULT_TAG = "default"

_HEADER_TEMPLATE = "<!-- https://github.com/levibostian/cathy comment. id:{tag} -->"


def get_message_header(tag: str) -> str:
    """Return the hidden HTML comment header for a tag.

    The tag is embedded verbatim. No escaping is done, so a tag containing
    ``-->`` can produce a header that collides with another tag's header.
    """
    return _HEADER_TEMPLATE.format(tag=tag)


def normalize_tags(identity: str | Iterable[str] | None) -> tuple[str, ...]:
    """Normalize an identity into an ordered, non-empty tuple of tags.

    Tags are trimmed; blanks and repeats are dropped. When nothing is left the
    identity falls back to ``("default",)``.
    """
    if identity is None:
        raw: Iterable[str] = ()
    elif isinstance(identity, str):
        raw = (identity,)
    else:
        raw = identity

    tags: list[str] = []
    for item in raw:
        if not isinstance(item, str):
            raise TypeError(f"identity tags must be strings, got {type(item).__name__}")
        tag = item.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tuple(tags) or (DEFAULT_TAG,)


def render_headers(tags: Iterable[str]) -> str:
    """Render one header line per tag, in order, each ending with a newline."""
    return "".join(f"{get_message_header(tag)}\n" for tag in tags)


def has_all_headers(body: str, tags: Iterable[str]) -> bool:
    """True when every tag's header appears somewhere in ``body``."""
    return all(get_message_header(tag) in body for tag in tags)
