"""Canonical page addresses.

A post's address is its own calendar date plus a slug of its title:

    >>> from datetime import datetime, timezone
    >>> from pluma.nodes import Metadata
    >>> meta = Metadata(
    ...     layout="post",
    ...     title="NSOperation Subclassing",
    ...     date=datetime(2021, 2, 20, tzinfo=timezone.utc),
    ... )
    >>> derive_address(meta)
    '2021/02/20/nsoperation-subclassing'

The date is formatted as written in the front matter; it is never converted
to another timezone, so a post dated late in the evening at -08:00 keeps
its local calendar day.

Collisions between posts are reported, never silently resolved, unless the
caller opts into a source-order tie-break.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from pluma.config import DEFAULT_CONFIG, SiteConfig
from pluma.errors import AddressCollisionError, ParseError, ParseErrorKind
from pluma.nodes import Metadata
from pluma.utils.logger import get_logger
from pluma.utils.text import slugify

logger = get_logger(__name__)

T = TypeVar("T")


def derive_address(
    metadata: Metadata,
    *,
    config: SiteConfig | None = None,
    source_file: str | None = None,
) -> str:
    """Derive ``YYYY/MM/DD/<slug>`` from a post's date and title.

    Pure and idempotent: identical ``(date, title)`` always gives the
    identical address.

    Raises:
        ParseError: EMPTY_SLUG if no title character survives slugification
    """
    config = config or DEFAULT_CONFIG
    slug = slugify(metadata.title, ascii_only=config.ascii_slugs)
    if not slug:
        raise ParseError(
            f"Title {metadata.title!r} produces an empty address slug",
            ParseErrorKind.EMPTY_SLUG,
            lineno=metadata.key_lines.get("title"),
            col_offset=1,
            source_file=source_file,
        )
    return f"{metadata.date:%Y/%m/%d}/{slug}"


def assign_addresses(
    items: Sequence[tuple[str, str | None, T]],
    *,
    tie_break: bool = False,
) -> tuple[list[T], list[tuple[T, AddressCollisionError]]]:
    """Check a batch of ``(address, source, item)`` triples for collisions.

    Args:
        items: Triples in source order
        tie_break: Let the first item in source order win each collision

    Returns:
        (winners, losers): winners in input order; each loser paired with
        the collision error that excluded it

    Raises:
        AddressCollisionError: On the first collision, when tie_break is off
    """
    by_address: dict[str, list[tuple[str | None, T]]] = {}
    for address, source, item in items:
        by_address.setdefault(address, []).append((source, item))

    contested = {
        address: AddressCollisionError(address, tuple(source for source, _ in claims))
        for address, claims in by_address.items()
        if len(claims) > 1
    }
    if contested and not tie_break:
        raise next(iter(contested.values()))

    winners: list[T] = []
    losers: list[tuple[T, AddressCollisionError]] = []
    claimed: set[str] = set()
    for address, source, item in items:
        if address in claimed:
            logger.warning(
                "Skipping %s: address %s already taken by %s",
                source or "<string>",
                address,
                contested[address].sources[0] or "<string>",
            )
            losers.append((item, contested[address]))
            continue
        claimed.add(address)
        winners.append(item)
    return winners, losers
