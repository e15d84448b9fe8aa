"""Chronological index and manifest of rendered pages.

Ordering comes only from each post's ``date`` (newest first, address as
tie-break), never from the order pages finished rendering.

Example:
    >>> index = build_index(pages)
    >>> [e.address for e in index.entries]
    ['2021/03/01/later', '2021/02/20/earlier']
    >>> index.to_json()  # deterministic manifest
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pluma.renderer import RenderedPage


@dataclass(frozen=True, slots=True)
class IndexEntry:
    """One listed page."""

    address: str
    title: str
    date: datetime
    date_text: str
    categories: tuple[str, ...] = ()
    source_file: str | None = None

    @classmethod
    def from_page(cls, page: RenderedPage) -> IndexEntry:
        meta = page.metadata
        return cls(
            address=page.address,
            title=meta.title,
            date=meta.date,
            date_text=meta.date_text,
            categories=meta.categories,
            source_file=page.source_file,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "title": self.title,
            "date": self.date.isoformat(),
            "categories": list(self.categories),
            "source_file": self.source_file,
        }


@dataclass(frozen=True, slots=True)
class SiteIndex:
    """Listing view over a batch: all entries, and entries per category."""

    entries: tuple[IndexEntry, ...] = ()
    by_category: Mapping[str, tuple[IndexEntry, ...]] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.entries)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entries": [e.to_dict() for e in self.entries],
            "categories": {
                name: [e.address for e in entries] for name, entries in self.by_category.items()
            },
        }

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize to JSON with sorted keys for stable manifests."""
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True, ensure_ascii=False)


def _sort_key(entry: IndexEntry) -> tuple[float, str]:
    # Newest first; equal instants fall back to address order
    return (-entry.date.timestamp(), entry.address)


def build_index(pages: Iterable[RenderedPage]) -> SiteIndex:
    """Build the index for a set of rendered pages.

    Entries are ordered by date descending. Each category lists its entries
    in the same order; categories themselves are sorted by name.
    """
    entries = tuple(sorted((IndexEntry.from_page(p) for p in pages), key=_sort_key))

    grouped: dict[str, list[IndexEntry]] = {}
    for entry in entries:
        for category in entry.categories:
            grouped.setdefault(category, []).append(entry)

    by_category = {name: tuple(grouped[name]) for name in sorted(grouped)}
    return SiteIndex(entries=entries, by_category=by_category)
