"""Content-addressed render cache.

Maps (content_hash, config_hash) -> RenderedPage so unchanged posts are not
re-rendered, and duplicate sources in a batch render once.

Thread Safety:
    DictRenderCache guards its dict with a lock, so a single instance can be
    shared by every worker of a batch.

Example:
    >>> cache = DictRenderCache()
    >>> result = render_batch(documents, renderer=renderer, cache=cache)
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Protocol

from pluma.utils.hashing import hash_str

if TYPE_CHECKING:
    from pluma.renderer import RenderedPage


class RenderCache(Protocol):
    """Protocol for content-addressed render caches.

    RenderedPage is immutable, safe to share across threads.
    """

    def get(self, content_hash: str, config_hash: str) -> RenderedPage | None:
        """Return cached page if present, else None."""
        ...

    def put(self, content_hash: str, config_hash: str, page: RenderedPage) -> None:
        """Store page in cache."""
        ...


class DictRenderCache:
    """In-memory render cache using a lock-guarded dict."""

    __slots__ = ("_data", "_lock")

    def __init__(self) -> None:
        self._data: dict[tuple[str, str], RenderedPage] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def get(self, content_hash: str, config_hash: str) -> RenderedPage | None:
        with self._lock:
            return self._data.get((content_hash, config_hash))

    def put(self, content_hash: str, config_hash: str, page: RenderedPage) -> None:
        with self._lock:
            self._data[(content_hash, config_hash)] = page


def hash_content(source: str) -> str:
    """Compute SHA256 hash of a document for cache keys."""
    return hash_str(source)


__all__ = [
    "DictRenderCache",
    "RenderCache",
    "hash_content",
]
