"""Parallel batch rendering with per-document reports.

Each document is parsed and rendered on its own: no state is shared between
documents, so the batch runs on a thread pool. A malformed document is
reported and skipped; it never blocks its siblings. Address collisions are
checked once every document has rendered.

Example:
    >>> docs = [SourceDocument("a.md", text_a), SourceDocument("b.md", text_b)]
    >>> result = render_batch(docs, renderer=PostRenderer())
    >>> [r.source_file for r in result.failures]
    ['b.md']

"""

from __future__ import annotations

import os
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace

from pluma.address import assign_addresses
from pluma.cache import RenderCache, hash_content
from pluma.config import hash_config
from pluma.errors import Diagnostic, PlumaError
from pluma.index import SiteIndex, build_index
from pluma.renderer import PostRenderer, RenderedPage, rebind_source
from pluma.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SourceDocument:
    """Raw text of one document and where it came from."""

    source_file: str | None
    text: str


@dataclass(frozen=True, slots=True)
class DocumentReport:
    """Outcome for one document: a page, or the error that excluded it."""

    source_file: str | None
    page: RenderedPage | None = None
    error: PlumaError | None = None
    warnings: tuple[Diagnostic, ...] = ()

    @property
    def ok(self) -> bool:
        return self.page is not None and self.error is None


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Everything a batch produced.

    Attributes:
        reports: One report per input document, in input order
        index: Chronological index over the successful pages
    """

    reports: tuple[DocumentReport, ...]
    index: SiteIndex = field(default_factory=SiteIndex)

    @property
    def pages(self) -> tuple[RenderedPage, ...]:
        return tuple(r.page for r in self.reports if r.page is not None and r.error is None)

    @property
    def failures(self) -> tuple[DocumentReport, ...]:
        return tuple(r for r in self.reports if not r.ok)

    @property
    def warnings(self) -> tuple[Diagnostic, ...]:
        return tuple(w for r in self.reports for w in r.warnings)


def render_document(
    document: SourceDocument,
    renderer: PostRenderer,
    cache: RenderCache | None = None,
    config_hash: str = "",
) -> DocumentReport:
    """Render one document, turning parse and render failures into a report."""
    content_hash = hash_content(document.text) if cache is not None else ""
    if cache is not None:
        cached = cache.get(content_hash, config_hash)
        if cached is not None:
            page = rebind_source(cached, document.source_file)
            return DocumentReport(document.source_file, page=page, warnings=page.warnings)

    try:
        page = renderer(document.text, source_file=document.source_file)
    except PlumaError as e:
        logger.warning("Skipping %s: %s", document.source_file or "<string>", e)
        return DocumentReport(document.source_file, error=e)

    if cache is not None:
        cache.put(content_hash, config_hash, page)
    return DocumentReport(document.source_file, page=page, warnings=page.warnings)


def render_batch(
    documents: Iterable[SourceDocument],
    *,
    renderer: PostRenderer,
    max_workers: int | None = None,
    tie_break: bool | None = None,
    cache: RenderCache | None = None,
) -> BatchResult:
    """Render documents in parallel.

    Args:
        documents: Documents in source order
        renderer: Shared renderer (thread-safe)
        max_workers: Thread count bound (config.max_workers, else CPU count)
        tie_break: Resolve address collisions by source order
            (config.tie_break_collisions if None)
        cache: Optional content-addressed render cache (must be thread-safe)

    Returns:
        BatchResult with one report per document, in input order

    Raises:
        AddressCollisionError: If two pages derive the same address and no
            tie-break is configured
    """
    docs = list(documents)
    config = renderer.config
    if tie_break is None:
        tie_break = config.tie_break_collisions
    workers = max_workers or config.max_workers or os.cpu_count() or 1
    workers = max(1, min(workers, len(docs) or 1))
    config_hash = hash_config(config) if cache is not None else ""

    logger.info("Rendering %d documents with %d workers", len(docs), workers)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        reports = list(
            executor.map(lambda doc: render_document(doc, renderer, cache, config_hash), docs)
        )

    claims = [(r.page.address, r.source_file, i) for i, r in enumerate(reports) if r.page is not None]
    _, losers = assign_addresses(claims, tie_break=tie_break)
    for i, error in losers:
        reports[i] = replace(reports[i], page=None, error=error)

    result = BatchResult(
        reports=tuple(reports),
        index=build_index(r.page for r in reports if r.page is not None),
    )
    logger.info(
        "Rendered %d of %d documents (%d skipped, %d warnings)",
        len(result.pages),
        len(docs),
        len(result.failures),
        len(result.warnings),
    )
    return result


__all__ = [
    "BatchResult",
    "DocumentReport",
    "SourceDocument",
    "render_batch",
    "render_document",
]
