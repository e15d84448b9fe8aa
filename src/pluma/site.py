"""Build a site directory from a directory of posts.

Layout of the output:

    <output>/index.html                  chronological listing
    <output>/manifest.json               index as JSON (sorted keys)
    <output>/YYYY/MM/DD/<slug>/index.html   one per rendered post

Sources are read in sorted path order, which is the source order used for
address tie-breaks.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path

from pluma.batch import BatchResult, DocumentReport, SourceDocument, render_batch
from pluma.cache import RenderCache
from pluma.config import DEFAULT_CONFIG, SiteConfig
from pluma.errors import RenderError
from pluma.index import build_index
from pluma.renderer import PostRenderer
from pluma.templates import PageTemplates
from pluma.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PATTERN = "**/*.md"


def load_sources(content_dir: str | Path, pattern: str = DEFAULT_PATTERN) -> list[SourceDocument]:
    """Read every matching file under ``content_dir``, sorted by path.

    Source paths are recorded relative to ``content_dir`` (POSIX style).

    Raises:
        FileNotFoundError: If content_dir does not exist
    """
    root = Path(content_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"Content directory not found: {root}")
    paths = sorted(p for p in root.glob(pattern) if p.is_file())
    return [
        SourceDocument(p.relative_to(root).as_posix(), p.read_text(encoding="utf-8"))
        for p in paths
    ]


def render_pages(
    result: BatchResult,
    templates: PageTemplates,
) -> tuple[BatchResult, dict[str, str], str]:
    """Render every page and the index through the templates, writing nothing.

    A page whose template fails becomes a failed report and drops out of the
    index; the other pages are unaffected. Layout fallback warnings are added
    to each page's report.

    Returns:
        (result, html by address, index html)

    Raises:
        RenderError: If the index template fails
    """
    reports: list[DocumentReport] = []
    pages: dict[str, str] = {}
    for report in result.reports:
        if report.page is not None and report.error is None:
            try:
                html, layout_warnings = templates.render_page(report.page)
            except RenderError as e:
                logger.warning("Skipping %s: %s", report.source_file or "<string>", e)
                report = replace(report, page=None, error=e)
            else:
                pages[report.page.address] = html
                if layout_warnings:
                    report = replace(report, warnings=report.warnings + layout_warnings)
        reports.append(report)

    index = build_index(r.page for r in reports if r.page is not None and r.error is None)
    result = replace(result, reports=tuple(reports), index=index)
    return result, pages, templates.render_index(index)


def write_site(
    result: BatchResult,
    output_dir: str | Path,
    pages: Mapping[str, str],
    index_html: str,
) -> list[Path]:
    """Write rendered pages, the index page and the manifest.

    Returns:
        Paths written, in write order
    """
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []

    for address, html in pages.items():
        target = out / Path(*address.split("/")) / "index.html"
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(html, encoding="utf-8")
        written.append(target)

    index_path = out / "index.html"
    index_path.write_text(index_html, encoding="utf-8")
    written.append(index_path)

    manifest_path = out / "manifest.json"
    manifest_path.write_text(result.index.to_json() + "\n", encoding="utf-8")
    written.append(manifest_path)

    logger.info("Wrote %d files to %s", len(written), out)
    return written


def build_site(
    content_dir: str | Path,
    output_dir: str | Path,
    *,
    config: SiteConfig | None = None,
    renderer: PostRenderer | None = None,
    cache: RenderCache | None = None,
    pattern: str = DEFAULT_PATTERN,
) -> BatchResult:
    """Render every post under ``content_dir`` into ``output_dir``.

    Malformed posts and posts whose template fails are skipped and reported
    in the result. Layout fallback warnings from templating are added to
    each page's report.

    Raises:
        AddressCollisionError: If two posts share an address and no
            tie-break is configured (nothing is written)
        FileNotFoundError: If content_dir does not exist
        RenderError: If the index template fails (nothing is written)
    """
    config = config or DEFAULT_CONFIG
    renderer = renderer or PostRenderer(config)
    templates = PageTemplates(config)

    documents = load_sources(content_dir, pattern)
    result = render_batch(documents, renderer=renderer, cache=cache)
    result, pages, index_html = render_pages(result, templates)

    write_site(result, output_dir, pages, index_html)
    return result
