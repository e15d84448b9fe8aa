"""
pluma: static renderer for Markdown blog posts.

Turns posts with a ``---``-delimited metadata header into HTML pages with
date-based addresses. Fenced code is preserved byte-for-byte; prose goes
through mistune; pages go through Jinja2 templates.

Quick Start:
    >>> from pluma import PostRenderer
    >>> renderer = PostRenderer()
    >>> page = renderer(
    ...     "---\\n"
    ...     "layout: post\\n"
    ...     "title: NSOperation Subclassing\\n"
    ...     "date: 2021-02-20\\n"
    ...     "---\\n"
    ...     "# Notes\\n"
    ... )
    >>> page.address
    '2021/02/20/nsoperation-subclassing'

    >>> # Whole directories, rendered in parallel
    >>> from pluma import build_site
    >>> result = build_site("posts/", "public/")
    >>> [str(r.error) for r in result.failures]

Installation:
    pip install pluma              # mistune + Jinja2
    pip install pluma[syntax]      # + syntax highlighting via Rosettes
"""

from pluma.address import assign_addresses, derive_address
from pluma.batch import BatchResult, DocumentReport, SourceDocument, render_batch
from pluma.cache import DictRenderCache, RenderCache, hash_content
from pluma.config import SiteConfig, hash_config, load_config
from pluma.errors import (
    AddressCollisionError,
    ConfigError,
    Diagnostic,
    ParseError,
    ParseErrorKind,
    PlumaError,
    RenderError,
    WarningKind,
)
from pluma.frontmatter import parse_front_matter
from pluma.highlighting import Highlighter, PlainHighlighter, get_highlighter
from pluma.index import IndexEntry, SiteIndex, build_index
from pluma.location import SourceLocation
from pluma.markup import MarkupConverter, MistuneConverter
from pluma.nodes import CodeFence, Metadata, Post, Prose
from pluma.renderer import PostRenderer, RenderedBlock, RenderedPage, parse_post
from pluma.scanner import BodyScanner, render_body
from pluma.serialization import page_to_dict, page_to_json, serialize_body
from pluma.site import build_site, load_sources
from pluma.templates import PageTemplates

__version__ = "0.1.0"


__all__ = [  # noqa: RUF022 (grouped by category)
    # Version
    "__version__",
    # Core operations
    "parse_front_matter",
    "render_body",
    "derive_address",
    "assign_addresses",
    "parse_post",
    "serialize_body",
    # Document model
    "Post",
    "Metadata",
    "Prose",
    "CodeFence",
    "SourceLocation",
    "BodyScanner",
    # Rendering
    "PostRenderer",
    "RenderedBlock",
    "RenderedPage",
    "MarkupConverter",
    "MistuneConverter",
    "Highlighter",
    "PlainHighlighter",
    "get_highlighter",
    "PageTemplates",
    # Batch + site
    "SourceDocument",
    "DocumentReport",
    "BatchResult",
    "render_batch",
    "build_site",
    "load_sources",
    "IndexEntry",
    "SiteIndex",
    "build_index",
    "page_to_dict",
    "page_to_json",
    # Render cache
    "DictRenderCache",
    "RenderCache",
    "hash_content",
    # Configuration
    "SiteConfig",
    "hash_config",
    "load_config",
    # Errors
    "PlumaError",
    "ParseError",
    "ParseErrorKind",
    "AddressCollisionError",
    "RenderError",
    "ConfigError",
    "Diagnostic",
    "WarningKind",
]
