"""Document renderer: raw post text to a rendered page.

The renderer wires the pure pieces together:

    raw text ──parse_front_matter──▶ Metadata + body text
             ──render_body─────────▶ Prose / CodeFence blocks
             ──derive_address──────▶ YYYY/MM/DD/slug
             ──converter/highlighter▶ RenderedPage

Thread Safety:
All per-document state lives in locals; a single PostRenderer may be shared
by every worker thread of a batch.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal

from pluma.address import derive_address
from pluma.config import DEFAULT_CONFIG, SiteConfig
from pluma.errors import Diagnostic, RenderError
from pluma.frontmatter import parse_front_matter
from pluma.highlighting import Highlighter, get_highlighter
from pluma.markup import MarkupConverter, MistuneConverter
from pluma.nodes import CodeFence, Metadata, Post, Prose
from pluma.scanner import render_body
from pluma.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RenderedBlock:
    """One body block and its HTML."""

    kind: Literal["prose", "code_fence"]
    html: str
    block: Prose | CodeFence


@dataclass(frozen=True, slots=True)
class RenderedPage:
    """A post ready for templating.

    Attributes:
        metadata: Resolved front matter
        address: Canonical address (``YYYY/MM/DD/slug``)
        blocks: Rendered body blocks in document order
        source_file: Where the post came from (optional)
        warnings: Non-fatal findings gathered while rendering
    """

    metadata: Metadata
    address: str
    blocks: tuple[RenderedBlock, ...]
    source_file: str | None = None
    warnings: tuple[Diagnostic, ...] = ()

    @property
    def body_html(self) -> str:
        return "".join(b.html for b in self.blocks)

    @property
    def title(self) -> str:
        return self.metadata.title


def parse_post(
    raw_text: str,
    *,
    source_file: str | None = None,
    config: SiteConfig | None = None,
) -> Post:
    """Parse raw text into an immutable Post.

    Raises:
        ParseError: If the front matter or body is malformed
    """
    metadata, remaining = parse_front_matter(raw_text, source_file=source_file, config=config)
    body = tuple(
        render_body(
            remaining,
            first_lineno=metadata.body_lineno,
            offset=len(raw_text) - len(remaining),
            source_file=source_file,
        )
    )
    return Post(metadata=metadata, body=body, source_file=source_file)


class PostRenderer:
    """High-level renderer combining the parser with the HTML collaborators.

    Usage:
        >>> renderer = PostRenderer()
        >>> page = renderer(
        ...     "---\\nlayout: post\\ntitle: Hello\\ndate: 2021-02-20\\n---\\n# Hi\\n"
        ... )
        >>> page.address
        '2021/02/20/hello'

        >>> # Swap collaborators
        >>> renderer = PostRenderer(highlighter=MyHighlighter())

    Thread Safety:
        Safe to share across threads; the default converter keeps per-thread
        mistune instances.

    """

    __slots__ = ("_config", "_converter", "_highlighter")

    def __init__(
        self,
        config: SiteConfig | None = None,
        *,
        converter: MarkupConverter | None = None,
        highlighter: Highlighter | None = None,
    ) -> None:
        """Initialize renderer.

        Args:
            config: Site configuration (defaults if None)
            converter: Prose converter (mistune with config plugins if None)
            highlighter: Code highlighter (config.highlighter if None)
        """
        self._config = config or DEFAULT_CONFIG
        self._converter = converter or MistuneConverter(
            plugins=self._config.plugins, escape=self._config.escape_html
        )
        self._highlighter = highlighter or get_highlighter(self._config.highlighter)

    @property
    def config(self) -> SiteConfig:
        return self._config

    def __call__(self, raw_text: str, *, source_file: str | None = None) -> RenderedPage:
        """Parse and render a document in one call."""
        return self.render(self.parse(raw_text, source_file=source_file))

    def parse(self, raw_text: str, *, source_file: str | None = None) -> Post:
        """Parse raw text into a Post.

        Raises:
            ParseError: If the document is malformed
        """
        return parse_post(raw_text, source_file=source_file, config=self._config)

    def render(self, post: Post) -> RenderedPage:
        """Render a parsed Post.

        Raises:
            ParseError: EMPTY_SLUG if the title gives no address
            RenderError: If a collaborator fails
        """
        address = derive_address(post.metadata, config=self._config, source_file=post.source_file)

        # Reference definitions apply document-wide, but prose is converted
        # block by block: give every block the full set.
        definitions = "".join(
            b.text
            for b in post.body
            if isinstance(b, Prose) and b.kind == "link_definitions"
        )

        blocks: list[RenderedBlock] = []
        for block in post.body:
            try:
                if isinstance(block, CodeFence):
                    html = self._highlighter.highlight(block.code, block.language)
                    blocks.append(RenderedBlock("code_fence", html, block))
                elif block.kind == "link_definitions":
                    # Renders to nothing when every line really is a definition
                    blocks.append(RenderedBlock("prose", self._converter.convert(block.text), block))
                else:
                    text = block.text
                    if definitions:
                        text = f"{text.rstrip()}\n\n{definitions}"
                    blocks.append(RenderedBlock("prose", self._converter.convert(text), block))
            except Exception as e:
                raise RenderError(f"{block.location}: {e}") from e

        logger.debug("Rendered %s -> %s (%d blocks)", post.source_file or "<string>", address, len(blocks))

        return RenderedPage(
            metadata=post.metadata,
            address=address,
            blocks=tuple(blocks),
            source_file=post.source_file,
            warnings=post.metadata.warnings,
        )

    def render_string(self, raw_text: str, *, source_file: str | None = None) -> str:
        """Render a document to its body HTML only."""
        return self(raw_text, source_file=source_file).body_html


def rebind_source(page: RenderedPage, source_file: str | None) -> RenderedPage:
    """Return ``page`` attributed to another source file."""
    if page.source_file == source_file:
        return page
    warnings = tuple(replace(w, source_file=source_file) for w in page.warnings)
    return replace(page, source_file=source_file, warnings=warnings)
