"""Typed document model for pluma.

All nodes are frozen dataclasses with slots:
- Immutability: a Post is built once and safely shared across threads
- Pattern matching: ``match block: case CodeFence(...)`` works naturally

Node Hierarchy:
Post
├── Metadata
└── Block
    ├── Prose      (lightweight markup, handed to the markup converter)
    └── CodeFence  (literal text, never interpreted as markup)

"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Literal

from pluma.errors import Diagnostic
from pluma.location import SourceLocation

ProseKind = Literal["heading", "list", "link_definitions", "text"]


@dataclass(frozen=True, slots=True)
class Metadata:
    """Resolved front matter of a post.

    Attributes:
        layout: Template name, opaque to the core
        title: Post title
        date: Timezone-aware timestamp, exactly as written (never converted)
        date_text: The date value verbatim, for display
        categories: Ordered, de-duplicated category names
        extra: Unrecognized keys, passed through for downstream templates
        key_lines: Line number of each key in the raw document
        body_lineno: First line of the body in the raw document
        warnings: Non-fatal findings from the header

    """

    layout: str
    title: str
    date: datetime
    date_text: str = ""
    categories: tuple[str, ...] = ()
    extra: Mapping[str, str] = field(default_factory=dict)
    key_lines: Mapping[str, int] = field(default_factory=dict, compare=False)
    body_lineno: int = 1
    warnings: tuple[Diagnostic, ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        # Read-only views so a shared Metadata cannot be changed in place
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))
        object.__setattr__(self, "key_lines", MappingProxyType(dict(self.key_lines)))


@dataclass(frozen=True, slots=True)
class Block:
    """Base class for body blocks.

    All blocks track their span in the raw document.

    """

    location: SourceLocation


@dataclass(frozen=True, slots=True)
class Prose(Block):
    """A run of lightweight markup text.

    ``text`` is the raw source, blank lines included, so concatenating all
    block sources reproduces the body exactly.

    """

    text: str
    kind: ProseKind = "text"

    def source(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class CodeFence(Block):
    """A fenced code region.

    ``code`` is the literal text between the opening and closing marker
    lines, byte-for-byte. The marker lines are kept raw so the body can be
    rebuilt exactly; the language tag is a rendering hint only.

    """

    code: str
    language: str = ""
    info: str = ""
    open_line: str = "```\n"
    close_line: str = "```\n"

    def source(self) -> str:
        return self.open_line + self.code + self.close_line


@dataclass(frozen=True, slots=True)
class Post:
    """A parsed post: metadata plus its body blocks."""

    metadata: Metadata
    body: tuple[Prose | CodeFence, ...]
    source_file: str | None = None

    @property
    def code_fences(self) -> tuple[CodeFence, ...]:
        return tuple(b for b in self.body if isinstance(b, CodeFence))
