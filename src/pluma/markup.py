"""Lightweight markup conversion for prose blocks.

The renderer hands each Prose block to a MarkupConverter. The default
converter wraps mistune; any object with ``convert(text) -> str`` can be
swapped in.

Thread Safety:
    mistune Markdown instances hold per-parse state, so MistuneConverter
    keeps one instance per thread.
"""

from __future__ import annotations

import threading
from typing import Protocol

import mistune

from pluma.errors import ConfigError

# mistune's built-in plugin names
MISTUNE_PLUGINS = frozenset(
    {
        "strikethrough",
        "footnotes",
        "table",
        "url",
        "task_lists",
        "def_list",
        "abbr",
        "mark",
        "insert",
        "superscript",
        "subscript",
        "math",
        "ruby",
        "spoiler",
    }
)


class MarkupConverter(Protocol):
    """Protocol for lightweight-markup-to-HTML converters.

    Implementations must be safe to call from multiple threads.
    """

    def convert(self, text: str) -> str:
        """Convert markup text to HTML."""
        ...


class MistuneConverter:
    """Markdown to HTML with mistune.

    Usage:
        >>> converter = MistuneConverter(plugins=("strikethrough",))
        >>> converter.convert("~~gone~~")
        '<p><del>gone</del></p>\\n'

    """

    __slots__ = ("_escape", "_local", "_plugins")

    def __init__(self, *, plugins: tuple[str, ...] = (), escape: bool = False) -> None:
        """Initialize converter.

        Args:
            plugins: mistune plugin names to enable
            escape: Escape raw HTML in prose instead of passing it through

        Raises:
            ConfigError: If a plugin name is not a mistune built-in
        """
        unknown = sorted(set(plugins) - MISTUNE_PLUGINS)
        if unknown:
            raise ConfigError(f"Unknown markup plugins: {', '.join(unknown)}")
        self._plugins = list(plugins)
        self._escape = escape
        self._local = threading.local()

    def _markdown(self) -> mistune.Markdown:
        md = getattr(self._local, "md", None)
        if md is None:
            md = mistune.create_markdown(escape=self._escape, plugins=self._plugins)
            self._local.md = md
        return md

    def convert(self, text: str) -> str:
        result = self._markdown()(text)
        return result if isinstance(result, str) else ""
