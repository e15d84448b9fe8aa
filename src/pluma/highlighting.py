"""Syntax highlighting protocol and implementations for code fences.

A highlighter turns ``(code, language)`` into HTML. The language tag from
the fence is only a hint: highlighters may colour the code, but must escape
it and must never change what it says.

Two highlighters ship with pluma:
- "plain": escaped ``<pre><code class="language-x">`` (no dependencies)
- "rosettes": Rosettes-based colouring (``pip install pluma[syntax]``)

Usage:
    from pluma.highlighting import get_highlighter

    highlighter = get_highlighter("plain")
    html = highlighter.highlight("let x = 1", "swift")
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from pluma.errors import ConfigError
from pluma.utils.text import escape_html


class Highlighter(Protocol):
    """Protocol for syntax highlighters.

    Thread Safety:
        Implementations must be thread-safe. highlight() may be called
        concurrently from multiple render threads.
    """

    def highlight(self, code: str, language: str) -> str:
        """Highlight code with syntax colors.

        Args:
            code: Literal code from the fence
            language: Language tag (may be empty)

        Returns:
            HTML markup

        Contract:
            - MUST escape HTML entities in code
            - MUST NOT alter the code's text
            - SHOULD fall back to plain text for unknown languages
        """
        ...

    def supports_language(self, language: str) -> bool:
        """Check if the highlighter colours the given language.

        Contract:
            - MUST NOT raise exceptions
        """
        ...


class PlainHighlighter:
    """Escapes code into a ``<pre><code>`` element, tagged with its language."""

    def highlight(self, code: str, language: str) -> str:
        lang_class = f' class="language-{escape_html(language)}"' if language else ""
        return f"<pre><code{lang_class}>{escape_html(code)}</code></pre>\n"

    def supports_language(self, language: str) -> bool:
        return False


class RosettesHighlighter:
    """Rosettes-based syntax highlighter implementing the Highlighter protocol.

    Languages Rosettes does not know are rendered by PlainHighlighter.
    """

    def __init__(self) -> None:
        import rosettes  # type: ignore[import-not-found]

        self._rosettes = rosettes
        self._plain = PlainHighlighter()

    def highlight(self, code: str, language: str) -> str:
        if not self.supports_language(language):
            return self._plain.highlight(code, language)
        result: str = self._rosettes.highlight(code, language=language)
        return result

    def supports_language(self, language: str) -> bool:
        if not language:
            return False
        try:
            result: bool = self._rosettes.supports_language(language)
            return result
        except Exception:
            return False


HIGHLIGHTERS: dict[str, Callable[[], Highlighter]] = {
    "plain": PlainHighlighter,
    "rosettes": RosettesHighlighter,
}


def get_highlighter(name: str) -> Highlighter:
    """Create a highlighter by name.

    Raises:
        ConfigError: If the name is unknown, or its library is not installed
    """
    factory = HIGHLIGHTERS.get(name)
    if factory is None:
        known = ", ".join(sorted(HIGHLIGHTERS))
        raise ConfigError(f"Unknown highlighter {name!r} (expected one of: {known})")
    try:
        return factory()
    except ImportError as e:
        raise ConfigError(
            f"Highlighter {name!r} needs an optional dependency: pip install pluma[syntax]"
        ) from e
