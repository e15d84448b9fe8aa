"""Text processing utilities for pluma.

Provides the canonical slugify used for post addresses and category pages.

Example:
    >>> from pluma.utils.text import slugify
    >>> slugify("NSOperation Subclassing")
    'nsoperation-subclassing'
"""

from __future__ import annotations

import html as html_module
import re

# Characters removed before separators are collapsed
_UNICODE_DISALLOWED = re.compile(r"[^\w\s-]")
_ASCII_DISALLOWED = re.compile(r"[^a-z0-9_\s-]")
_SEPARATOR_RUN = re.compile(r"[-\s]+")


def slugify(
    text: str,
    unescape_html: bool = True,
    max_length: int | None = None,
    separator: str = "-",
    ascii_only: bool = False,
) -> str:
    """Convert text to a URL-safe slug.

    Lower-cases the text, strips every character outside the allow-list and
    collapses runs of whitespace and hyphens into a single separator.

    The default allow-list is Unicode word characters, so international
    titles keep their letters. With ``ascii_only`` only ``[a-z0-9_]`` survive.

    Args:
        text: Text to slugify
        unescape_html: Whether to decode HTML entities first (e.g., &amp; -> &)
        max_length: Maximum slug length (None = unlimited)
        separator: Character to use between words (default: '-')
        ascii_only: Restrict the allow-list to ASCII letters, digits and '_'

    Returns:
        URL-safe slug

    Examples:
        >>> slugify("Hello World!")
        'hello-world'
        >>> slugify("Test &amp; Code")
        'test-code'
        >>> slugify("Café")
        'café'
        >>> slugify("Café", ascii_only=True)
        'caf'
    """
    if not text:
        return ""

    if unescape_html:
        text = html_module.unescape(text)

    text = text.lower().strip()

    disallowed = _ASCII_DISALLOWED if ascii_only else _UNICODE_DISALLOWED
    text = disallowed.sub("", text)
    text = _SEPARATOR_RUN.sub(separator, text)
    text = text.strip(separator)

    if max_length is not None and len(text) > max_length:
        # Break at a separator for cleaner truncation
        truncated = text[:max_length]
        if separator in truncated:
            parts = truncated.split(separator)
            text = separator.join(parts[:-1])
        else:
            text = truncated

    return text


def escape_html(text: str) -> str:
    """Escape HTML special characters for safe use in text and attributes.

    Args:
        text: Text to escape

    Returns:
        HTML-escaped text

    Examples:
        >>> escape_html("<b>'x'</b>")
        '&lt;b&gt;&#x27;x&#x27;&lt;/b&gt;'
    """
    if not text:
        return ""

    escaped = html_module.escape(text, quote=True)
    return escaped.replace("'", "&#x27;")


def split_lines(text: str) -> list[str]:
    """Split text into lines at ``\\n`` only, keeping line endings.

    Unlike str.splitlines, form feeds and Unicode line separators stay inside
    their line, so ``"".join(split_lines(text)) == text`` and line numbers
    agree with what editors show for Markdown sources.

    Examples:
        >>> split_lines("a\\nb")
        ['a\\n', 'b']
        >>> split_lines("")
        []
    """
    if not text:
        return []
    lines = text.split("\n")
    result = [line + "\n" for line in lines[:-1]]
    if lines[-1]:
        result.append(lines[-1])
    return result
