"""Source location tracking for error messages and debugging.

Provides SourceLocation dataclass for tracking positions in source text.

Thread Safety:
SourceLocation is frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Span of a block within the original document.

    Line numbers are 1-indexed and refer to the whole document, front matter
    included. Offsets are absolute character offsets into the raw text.

    Attributes:
        lineno: Starting line number (1-indexed)
        col_offset: Starting column offset (1-indexed)
        offset: Absolute start offset in the raw document
        end_offset: Absolute end offset in the raw document (exclusive)
        end_lineno: Last line covered by the span (optional)
        source_file: Source file path (optional)

    Examples:
        >>> loc = SourceLocation(lineno=7, col_offset=1, source_file="posts/a.md")
        >>> str(loc)
        'posts/a.md:7:1'
    """

    lineno: int
    col_offset: int = 1
    offset: int = 0
    end_offset: int = 0
    end_lineno: int | None = None
    source_file: str | None = None

    def __str__(self) -> str:
        """Format location for error messages.

        Returns:
            Formatted string like "file.md:10:5" or "10:5"
        """
        if self.source_file:
            return f"{self.source_file}:{self.lineno}:{self.col_offset}"
        return f"{self.lineno}:{self.col_offset}"
