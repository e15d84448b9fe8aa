"""Exception classes and diagnostics for pluma.

Every failure is a structured value: the kind of problem plus the line (and
source file) it was found at. Parse errors are recovered per document by the
batch renderer; address collisions are fatal to a batch unless a tie-break
is configured.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ParseErrorKind(Enum):
    """Why a document could not be turned into a Post."""

    MISSING_FRONT_MATTER = "missing-front-matter"
    UNTERMINATED_FRONT_MATTER = "unterminated-front-matter"
    INVALID_METADATA_LINE = "invalid-metadata-line"
    MISSING_METADATA_KEY = "missing-metadata-key"
    INVALID_DATE = "invalid-date"
    UNTERMINATED_FENCE = "unterminated-fence"
    EMPTY_SLUG = "empty-slug"


class WarningKind(Enum):
    """Non-fatal findings attached to a document."""

    UNKNOWN_METADATA_KEY = "unknown-metadata-key"
    DUPLICATE_METADATA_KEY = "duplicate-metadata-key"
    UNKNOWN_LAYOUT = "unknown-layout"


class PlumaError(Exception):
    """Base exception for all pluma errors.

    Subclass this for specific error categories.
    """

    pass


class ParseError(PlumaError):
    """Error while reading a document's front matter or body.

    Raised when a document is malformed. The batch renderer catches it,
    reports the document and carries on with the rest.
    """

    def __init__(
        self,
        message: str,
        kind: ParseErrorKind,
        lineno: int | None = None,
        col_offset: int | None = None,
        source_file: str | None = None,
    ) -> None:
        """Initialize parse error with optional location.

        Args:
            message: Error description
            kind: Category of the failure
            lineno: Line number where error occurred (1-indexed)
            col_offset: Column offset where error occurred (1-indexed)
            source_file: Path to source file (optional)
        """
        self.message = message
        self.kind = kind
        self.lineno = lineno
        self.col_offset = col_offset
        self.source_file = source_file

        location = ""
        if source_file:
            location = f"{source_file}:"
        if lineno is not None:
            location += f"{lineno}:"
            if col_offset is not None:
                location += f"{col_offset}:"
        if location:
            location = location.rstrip(":") + " "

        super().__init__(f"{location}{message}")

    def with_source(self, source_file: str | None) -> ParseError:
        """Return a copy of this error bound to ``source_file``."""
        return ParseError(
            self.message,
            self.kind,
            lineno=self.lineno,
            col_offset=self.col_offset,
            source_file=source_file,
        )


class AddressCollisionError(PlumaError):
    """Two or more documents derive the same address.

    Without a tie-break this aborts the batch. With one, the losing
    documents each get one of these in their report.
    """

    def __init__(self, address: str, sources: tuple[str | None, ...]) -> None:
        """Initialize collision error.

        Args:
            address: The contested address
            sources: Every source that derived it, in source order
        """
        self.address = address
        self.sources = sources
        names = ", ".join(s or "<string>" for s in sources)
        super().__init__(f"Address '{address}' is derived by more than one document: {names}")


class RenderError(PlumaError):
    """Error during HTML or template rendering."""

    pass


class ConfigError(PlumaError):
    """Invalid site configuration."""

    pass


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A non-fatal finding about a document.

    Attributes:
        kind: Category of the warning
        message: Human-readable description
        lineno: Line the warning refers to (1-indexed, optional)
        source_file: Path to source file (optional)
    """

    kind: WarningKind
    message: str
    lineno: int | None = None
    source_file: str | None = None

    def __str__(self) -> str:
        location = ""
        if self.source_file:
            location = f"{self.source_file}:"
        if self.lineno is not None:
            location += f"{self.lineno}:"
        return f"{location} {self.message}" if location else self.message
