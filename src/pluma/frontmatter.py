"""Front matter parsing.

A post starts with a header of ``key: value`` lines between two ``---``
delimiter lines:

    ---
    layout: post
    title: NSOperation Subclassing
    date: 2021-02-20 10:00:00 -0800
    categories: [swift, concurrency]
    ---

The header is read line by line without a YAML parser: every line is one
entry, split at the first colon. Duplicate keys follow last-write-wins and
are flagged, since the conflicting values are ambiguous.

Thread Safety:
    parse_front_matter is a pure function. Safe to call from any thread.

"""

from __future__ import annotations

from datetime import datetime

from pluma.config import DEFAULT_CONFIG, SiteConfig
from pluma.errors import Diagnostic, ParseError, ParseErrorKind, WarningKind
from pluma.nodes import Metadata
from pluma.utils.logger import get_logger
from pluma.utils.text import split_lines

logger = get_logger(__name__)

DELIMITER = "---"
REQUIRED_KEYS = ("layout", "title", "date")
KNOWN_KEYS = frozenset({*REQUIRED_KEYS, "categories"})

# Tried in order after datetime.fromisoformat
_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M %z",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)


def _is_delimiter(line: str) -> bool:
    return line.rstrip() == DELIMITER


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def parse_date(text: str, config: SiteConfig | None = None) -> datetime | None:
    """Parse a front matter date into an aware datetime.

    Dates without an offset get the configured default offset. The wall
    clock values are never converted.

    Returns:
        The timestamp, or None if ``text`` is not a recognized date
    """
    config = config or DEFAULT_CONFIG
    value: datetime | None = None
    try:
        value = datetime.fromisoformat(text)
    except ValueError:
        for fmt in _DATE_FORMATS:
            try:
                value = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=config.default_tzinfo)
    return value


def parse_categories(value: str) -> tuple[str, ...]:
    """Split a categories value.

    Accepts a flow list (``[a, b]``) or a whitespace-separated string
    (``a b``). Order is kept; duplicates are dropped.

    Example:
        >>> parse_categories("[swift, 'concurrency', swift]")
        ('swift', 'concurrency')
    """
    value = value.strip()
    if value.startswith("[") and value.endswith("]"):
        items = value[1:-1].split(",")
    else:
        items = value.split()

    seen: dict[str, None] = {}
    for item in items:
        name = _unquote(item.strip())
        if name:
            seen.setdefault(name, None)
    return tuple(seen)


def parse_front_matter(
    raw_text: str,
    *,
    source_file: str | None = None,
    config: SiteConfig | None = None,
) -> tuple[Metadata, str]:
    """Split a document into its metadata and remaining body text.

    Args:
        raw_text: Full document source
        source_file: Optional source path for error messages
        config: Site configuration (for extra keys and default offset)

    Returns:
        (metadata, remaining_text) where remaining_text starts right after
        the closing delimiter line

    Raises:
        ParseError: MISSING_FRONT_MATTER, UNTERMINATED_FRONT_MATTER,
            INVALID_METADATA_LINE, MISSING_METADATA_KEY or INVALID_DATE

    Example:
        >>> meta, body = parse_front_matter(
        ...     "---\\nlayout: post\\ntitle: Hi\\ndate: 2021-02-20\\n---\\nBody\\n"
        ... )
        >>> meta.title, body
        ('Hi', 'Body\\n')
    """
    config = config or DEFAULT_CONFIG
    text = raw_text[1:] if raw_text.startswith("\ufeff") else raw_text
    lines = split_lines(text)

    if not lines or not _is_delimiter(lines[0]):
        raise ParseError(
            f"Document must start with a '{DELIMITER}' front matter delimiter",
            ParseErrorKind.MISSING_FRONT_MATTER,
            lineno=1,
            col_offset=1,
            source_file=source_file,
        )

    values: dict[str, str] = {}
    key_lines: dict[str, int] = {}
    warnings: list[Diagnostic] = []
    close_index: int | None = None

    for index in range(1, len(lines)):
        lineno = index + 1
        line = lines[index]
        if _is_delimiter(line):
            close_index = index
            break

        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        key, sep, value = stripped.partition(":")
        key = key.strip()
        if not sep or not key:
            raise ParseError(
                f"Expected 'key: value' in front matter, got {stripped!r}",
                ParseErrorKind.INVALID_METADATA_LINE,
                lineno=lineno,
                col_offset=1,
                source_file=source_file,
            )

        if key in values:
            warnings.append(
                Diagnostic(
                    WarningKind.DUPLICATE_METADATA_KEY,
                    f"Duplicate key '{key}' (line {key_lines[key]} overridden)",
                    lineno=lineno,
                    source_file=source_file,
                )
            )
        values[key] = _unquote(value.strip())
        key_lines[key] = lineno

    if close_index is None:
        raise ParseError(
            f"Front matter opened on line 1 is never closed with '{DELIMITER}'",
            ParseErrorKind.UNTERMINATED_FRONT_MATTER,
            lineno=1,
            col_offset=1,
            source_file=source_file,
        )

    for key in REQUIRED_KEYS:
        if key not in values:
            raise ParseError(
                f"Front matter is missing required key '{key}'",
                ParseErrorKind.MISSING_METADATA_KEY,
                lineno=close_index + 1,
                col_offset=1,
                source_file=source_file,
            )

    date = parse_date(values["date"], config)
    if date is None:
        raise ParseError(
            f"Invalid date {values['date']!r}",
            ParseErrorKind.INVALID_DATE,
            lineno=key_lines["date"],
            col_offset=1,
            source_file=source_file,
        )

    extra: dict[str, str] = {}
    for key, value in values.items():
        if key in KNOWN_KEYS:
            continue
        extra[key] = value
        if key not in config.extra_keys:
            warnings.append(
                Diagnostic(
                    WarningKind.UNKNOWN_METADATA_KEY,
                    f"Unknown metadata key '{key}' passed through",
                    lineno=key_lines[key],
                    source_file=source_file,
                )
            )

    for warning in warnings:
        logger.debug("%s", warning)

    metadata = Metadata(
        layout=values["layout"],
        title=values["title"],
        date=date,
        date_text=values["date"],
        categories=parse_categories(values.get("categories", "")),
        extra=extra,
        key_lines=key_lines,
        body_lineno=close_index + 2,
        warnings=tuple(warnings),
    )
    remaining = "".join(lines[close_index + 1 :])
    return metadata, remaining

