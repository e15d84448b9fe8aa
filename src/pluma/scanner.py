"""Body scanner: split a post body into prose and fenced code blocks.

Uses a window-based approach, one line at a time:
1. Find the line window
2. Classify the line (pure logic, no position changes)
3. Commit position (always advances)

There are two modes. In PROSE mode lines accumulate into Prose blocks,
split at structural boundaries. In FENCE mode every line is captured
verbatim until the closing fence; nothing inside is classified.

Link reference definitions get their own Prose blocks. A definition may
span up to three lines (label, destination, title) and cannot interrupt a
paragraph, so anything that only looks like one stays in the text.

Thread Safety:
BodyScanner instances are single-use. Create one per body string.
All state is instance-local; no shared mutable state.

"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum, auto

from pluma.errors import ParseError, ParseErrorKind
from pluma.location import SourceLocation
from pluma.nodes import CodeFence, Prose, ProseKind


class ScanMode(Enum):
    PROSE = auto()
    FENCE = auto()


class LineKind(Enum):
    BLANK = auto()
    HEADING = auto()
    LIST_ITEM = auto()
    LIST_CONTINUATION = auto()
    LINK_DEFINITION = auto()
    TEXT = auto()


_LIST_BULLETS = "-*+"


def _leading_spaces(line: str) -> int:
    count = 0
    while count < len(line) and line[count] == " ":
        count += 1
    return count


def _strip_eol(line: str) -> str:
    return line.rstrip("\r\n")


def classify_fence_open(line: str) -> tuple[str, int, str] | None:
    """Classify a line as a fence opener.

    Fences open with 3+ backticks or tildes, indented at most 3 spaces.
    Backtick fences cannot have backticks in the info string.

    Returns:
        (fence_char, fence_count, info) or None if the line is not a fence
    """
    indent = _leading_spaces(line)
    if indent >= 4:
        return None
    content = _strip_eol(line)[indent:]
    if not content or content[0] not in "`~":
        return None

    fence_char = content[0]
    count = 0
    while count < len(content) and content[count] == fence_char:
        count += 1
    if count < 3:
        return None

    info = content[count:].strip()
    if fence_char == "`" and "`" in info:
        return None
    return fence_char, count, info


def is_closing_fence(line: str, fence_char: str, fence_count: int) -> bool:
    """Check if line closes a fence opened with ``fence_count`` ``fence_char``s.

    Closing fences may be indented 0-3 spaces, must use the same character
    at least as many times, and may be followed only by whitespace.
    """
    indent = _leading_spaces(line)
    if indent >= 4:
        return False
    content = _strip_eol(line)[indent:]

    count = 0
    while count < len(content) and content[count] == fence_char:
        count += 1
    if count < fence_count:
        return False
    return content[count:].strip() == ""


def _is_heading(content: str) -> bool:
    level = 0
    while level < len(content) and content[level] == "#":
        level += 1
    if not 1 <= level <= 6:
        return False
    return level == len(content) or content[level] in " \t"


def _is_list_item(content: str) -> bool:
    if len(content) >= 2 and content[0] in _LIST_BULLETS and content[1] in " \t":
        return True
    if content in ("-", "*", "+"):
        return True
    digits = 0
    while digits < len(content) and digits < 9 and content[digits].isdigit():
        digits += 1
    if digits == 0 or digits >= len(content) or content[digits] not in ".)":
        return False
    rest = content[digits + 1 :]
    return rest == "" or rest[0] in " \t"


def _line_end(source: str, pos: int) -> int:
    newline = source.find("\n", pos)
    return len(source) if newline == -1 else newline + 1


def _skip_spaces(source: str, pos: int) -> int:
    while pos < len(source) and source[pos] in " \t":
        pos += 1
    return pos


def _rest_is_blank(source: str, pos: int) -> bool:
    return not source[pos : _line_end(source, pos)].strip()


def _skip_one_line_break(source: str, pos: int) -> int | None:
    """Skip spaces and at most one line break; None if a blank line follows."""
    pos = _skip_spaces(source, pos)
    if source.startswith("\r\n", pos):
        pos += 2
    elif source.startswith("\n", pos):
        pos += 1
    else:
        return pos
    if pos >= len(source) or _rest_is_blank(source, pos):
        return None
    return _skip_spaces(source, pos)


def _parse_label(source: str, pos: int) -> int | None:
    """Parse ``[label]:`` at ``pos``; return the offset after the colon."""
    if not source.startswith("[", pos) or source.startswith("[^", pos):
        return None
    curr = pos + 1
    has_content = False
    while curr < len(source):
        char = source[curr]
        if char == "\\":
            has_content = True
            curr += 2
        elif char == "[":
            return None
        elif char == "]":
            if not has_content or curr - pos > 1000 or not source.startswith(":", curr + 1):
                return None
            return curr + 2
        elif char == "\n":
            if _rest_is_blank(source, curr + 1):
                return None
            curr += 1
        else:
            has_content = has_content or not char.isspace()
            curr += 1
    return None


def _parse_destination(source: str, pos: int) -> int | None:
    if source.startswith("<", pos):
        curr = pos + 1
        while curr < len(source):
            char = source[curr]
            if char == "\\":
                curr += 2
            elif char in "<\n":
                return None
            elif char == ">":
                return curr + 1
            else:
                curr += 1
        return None

    curr = pos
    depth = 0
    while curr < len(source):
        char = source[curr]
        if char == "\\":
            curr += 2
            continue
        if char.isspace() or ord(char) < 32:
            break
        if char == "(":
            depth += 1
        elif char == ")":
            if depth == 0:
                break
            depth -= 1
        curr += 1
    if curr == pos or depth:
        return None
    return curr


def _parse_title(source: str, pos: int) -> int | None:
    """Parse a quoted or parenthesized title; return the offset after it."""
    if pos >= len(source) or source[pos] not in "\"'(":
        return None
    opener = source[pos]
    closer = ")" if opener == "(" else opener
    curr = pos + 1
    while curr < len(source):
        char = source[curr]
        if char == "\\":
            curr += 2
        elif char == closer:
            return curr + 1
        elif opener == "(" and char == "(":
            return None
        elif char == "\n" and _rest_is_blank(source, curr + 1):
            return None
        else:
            curr += 1
    return None


def link_definition_end(source: str, start: int = 0) -> int | None:
    """Match a link reference definition starting at ``start``.

    A definition is ``[label]:``, a destination and an optional title. The
    destination and the title may each move to the next line; nothing may
    follow on the line where the definition ends.

    Returns:
        Offset just past the definition's last line, or None if the text at
        ``start`` is not a definition

    Example:
        >>> text = "[docs]:\\n  https://example.com 'Docs'\\nAfter\\n"
        >>> text[: link_definition_end(text)]
        "[docs]:\\n  https://example.com 'Docs'\\n"
        >>> link_definition_end("[Update]: I changed my mind\\n") is None
        True
    """
    indent = _leading_spaces(source[start : start + 4])
    if indent >= 4:
        return None
    pos = _parse_label(source, start + indent)
    if pos is None:
        return None

    pos = _skip_one_line_break(source, pos)
    if pos is None or pos >= len(source):
        return None
    pos = _parse_destination(source, pos)
    if pos is None:
        return None

    if _rest_is_blank(source, pos):
        # Complete without a title; a title may still follow on the next line
        end = _line_end(source, pos)
        title_start = _skip_spaces(source, end)
        if title_start < len(source) and not _rest_is_blank(source, end):
            title_end = _parse_title(source, title_start)
            if title_end is not None and _rest_is_blank(source, title_end):
                return _line_end(source, title_end)
        return end

    if source[pos] not in " \t":
        return None
    title_end = _parse_title(source, _skip_spaces(source, pos))
    if title_end is None or not _rest_is_blank(source, title_end):
        return None
    return _line_end(source, title_end)


def classify_line(line: str, in_list: bool) -> LineKind:
    """Classify a prose line for block splitting (pure, no state).

    LINK_DEFINITION means the line on its own is a complete definition.
    Definitions spanning lines are matched by the scanner, which sees the
    following lines.
    """
    content = _strip_eol(line)
    if not content.strip():
        return LineKind.BLANK
    indent = _leading_spaces(content)
    if in_list and indent >= 2:
        return LineKind.LIST_CONTINUATION
    if indent >= 4:
        return LineKind.TEXT
    content = content[indent:]
    if _is_heading(content):
        return LineKind.HEADING
    if _is_list_item(content):
        return LineKind.LIST_ITEM
    if content.startswith("[") and link_definition_end(content) is not None:
        return LineKind.LINK_DEFINITION
    return LineKind.TEXT


_KIND_FOR_LINE: dict[LineKind, ProseKind] = {
    LineKind.HEADING: "heading",
    LineKind.LIST_ITEM: "list",
    LineKind.LIST_CONTINUATION: "list",
    LineKind.LINK_DEFINITION: "link_definitions",
    LineKind.TEXT: "text",
}

_DEFINITION_FOLLOWS = frozenset({None, LineKind.BLANK, LineKind.HEADING, LineKind.LINK_DEFINITION})


class BodyScanner:
    """Single forward pass over a post body.

    Usage:
        >>> scanner = BodyScanner("Intro\\n\\n```swift\\nlet x = 1\\n```\\n")
        >>> [type(b).__name__ for b in scanner.scan()]
        ['Prose', 'CodeFence']

    """

    __slots__ = (
        "_source",
        "_pos",
        "_lineno",
        "_offset",
        "_source_file",
        "_mode",
        # Prose accumulation
        "_prose_start",
        "_prose_lineno",
        "_prose_kind",
        "_prose_has_content",
        "_prev_kind",
        "_definition_end",
        # Fence state
        "_fence_char",
        "_fence_count",
        "_fence_info",
        "_fence_open_line",
        "_fence_lineno",
        "_fence_start",
        "_fence_content_start",
        "_scanned",
    )

    def __init__(
        self,
        source: str,
        *,
        first_lineno: int = 1,
        offset: int = 0,
        source_file: str | None = None,
    ) -> None:
        """Initialize scanner with body text.

        Args:
            source: Body text (everything after the front matter)
            first_lineno: Line number of the body's first line in the document
            offset: Character offset of the body within the document
            source_file: Optional source file path for locations and errors
        """
        self._source = source
        self._pos = 0
        self._lineno = first_lineno
        self._offset = offset
        self._source_file = source_file
        self._mode = ScanMode.PROSE

        self._prose_start = 0
        self._prose_lineno = first_lineno
        self._prose_kind: ProseKind | None = None
        self._prose_has_content = False
        self._prev_kind: LineKind | None = None
        self._definition_end = 0

        self._fence_char = ""
        self._fence_count = 0
        self._fence_info = ""
        self._fence_open_line = ""
        self._fence_lineno = 0
        self._fence_start = 0
        self._fence_content_start = 0
        self._scanned = False

    def scan(self) -> Iterator[Prose | CodeFence]:
        """Yield blocks in document order.

        Raises:
            ParseError: UNTERMINATED_FENCE if a fence is still open at the end
            RuntimeError: If called a second time (the pass is not restartable)
        """
        if self._scanned:
            raise RuntimeError("BodyScanner.scan() is single-use; create a new scanner")
        self._scanned = True

        source = self._source
        length = len(source)
        while self._pos < length:
            line_start = self._pos
            newline = source.find("\n", line_start)
            line_end = length if newline == -1 else newline + 1
            line = source[line_start:line_end]

            if self._mode is ScanMode.FENCE:
                block = self._scan_fence_line(line, line_start, line_end)
            else:
                block = self._scan_prose_line(line, line_start)
            if block is not None:
                yield block

            # Commit
            self._pos = line_end
            self._lineno += 1

        if self._mode is ScanMode.FENCE:
            raise ParseError(
                f"Code fence opened with {self._fence_char * self._fence_count!r} is never closed",
                ParseErrorKind.UNTERMINATED_FENCE,
                lineno=self._fence_lineno,
                col_offset=_leading_spaces(self._fence_open_line) + 1,
                source_file=self._source_file,
            )

        final = self._flush_prose(self._pos)
        if final is not None:
            yield final

    # =========================================================================
    # PROSE mode
    # =========================================================================

    def _scan_prose_line(self, line: str, line_start: int) -> Prose | CodeFence | None:
        fence = classify_fence_open(line)
        if fence is not None:
            pending = self._flush_prose(line_start)
            self._fence_char, self._fence_count, self._fence_info = fence
            self._fence_open_line = line
            self._fence_lineno = self._lineno
            self._fence_start = line_start
            self._fence_content_start = line_start + len(line)
            self._mode = ScanMode.FENCE
            self._prev_kind = None
            return pending

        kind = self._classify(line, line_start)
        self._prev_kind = kind
        if kind is LineKind.BLANK:
            # Blank lines attach to the block before them
            if self._prose_kind is None:
                self._prose_kind = "text"
            return None

        block_kind = _KIND_FOR_LINE[kind]
        flushed: Prose | None = None
        if self._prose_has_content and (
            kind is LineKind.HEADING or block_kind != self._prose_kind
        ):
            flushed = self._flush_prose(line_start)

        self._prose_kind = block_kind
        self._prose_has_content = True
        return flushed

    def _classify(self, line: str, line_start: int) -> LineKind:
        if line_start < self._definition_end:
            # Destination or title line of a multi-line definition
            return LineKind.LINK_DEFINITION
        kind = classify_line(line, in_list=self._prose_kind == "list")
        if kind not in (LineKind.LINK_DEFINITION, LineKind.TEXT):
            return kind
        if not line.lstrip(" ").startswith("["):
            return kind
        # A definition cannot interrupt a paragraph or a list item
        if self._prev_kind not in _DEFINITION_FOLLOWS:
            return LineKind.TEXT
        end = link_definition_end(self._source, line_start)
        if end is None:
            return LineKind.TEXT
        self._definition_end = end
        return LineKind.LINK_DEFINITION

    def _flush_prose(self, end: int) -> Prose | None:
        start = self._prose_start
        self._prose_start = end
        lineno = self._prose_lineno
        self._prose_lineno = self._lineno
        kind = self._prose_kind or "text"
        self._prose_kind = None
        self._prose_has_content = False
        if end <= start:
            return None
        text = self._source[start:end]
        return Prose(
            location=self._location(start, end, lineno, self._lineno - 1),
            text=text,
            kind=kind,
        )

    # =========================================================================
    # FENCE mode
    # =========================================================================

    def _scan_fence_line(self, line: str, line_start: int, line_end: int) -> CodeFence | None:
        if not is_closing_fence(line, self._fence_char, self._fence_count):
            return None

        info = self._fence_info
        block = CodeFence(
            location=self._location(self._fence_start, line_end, self._fence_lineno, self._lineno),
            code=self._source[self._fence_content_start : line_start],
            language=info.split()[0] if info else "",
            info=info,
            open_line=self._fence_open_line,
            close_line=line,
        )

        self._mode = ScanMode.PROSE
        self._fence_char = ""
        self._fence_count = 0
        self._fence_info = ""
        self._fence_open_line = ""
        self._prose_start = line_end
        self._prose_lineno = self._lineno + 1
        return block

    def _location(self, start: int, end: int, lineno: int, end_lineno: int) -> SourceLocation:
        return SourceLocation(
            lineno=lineno,
            col_offset=1,
            offset=self._offset + start,
            end_offset=self._offset + end,
            end_lineno=end_lineno,
            source_file=self._source_file,
        )


def render_body(
    remaining_text: str,
    *,
    first_lineno: int = 1,
    offset: int = 0,
    source_file: str | None = None,
) -> Iterator[Prose | CodeFence]:
    """Lazily split a body into Prose and CodeFence blocks.

    The returned iterator is a single forward pass; it is finite and cannot
    be restarted. Errors surface while iterating.

    Args:
        remaining_text: Body text after the front matter
        first_lineno: Line number of the body's first line in the document
        offset: Character offset of the body within the document
        source_file: Optional source file path for locations and errors

    Raises:
        ParseError: UNTERMINATED_FENCE when a fence is never closed

    Example:
        >>> blocks = list(render_body("# Title\\n\\n~~~\\n*raw*\\n~~~\\n"))
        >>> blocks[1].code
        '*raw*\\n'
    """
    scanner = BodyScanner(
        remaining_text,
        first_lineno=first_lineno,
        offset=offset,
        source_file=source_file,
    )
    return scanner.scan()

