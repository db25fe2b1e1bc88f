"""
_scanner.py
===========
Byte-level cursor over a fully buffered NEXUS/NEWICK document.

The scanner never fails silently: every primitive either advances the
cursor, reports what it sees, or raises a ``ParsingError``.  Noticing that an
expected byte is missing is the caller's job.

Byte conventions
----------------
Bytes are handled as ``int`` values (what indexing a ``bytes`` object
yields).  End of input is reported as ``None``.
"""

from typing import Optional, Union

from nexwood._errors import ErrorKind, ParsingError

# Size of the snippet attached to diagnostics.
CONTEXT_LENGTH = 50

WHITESPACE = b" \t\n\r\x0b\x0c"
COMMENT_OPEN = ord("[")
COMMENT_CLOSE = ord("]")
QUOTE = ord("'")


class Scanner:
    """
    Read-only view of an input buffer plus a cursor.

    Parameters
    ----------
    data : bytes | bytearray | memoryview | str
        The complete input.  ``str`` input is encoded as UTF-8.
    """

    __slots__ = ("_data", "_pos", "_end")

    def __init__(self, data: Union[bytes, bytearray, memoryview, str]) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._data = bytes(data)
        self._pos = 0
        self._end = len(self._data)

    # ------------------------------------------------------------------ #
    # Cursor primitives                                                    #
    # ------------------------------------------------------------------ #

    @property
    def position(self) -> int:
        """Current byte offset."""
        return self._pos

    @property
    def at_end(self) -> bool:
        return self._pos >= self._end

    def peek(self) -> Optional[int]:
        """Return the current byte without consuming it, or None at the end."""
        if self._pos < self._end:
            return self._data[self._pos]
        return None

    def peek_is(self, byte: int) -> bool:
        return self._pos < self._end and self._data[self._pos] == byte

    def next(self) -> Optional[int]:
        """Consume and return the current byte, or None at the end."""
        if self._pos < self._end:
            byte = self._data[self._pos]
            self._pos += 1
            return byte
        return None

    def consume_if(self, byte: int) -> bool:
        """Advance past *byte* if it is the current byte."""
        if self._pos < self._end and self._data[self._pos] == byte:
            self._pos += 1
            return True
        return False

    # ------------------------------------------------------------------ #
    # Composite scans                                                      #
    # ------------------------------------------------------------------ #

    def skip_whitespace(self) -> None:
        """
        Skip a run of whitespace and bracketed comments.

        Comments nest: ``[a [b] c]`` is a single comment.

        Raises
        ------
        ParsingError   UNCLOSED_COMMENT, positioned at the opening bracket.
        """
        data = self._data
        while self._pos < self._end:
            byte = data[self._pos]
            if byte in WHITESPACE:
                self._pos += 1
            elif byte == COMMENT_OPEN:
                self._skip_comment()
            else:
                return

    def _skip_comment(self) -> None:
        start = self._pos
        depth = 0
        data = self._data
        while self._pos < self._end:
            byte = data[self._pos]
            self._pos += 1
            if byte == COMMENT_OPEN:
                depth += 1
            elif byte == COMMENT_CLOSE:
                depth -= 1
                if depth == 0:
                    return
        raise ParsingError(
            ErrorKind.UNCLOSED_COMMENT, start, self.context(position=start)
        )

    def parse_label(self, delimiters: bytes) -> str:
        """
        Read a label up to (not including) the first byte in *delimiters*.

        A label opening with a single quote is read up to the matching
        closing quote, delimiters included; ``''`` inside it stands for one
        quote character.  The result may be empty when the cursor already
        sits on a delimiter.

        Raises
        ------
        ParsingError   UNEXPECTED_EOF for an unterminated quoted label.
        """
        if self.peek_is(QUOTE):
            return self._parse_quoted_label()

        start = self._pos
        data = self._data
        while self._pos < self._end and data[self._pos] not in delimiters:
            self._pos += 1
        return data[start : self._pos].decode("utf-8", errors="replace")

    def _parse_quoted_label(self) -> str:
        self._pos += 1  # opening quote
        chunks = []
        start = self._pos
        data = self._data
        while self._pos < self._end:
            if data[self._pos] == QUOTE:
                chunks.append(data[start : self._pos])
                self._pos += 1
                if self.peek_is(QUOTE):
                    # '' is an escaped quote; keep one and carry on.
                    start = self._pos
                    self._pos += 1
                    continue
                return b"".join(chunks).decode("utf-8", errors="replace")
            self._pos += 1
        raise ParsingError.unexpected_eof(self)

    def skip_quoted(self) -> None:
        """Skip a quoted token starting at the cursor (used by block skipping)."""
        self._parse_quoted_label()

    # ------------------------------------------------------------------ #
    # Diagnostics support                                                  #
    # ------------------------------------------------------------------ #

    def context(
        self, length: int = CONTEXT_LENGTH, position: Optional[int] = None
    ) -> str:
        """
        Render up to *length* bytes starting at *position* (default: cursor).

        Non-UTF-8 bytes are replaced so the snippet is always printable text.
        """
        start = self._pos if position is None else position
        return self._data[start : start + length].decode("utf-8", errors="replace")

    def __len__(self) -> int:
        """Size of the input in bytes."""
        return self._end

    def __repr__(self) -> str:
        return f"Scanner(position={self._pos}, size={self._end})"
