"""
_errors.py
==========
Structured, position-aware parsing diagnostics.

Every failure raised while reading a NEXUS or NEWICK document is a
``ParsingError`` carrying:

  kind      : ErrorKind   one member of a closed set of failure categories
  position  : int         byte offset at which the problem was detected
  context   : str         rendered snippet of the bytes that follow
  detail    : str | None  free-form explanation (only for some kinds)

Errors are built from the scanner state at the moment of detection, so the
offset and snippet always describe the offending input.  No line/column
translation is performed.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Closed set of parsing failure categories (value = message prefix)."""

    UNEXPECTED_EOF = "Unexpected end of file"
    MISSING_NEXUS_HEADER = "File does not start with #NEXUS header"
    INVALID_BLOCK_NAME = "Invalid block name"
    INVALID_TAXA_BLOCK = "Invalid TAXA block format"
    INVALID_TREES_BLOCK = "Invalid TREES block format"
    UNCLOSED_COMMENT = "Unclosed comment"
    INVALID_NEWICK_STRING = "Invalid newick string"
    INVALID_FORMATTING = "Invalid formatting"


class ParsingError(Exception):
    """
    A NEXUS/NEWICK parsing failure.

    Parameters
    ----------
    kind : ErrorKind
    position : int
        Byte offset where the error was detected.
    context : str
        Snippet of the input following *position*.
    detail : str, optional
        Additional explanation appended to the kind's message.
    """

    def __init__(
        self,
        kind: ErrorKind,
        position: int,
        context: str = "",
        detail: Optional[str] = None,
    ) -> None:
        self._kind = kind
        self._position = position
        self._context = context
        self._detail = detail
        super().__init__(self._render())

    # ------------------------------------------------------------------ #
    # Construction from scanner state                                      #
    # ------------------------------------------------------------------ #

    @classmethod
    def from_scanner(cls, kind: ErrorKind, scanner, detail: Optional[str] = None):
        """Capture the scanner's current offset and upcoming bytes."""
        return cls(kind, scanner.position, scanner.context(), detail)

    @classmethod
    def unexpected_eof(cls, scanner):
        return cls.from_scanner(ErrorKind.UNEXPECTED_EOF, scanner)

    @classmethod
    def missing_nexus_header(cls, scanner):
        return cls.from_scanner(ErrorKind.MISSING_NEXUS_HEADER, scanner)

    @classmethod
    def invalid_block_name(cls, scanner):
        return cls.from_scanner(ErrorKind.INVALID_BLOCK_NAME, scanner)

    @classmethod
    def invalid_taxa_block(cls, scanner, detail: str):
        return cls.from_scanner(ErrorKind.INVALID_TAXA_BLOCK, scanner, detail)

    @classmethod
    def invalid_trees_block(cls, scanner, detail: str):
        return cls.from_scanner(ErrorKind.INVALID_TREES_BLOCK, scanner, detail)

    @classmethod
    def unclosed_comment(cls, scanner):
        return cls.from_scanner(ErrorKind.UNCLOSED_COMMENT, scanner)

    @classmethod
    def invalid_newick_string(cls, scanner, detail: str):
        return cls.from_scanner(ErrorKind.INVALID_NEWICK_STRING, scanner, detail)

    @classmethod
    def invalid_formatting(cls, scanner):
        return cls.from_scanner(ErrorKind.INVALID_FORMATTING, scanner)

    # ------------------------------------------------------------------ #
    # Read-only accessors                                                  #
    # ------------------------------------------------------------------ #

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def position(self) -> int:
        return self._position

    @property
    def context(self) -> str:
        return self._context

    @property
    def detail(self) -> Optional[str]:
        return self._detail

    def _render(self) -> str:
        message = self._kind.value
        if self._detail:
            separator = ": " if self._kind is ErrorKind.INVALID_NEWICK_STRING else " - "
            message += f"{separator}{self._detail}"
        message += f" at position {self._position}"
        if self._context:
            message += (
                f"\n  Context (next {len(self._context)} bytes): {self._context}"
            )
        return message

    def __repr__(self) -> str:
        return (
            f"ParsingError({self._kind.name}, position={self._position}, "
            f"detail={self._detail!r})"
        )
