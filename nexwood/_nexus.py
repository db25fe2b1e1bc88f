"""
_nexus.py
=========
NEXUS file driver: header, ``BEGIN ... END;`` blocks, TAXA / TREES content.

Public API
----------
  parse_nexus(source) -> (list[Tree], LabelMap)
      *source* is the complete file content (bytes, str or Scanner).  Trees
      are returned in file order together with the label map they share.

Supported structure
-------------------
  #NEXUS
  BEGIN TAXA;
      DIMENSIONS NTAX=3;
      TAXLABELS A B C;
  END;
  BEGIN TREES;
      TRANSLATE 1 A, 2 B, 3 C;
      TREE t1 = [&R] ((1:0.1,2:0.2):0.3,3:0.4);
      TREE t2 = ...
  END;

Keywords and block names are case-insensitive; ``ENDBLOCK`` closes a block
like ``END``; ``UTREE`` is accepted for ``TREE``.  Every other block is
skipped statement by statement, honouring comments and quoted tokens so a
';' inside them does not end a statement early.

Label resolution
----------------
A TAXA block seeds the shared label map in declaration order.  Inside a
TREES block without TRANSLATE every tree uses a DIRECT resolver.  With a
TRANSLATE table, the first tree uses a TRANSLATING resolver and every later
tree of that block a PRECOMPUTED one built once after the first tree.  A
translation table belongs to its TREES block; a file may hold several
TREES blocks, all writing into the same label map.

Logging
-------
Skipped blocks and the final tree/taxon counts are logged at INFO, each
parsed tree at DEBUG, and leaf counts that disagree with the declared taxon
count at WARNING (see ``nexwood._logging``).
"""

import logging
from typing import Dict, List, Optional, Tuple

from nexwood._errors import ErrorKind, ParsingError
from nexwood._labels import LabelMap
from nexwood._logging import (
    log_block_skipped,
    log_leaf_count_mismatch,
    log_parse_summary,
    log_translation_table,
)
from nexwood._newick import as_scanner, describe_byte, parse_newick_with_resolver
from nexwood._resolver import LabelResolver, ResolverKind
from nexwood._scanner import COMMENT_OPEN, QUOTE, WHITESPACE, Scanner
from nexwood._tree import Tree

logger = logging.getLogger(__name__)

NEXUS_HEADER = "#NEXUS"
WORD_DELIMITERS = b";=,*[" + WHITESPACE
END_KEYWORDS = ("END", "ENDBLOCK")
TREE_KEYWORDS = ("TREE", "UTREE")

SEMICOLON = ord(";")
EQUALS = ord("=")
COMMA = ord(",")
STAR = ord("*")


def parse_nexus(source) -> Tuple[List[Tree], LabelMap]:
    """
    Parse a complete NEXUS document into trees sharing one label map.

    Parameters
    ----------
    source : bytes | str | Scanner
        The whole file content; the core never reads from disk.

    Returns
    -------
    (list[Tree], LabelMap)

    Raises
    ------
    ParsingError
        On the first malformed construct.  No partial result is returned.
    """
    scanner = as_scanner(source)
    trees, label_map = _NexusReader(scanner).read()
    log_parse_summary(len(trees), len(label_map), len(scanner))
    return trees, label_map


class _NexusReader:
    """**Private.**  One-shot reader holding the state of a single parse."""

    def __init__(self, scanner: Scanner) -> None:
        self.scanner = scanner
        self.label_map = LabelMap()
        self.trees: List[Tree] = []
        self.ntax: Optional[int] = None
        self.n_tree_blocks = 0

    def read(self) -> Tuple[List[Tree], LabelMap]:
        self._read_header()
        while True:
            self.scanner.skip_whitespace()
            if self.scanner.at_end:
                break
            self._read_block()
        return self.trees, self.label_map

    # ================================================================== #
    # Low-level helpers                                                    #
    # ================================================================== #

    def _read_word(self) -> str:
        return self.scanner.parse_label(WORD_DELIMITERS)

    def _error_at(self, kind: ErrorKind, position: int, detail=None) -> ParsingError:
        return ParsingError(
            kind, position, self.scanner.context(position=position), detail
        )

    def _eof_or(self, error: ParsingError) -> ParsingError:
        """Prefer UNEXPECTED_EOF when the failure is due to missing input."""
        if self.scanner.at_end:
            return ParsingError.unexpected_eof(self.scanner)
        return error

    def _next_statement(self) -> Tuple[str, int]:
        """Return the upper-cased keyword of the next statement and its offset."""
        self.scanner.skip_whitespace()
        if self.scanner.at_end:
            raise ParsingError.unexpected_eof(self.scanner)
        start = self.scanner.position
        return self._read_word().upper(), start

    def _skip_statement(self) -> None:
        """Consume bytes up to and including the next ';' outside comments/quotes."""
        s = self.scanner
        while True:
            byte = s.peek()
            if byte is None:
                raise ParsingError.unexpected_eof(s)
            if byte == SEMICOLON:
                s.next()
                return
            if byte == COMMENT_OPEN:
                s.skip_whitespace()
            elif byte == QUOTE:
                s.skip_quoted()
            else:
                s.next()

    def _end_block(self) -> None:
        self.scanner.skip_whitespace()
        if not self.scanner.consume_if(SEMICOLON):
            raise self._eof_or(ParsingError.invalid_formatting(self.scanner))

    # ================================================================== #
    # File structure                                                       #
    # ================================================================== #

    def _read_header(self) -> None:
        s = self.scanner
        s.skip_whitespace()
        start = s.position
        if self._read_word().upper() != NEXUS_HEADER:
            raise self._error_at(ErrorKind.MISSING_NEXUS_HEADER, start)

    def _read_block(self) -> None:
        s = self.scanner
        start = s.position
        if self._read_word().upper() != "BEGIN":
            raise self._error_at(ErrorKind.INVALID_FORMATTING, start)

        s.skip_whitespace()
        name = self._read_word()
        s.skip_whitespace()
        if not name or not s.consume_if(SEMICOLON):
            raise self._eof_or(ParsingError.invalid_block_name(s))

        block = name.upper()
        if block == "TAXA":
            self._read_taxa_block()
        elif block == "TREES":
            self._read_trees_block()
        else:
            log_block_skipped(name, s.position)
            self._skip_block()

    def _skip_block(self) -> None:
        while True:
            keyword, _ = self._next_statement()
            if keyword in END_KEYWORDS:
                self._end_block()
                return
            self._skip_statement()

    # ================================================================== #
    # TAXA block                                                           #
    # ================================================================== #

    def _read_taxa_block(self) -> None:
        ntax = None
        n_labels = None
        labels_at = 0
        while True:
            keyword, start = self._next_statement()
            if keyword in END_KEYWORDS:
                self._end_block()
                break
            if keyword == "DIMENSIONS":
                ntax = self._read_dimensions()
            elif keyword == "TAXLABELS":
                labels_at = start
                n_labels = self._read_taxlabels()
            else:
                self._skip_statement()

        if ntax is not None and n_labels is not None and ntax != n_labels:
            raise self._error_at(
                ErrorKind.INVALID_TAXA_BLOCK,
                labels_at,
                f"NTAX={ntax} but {n_labels} taxon labels were listed",
            )
        self.ntax = ntax if ntax is not None else n_labels

    def _read_dimensions(self) -> Optional[int]:
        """Parse ``KEY=value`` pairs up to ';' and return NTAX if given."""
        s = self.scanner
        ntax = None
        while True:
            s.skip_whitespace()
            if s.at_end:
                raise ParsingError.unexpected_eof(s)
            if s.consume_if(SEMICOLON):
                return ntax

            key = self._read_word().upper()
            if not key:
                raise ParsingError.invalid_taxa_block(
                    s, f"Unexpected {describe_byte(s.peek())} in DIMENSIONS"
                )
            s.skip_whitespace()
            if not s.consume_if(EQUALS):
                raise self._eof_or(
                    ParsingError.invalid_taxa_block(
                        s, f"Expected '=' after '{key}' in DIMENSIONS"
                    )
                )
            s.skip_whitespace()
            value_at = s.position
            value = self._read_word()
            if key == "NTAX":
                if not value.isdecimal():
                    raise self._eof_or(
                        self._error_at(
                            ErrorKind.INVALID_TAXA_BLOCK,
                            value_at,
                            f"Invalid NTAX value '{value}'",
                        )
                    )
                ntax = int(value)

    def _read_taxlabels(self) -> int:
        """Insert every label up to ';' into the label map; return the count."""
        s = self.scanner
        seen = set()
        while True:
            s.skip_whitespace()
            if s.at_end:
                raise ParsingError.unexpected_eof(s)
            if s.consume_if(SEMICOLON):
                return len(seen)

            start = s.position
            label = self._read_word()
            if not label:
                raise ParsingError.invalid_taxa_block(
                    s, f"Unexpected {describe_byte(s.peek())} in TAXLABELS"
                )
            if label in seen:
                raise self._error_at(
                    ErrorKind.INVALID_TAXA_BLOCK,
                    start,
                    f"Duplicate taxon label '{label}'",
                )
            seen.add(label)
            self.label_map.get_or_insert(label)

    # ================================================================== #
    # TREES block                                                          #
    # ================================================================== #

    def _read_trees_block(self) -> None:
        block_index = self.n_tree_blocks
        self.n_tree_blocks += 1

        translation: Optional[Dict[str, str]] = None
        resolver: Optional[LabelResolver] = None
        n_trees = 0

        while True:
            keyword, start = self._next_statement()
            if keyword in END_KEYWORDS:
                self._end_block()
                return

            if keyword == "TRANSLATE":
                if translation is not None:
                    raise self._error_at(
                        ErrorKind.INVALID_TREES_BLOCK,
                        start,
                        "Multiple TRANSLATE statements in one TREES block",
                    )
                if n_trees:
                    raise self._error_at(
                        ErrorKind.INVALID_TREES_BLOCK,
                        start,
                        "TRANSLATE must precede the first TREE statement",
                    )
                translation = self._read_translation()
                log_translation_table(len(translation), block_index)

            elif keyword in TREE_KEYWORDS:
                if resolver is None:
                    if translation is None:
                        resolver = LabelResolver.direct(self.label_map)
                    else:
                        resolver = LabelResolver.translating(
                            translation, self.label_map
                        )
                self._read_tree(resolver, self._expected_leaves(translation))
                n_trees += 1

                if resolver.kind is ResolverKind.TRANSLATING:
                    resolver = LabelResolver.precomputed(translation, self.label_map)

            else:
                self._skip_statement()

    def _expected_leaves(self, translation: Optional[Dict[str, str]]) -> int:
        if self.ntax is not None:
            return self.ntax
        if translation is not None:
            return len(translation)
        return 0

    def _read_translation(self) -> Dict[str, str]:
        """Parse ``key name, key name, ... ;`` (a trailing ',' is tolerated)."""
        s = self.scanner
        translation: Dict[str, str] = {}
        while True:
            s.skip_whitespace()
            key_at = s.position
            key = self._read_word()
            if not key:
                raise self._eof_or(
                    ParsingError.invalid_trees_block(
                        s,
                        f"Expected translation key but found {describe_byte(s.peek())}",
                    )
                )
            s.skip_whitespace()
            name = self._read_word()
            if not name:
                raise self._eof_or(
                    ParsingError.invalid_trees_block(
                        s, f"Expected taxon name after translation key '{key}'"
                    )
                )
            if key in translation:
                raise self._error_at(
                    ErrorKind.INVALID_TREES_BLOCK,
                    key_at,
                    f"Duplicate translation key '{key}'",
                )
            translation[key] = name

            s.skip_whitespace()
            if s.consume_if(SEMICOLON):
                return translation
            if not s.consume_if(COMMA):
                raise self._eof_or(
                    ParsingError.invalid_trees_block(
                        s,
                        f"Expected ',' or ';' after translation entry '{key}' "
                        f"but found {describe_byte(s.peek())}",
                    )
                )
            s.skip_whitespace()
            if s.consume_if(SEMICOLON):
                return translation

    def _read_tree(self, resolver: LabelResolver, num_leaves: int) -> None:
        """Parse ``[*] name = <newick>`` after the TREE keyword."""
        s = self.scanner
        s.skip_whitespace()
        s.consume_if(STAR)
        s.skip_whitespace()
        name = self._read_word()
        if not name:
            raise self._eof_or(
                ParsingError.invalid_trees_block(s, "Missing tree name")
            )
        s.skip_whitespace()
        if not s.consume_if(EQUALS):
            raise self._eof_or(
                ParsingError.invalid_trees_block(
                    s,
                    f"Expected '=' after tree name '{name}' "
                    f"but found {describe_byte(s.peek())}",
                )
            )

        tree = parse_newick_with_resolver(s, resolver, num_leaves)
        logger.debug(
            "Parsed tree '%s': %d vertices, %d leaves (%s resolver)",
            name,
            len(tree),
            tree.num_leaves(),
            resolver.kind.value,
        )
        if num_leaves and tree.num_leaves() != num_leaves:
            log_leaf_count_mismatch(name, tree.num_leaves(), num_leaves)
        self.trees.append(tree)
