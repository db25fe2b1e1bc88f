"""
_newick.py
==========
Recursive-descent parser for binary NEWICK tree descriptions.

Grammar
-------
  root          := children (':' branch_length)? ';'
  children      := '(' vertex ',' vertex ')'
  vertex        := children branch_length?      internal vertex
                 | label branch_length?         leaf
  branch_length := ':' signed decimal or scientific literal

Whitespace and bracketed comments may appear between tokens.  The root's
branch length is consumed and discarded (a root has no parent edge).

Every grammar violation raises ``ParsingError`` of kind
INVALID_NEWICK_STRING naming what was expected and what was found.  Each
vertex is appended to the ``Tree`` arena as soon as it is closed, so the
arena ends up in post-order with the root last.

Entry points
------------
  parse_newick(source, num_leaves=0)  -> (Tree, LabelMap)
      Self-contained single-tree parse with a fresh label map.

  parse_newick_with_resolver(scanner, resolver, num_leaves=0) -> Tree
      Parse into a label map owned by the caller (via *resolver*); used by
      the NEXUS driver so that all trees of a file share one map.
"""

from typing import Optional, Tuple, Union

from nexwood._errors import ErrorKind, ParsingError
from nexwood._labels import LabelMap
from nexwood._resolver import LabelResolver
from nexwood._scanner import Scanner, WHITESPACE
from nexwood._tree import Tree
from nexwood._vertex import BranchLength, BranchLengthError

NEWICK_LABEL_DELIMITERS = b"(),:;[" + WHITESPACE
NUMBER_BYTES = frozenset(b"0123456789.-+eE")

OPEN_PAREN = ord("(")
CLOSE_PAREN = ord(")")
COMMA = ord(",")
COLON = ord(":")
SEMICOLON = ord(";")


def describe_byte(byte: Optional[int]) -> str:
    """Human-readable rendering of a peeked byte for error messages."""
    if byte is None:
        return "end of input"
    return repr(chr(byte))


def as_scanner(source: Union[Scanner, bytes, bytearray, memoryview, str]) -> Scanner:
    if isinstance(source, Scanner):
        return source
    return Scanner(source)


# ======================================================================== #
# Entry points                                                              #
# ======================================================================== #


def parse_newick(source, num_leaves: int = 0) -> Tuple[Tree, LabelMap]:
    """
    Parse one NEWICK tree with its own label map.

    Parameters
    ----------
    source : str | bytes | Scanner
        Text starting with the tree description (leading whitespace and
        comments allowed).  Bytes after the terminating ';' are left unread.
    num_leaves : int
        Expected number of leaves (size hint).

    Returns
    -------
    (Tree, LabelMap)   Labels are indexed in first-encounter order.

    Raises
    ------
    ParsingError
    """
    label_map = LabelMap(num_leaves)
    resolver = LabelResolver.direct(label_map)
    tree = parse_newick_with_resolver(as_scanner(source), resolver, num_leaves)
    return tree, label_map


def parse_newick_with_resolver(
    scanner: Scanner, resolver: LabelResolver, num_leaves: int = 0
) -> Tree:
    """Parse one NEWICK tree, resolving leaf labels through *resolver*."""
    tree = Tree(num_leaves)
    scanner.skip_whitespace()
    _parse_root(scanner, tree, resolver)
    return tree


# ======================================================================== #
# Grammar rules                                                             #
# ======================================================================== #


def _parse_root(scanner: Scanner, tree: Tree, resolver: LabelResolver) -> None:
    children = _parse_children(scanner, tree, resolver)

    # Root branch length is read and dropped.
    _parse_branch_length(scanner)

    scanner.skip_whitespace()
    if not scanner.consume_if(SEMICOLON):
        raise ParsingError.invalid_newick_string(
            scanner,
            f"Expected ';' at end of tree but found {describe_byte(scanner.peek())}",
        )

    tree.add_root(children)


def _parse_children(
    scanner: Scanner, tree: Tree, resolver: LabelResolver
) -> Tuple[int, int]:
    _expect(scanner, OPEN_PAREN, "'(' before children")
    left = _parse_vertex(scanner, tree, resolver)
    _expect(scanner, COMMA, "',' between children")
    right = _parse_vertex(scanner, tree, resolver)
    _expect(scanner, CLOSE_PAREN, "')' after children")
    return left, right


def _parse_vertex(scanner: Scanner, tree: Tree, resolver: LabelResolver) -> int:
    scanner.skip_whitespace()
    if scanner.peek_is(OPEN_PAREN):
        children = _parse_children(scanner, tree, resolver)
        return tree.add_internal(children, _parse_branch_length(scanner))
    return _parse_leaf(scanner, tree, resolver)


def _parse_leaf(scanner: Scanner, tree: Tree, resolver: LabelResolver) -> int:
    label = scanner.parse_label(NEWICK_LABEL_DELIMITERS)
    if not label:
        raise ParsingError.invalid_newick_string(
            scanner, f"Expected leaf label but found {describe_byte(scanner.peek())}"
        )
    label_index = resolver.resolve(label, scanner)
    return tree.add_leaf(_parse_branch_length(scanner), label_index)


def _parse_branch_length(scanner: Scanner) -> Optional[BranchLength]:
    """Parse ``':' number`` if present; return None when there is no ':'."""
    scanner.skip_whitespace()
    if not scanner.consume_if(COLON):
        return None
    scanner.skip_whitespace()

    start = scanner.position
    digits = bytearray()
    while scanner.peek() in NUMBER_BYTES:
        digits.append(scanner.next())
    text = digits.decode("ascii")

    try:
        value = float(text)
    except ValueError:
        raise ParsingError(
            ErrorKind.INVALID_NEWICK_STRING,
            start,
            scanner.context(position=start),
            f"Invalid branch length: '{text}'",
        ) from None

    try:
        return BranchLength(value)
    except BranchLengthError as exc:
        raise ParsingError.invalid_newick_string(scanner, str(exc)) from exc


def _expect(scanner: Scanner, byte: int, what: str) -> None:
    scanner.skip_whitespace()
    if not scanner.consume_if(byte):
        raise ParsingError.invalid_newick_string(
            scanner, f"Expected {what} but found {describe_byte(scanner.peek())}"
        )
