"""
_vertex.py
==========
Vertex records stored in a ``Tree`` arena, and validated branch lengths.

A vertex is a tagged variant: its ``kind`` is one of ``VertexKind.ROOT``,
``VertexKind.INTERNAL`` or ``VertexKind.LEAF`` and every accessor does an
exhaustive case analysis on it.

  ROOT      two children, no parent, no branch length
  INTERNAL  two children, parent, optional branch length
  LEAF      no children, parent, label index, optional branch length

Vertices reference each other by arena index, never by object reference.
Parents are linked after the fact (children are parsed before the vertex
that owns them exists), so the parent field starts as ``None`` and is set
exactly once.
"""

import math
from enum import Enum
from typing import Optional, Tuple


class BranchLengthError(ValueError):
    """A branch length that is negative or not finite."""


class BranchLength(float):
    """
    A finite, non-negative branch length.

    Behaves as a ``float``; ``value`` returns the plain float.

    Raises
    ------
    BranchLengthError   if the value is negative, NaN or infinite.
    """

    __slots__ = ()

    def __new__(cls, length) -> "BranchLength":
        value = float(length)
        if not math.isfinite(value):
            raise BranchLengthError(f"Branch length must be finite, got {value}")
        if value < 0.0:
            raise BranchLengthError(
                f"Branch length must be non-negative, got {value}"
            )
        return super().__new__(cls, value)

    @property
    def value(self) -> float:
        return float(self)

    def __repr__(self) -> str:
        return f"BranchLength({float(self)!r})"


class VertexKind(Enum):
    ROOT = "root"
    INTERNAL = "internal"
    LEAF = "leaf"


class Vertex:
    """
    One arena record.  Build with ``Vertex.root``, ``Vertex.internal`` or
    ``Vertex.leaf``; the direct constructor is not meant for callers.
    """

    __slots__ = ("kind", "_index", "_parent", "_children", "_branch_length", "_label")

    def __init__(
        self,
        kind: VertexKind,
        index: int,
        children: Optional[Tuple[int, int]] = None,
        branch_length: Optional[BranchLength] = None,
        label_index: Optional[int] = None,
    ) -> None:
        self.kind = kind
        self._index = index
        self._parent: Optional[int] = None
        self._children = children
        self._branch_length = branch_length
        self._label = label_index

    @classmethod
    def root(cls, index: int, children: Tuple[int, int]) -> "Vertex":
        return cls(VertexKind.ROOT, index, children=tuple(children))

    @classmethod
    def internal(
        cls,
        index: int,
        children: Tuple[int, int],
        branch_length: Optional[BranchLength] = None,
    ) -> "Vertex":
        return cls(
            VertexKind.INTERNAL,
            index,
            children=tuple(children),
            branch_length=branch_length,
        )

    @classmethod
    def leaf(
        cls, index: int, branch_length: Optional[BranchLength], label_index: int
    ) -> "Vertex":
        return cls(
            VertexKind.LEAF, index, branch_length=branch_length, label_index=label_index
        )

    # ------------------------------------------------------------------ #
    # Accessors                                                            #
    # ------------------------------------------------------------------ #

    @property
    def index(self) -> int:
        return self._index

    @property
    def branch_length(self) -> Optional[BranchLength]:
        """Branch length to the parent; always None for the root."""
        if self.kind is VertexKind.ROOT:
            return None
        return self._branch_length

    @property
    def label_index(self) -> Optional[int]:
        """Label index for leaves; None otherwise."""
        if self.kind is VertexKind.LEAF:
            return self._label
        return None

    @property
    def children(self) -> Optional[Tuple[int, int]]:
        """(left, right) child indices; None for leaves."""
        if self.kind is VertexKind.LEAF:
            return None
        return self._children

    @property
    def parent_index(self) -> Optional[int]:
        """Parent index; None for the root and for not-yet-linked vertices."""
        if self.kind is VertexKind.ROOT:
            return None
        return self._parent

    def has_parent(self) -> bool:
        return self.kind is not VertexKind.ROOT and self._parent is not None

    def is_root(self) -> bool:
        return self.kind is VertexKind.ROOT

    def is_internal(self) -> bool:
        return self.kind is VertexKind.INTERNAL

    def is_leaf(self) -> bool:
        return self.kind is VertexKind.LEAF

    def set_parent(self, parent: int) -> None:
        """
        Link this vertex to *parent*.

        Raises
        ------
        ValueError   on the root, or if a parent was already set.
        """
        if self.kind is VertexKind.ROOT:
            raise ValueError("Cannot set parent on root vertex")
        if self._parent is not None:
            raise ValueError(
                f"Vertex {self._index} already has parent {self._parent}; "
                f"cannot relink to {parent}"
            )
        self._parent = parent

    def __repr__(self) -> str:
        if self.kind is VertexKind.ROOT:
            return f"Vertex.root({self._index}, children={self._children})"
        if self.kind is VertexKind.INTERNAL:
            return (
                f"Vertex.internal({self._index}, children={self._children}, "
                f"branch_length={self._branch_length!r}, parent={self._parent})"
            )
        return (
            f"Vertex.leaf({self._index}, label_index={self._label}, "
            f"branch_length={self._branch_length!r}, parent={self._parent})"
        )
