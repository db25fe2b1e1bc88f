"""
_tree.py
========
A single rooted, strictly bifurcating phylogenetic tree stored as an arena:
a flat list of ``Vertex`` records addressed by position.

Public API
----------
  Tree(num_leaves=0)
      Empty arena.  *num_leaves* is the expected leaf count (size hint).

  .add_leaf(branch_length, label_index)   -> int
  .add_internal(children, branch_length)  -> int
  .add_root(children)                     -> int
  .is_valid()                             -> bool
  .to_arrays()                            -> dict[str, np.ndarray]

Construction order
------------------
Trees are grown bottom-up by the NEWICK parser: both children of a vertex
are appended before the vertex itself, so every child index is strictly
smaller than its parent's.  Appending a vertex backfills the parent field of
its two children.  The root is appended last, exactly once, and the tree is
read-only afterwards.

Node-ID conventions
-------------------
Vertex IDs are arena positions in post-order (leaves and internals
interleaved as they are closed in the NEWICK string); the root is always
the last vertex, ``root == len(tree) - 1``.
"""

from typing import Dict, Iterator, Optional, Tuple

import numpy as np

from nexwood._vertex import BranchLength, Vertex, VertexKind


class Tree:
    """
    Arena-backed binary tree.

    Attributes
    ----------
    root            : int | None   Index of the root; None until add_root().
    expected_leaves : int          Leaf-count hint given at construction.
    """

    def __init__(self, num_leaves: int = 0) -> None:
        self._vertices = []
        self._num_leaves = 0
        self.root: Optional[int] = None
        self.expected_leaves = num_leaves

    # ================================================================== #
    # Construction                                                         #
    # ================================================================== #

    def add_leaf(self, branch_length: Optional[BranchLength], label_index: int) -> int:
        """
        Append a leaf with its parent unset and return its index.

        Raises
        ------
        ValueError   if the tree already has a root.
        """
        self._check_open()
        index = len(self._vertices)
        self._vertices.append(Vertex.leaf(index, branch_length, label_index))
        self._num_leaves += 1
        return index

    def add_internal(
        self, children: Tuple[int, int], branch_length: Optional[BranchLength]
    ) -> int:
        """
        Append an internal vertex over *children* and link them to it.

        Raises
        ------
        IndexError   if a child index does not refer to an existing vertex.
        ValueError   if the tree already has a root, a child already has a
                     parent, or both children are the same vertex.
        """
        self._check_open()
        index = len(self._vertices)
        self._check_children(children, index)
        self._vertices.append(Vertex.internal(index, children, branch_length))
        self._link_children(children, index)
        return index

    def add_root(self, children: Tuple[int, int]) -> int:
        """
        Append the root over *children*, link them, and record ``self.root``.

        Raises
        ------
        ValueError   if the tree already has a root, a child already has a
                     parent, or both children are the same vertex.
        IndexError   if a child index does not refer to an existing vertex.
        """
        self._check_open()
        index = len(self._vertices)
        self._check_children(children, index)
        self._vertices.append(Vertex.root(index, children))
        self._link_children(children, index)
        self.root = index
        return index

    def _check_open(self) -> None:
        if self.root is not None:
            raise ValueError(
                f"Tree already has a root at index {self.root} and is read-only"
            )

    def _check_children(self, children: Tuple[int, int], index: int) -> None:
        # Validate everything before the arena is touched.
        left, right = children
        if left == right:
            raise ValueError(f"Both children refer to vertex {left}")
        for child in children:
            if not 0 <= child < index:
                raise IndexError(
                    f"Child index {child} does not refer to an existing vertex "
                    f"(arena holds {index})"
                )
            if self._vertices[child].has_parent():
                raise ValueError(
                    f"Vertex {child} already has parent "
                    f"{self._vertices[child].parent_index}"
                )

    def _link_children(self, children: Tuple[int, int], parent: int) -> None:
        left, right = children
        self._vertices[left].set_parent(parent)
        self._vertices[right].set_parent(parent)

    # ================================================================== #
    # Queries                                                              #
    # ================================================================== #

    def num_leaves(self) -> int:
        return self._num_leaves

    def vertex(self, index: int) -> Vertex:
        return self._vertices[index]

    def __getitem__(self, index: int) -> Vertex:
        return self._vertices[index]

    def __len__(self) -> int:
        return len(self._vertices)

    def __iter__(self) -> Iterator[Vertex]:
        return iter(self._vertices)

    def leaves(self) -> Iterator[Vertex]:
        return (v for v in self._vertices if v.kind is VertexKind.LEAF)

    def is_valid(self) -> bool:
        """
        Check the structural invariants of a finished tree.

        * exactly one root, and it is ``self.root``;
        * every non-root vertex has a parent that is in range and lists it
          as a child;
        * every child index is in range and smaller than its parent's;
        * the leaf counter matches the number of leaf vertices.

        Intended as a test/debug aid; the parser maintains these invariants
        by construction.
        """
        n = len(self._vertices)
        if self.root is None or not 0 <= self.root < n:
            return False

        n_roots = 0
        n_leaves = 0
        for vertex in self._vertices:
            if vertex.kind is VertexKind.ROOT:
                n_roots += 1
                if vertex.index != self.root:
                    return False
            else:
                parent = vertex.parent_index
                if parent is None or not 0 <= parent < n:
                    return False
                siblings = self._vertices[parent].children
                if siblings is None or vertex.index not in siblings:
                    return False

            if vertex.kind is VertexKind.LEAF:
                n_leaves += 1
            else:
                for child in vertex.children:
                    if not 0 <= child < vertex.index:
                        return False

        return n_roots == 1 and n_leaves == self._num_leaves

    # ================================================================== #
    # Array export                                                         #
    # ================================================================== #

    def to_arrays(self) -> Dict[str, np.ndarray]:
        """
        Return the arena as parallel numpy arrays indexed by vertex ID.

        Returns
        -------
        dict with keys
          parent      : int32  [n]   Parent ID; -1 for the root.
          left_child  : int32  [n]   Left child ID; -1 for leaves.
          right_child : int32  [n]   Right child ID; -1 for leaves.
          label       : int32  [n]   Label index; -1 for non-leaves.
          distance    : float64[n]   Branch length; -1.0 when absent.
        """
        n = len(self._vertices)
        parent = np.full(n, -1, dtype=np.int32)
        left_child = np.full(n, -1, dtype=np.int32)
        right_child = np.full(n, -1, dtype=np.int32)
        label = np.full(n, -1, dtype=np.int32)
        distance = np.full(n, -1.0, dtype=np.float64)

        for i, vertex in enumerate(self._vertices):
            if vertex.parent_index is not None:
                parent[i] = vertex.parent_index
            if vertex.branch_length is not None:
                distance[i] = vertex.branch_length.value
            if vertex.kind is VertexKind.LEAF:
                label[i] = vertex.label_index
            else:
                left_child[i], right_child[i] = vertex.children

        return {
            "parent": parent,
            "left_child": left_child,
            "right_child": right_child,
            "label": label,
            "distance": distance,
        }

    def __repr__(self) -> str:
        return (
            f"Tree(n_vertices={len(self._vertices)}, n_leaves={self._num_leaves}, "
            f"root={self.root})"
        )
