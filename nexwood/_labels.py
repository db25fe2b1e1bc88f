"""
_labels.py
==========
Insertion-ordered, bidirectional taxon-name ↔ index dictionary.

One ``LabelMap`` is shared by every tree parsed from a file, so leaves of
different trees referring to the same taxon carry the same integer label
index.  Indices are dense (0 … n-1), assigned in first-encounter order, and
never reused: the map is append-only.
"""

from typing import Dict, Iterator, List, Optional


class LabelMap:
    """
    Append-only bijection between taxon names and dense integer indices.

    Parameters
    ----------
    capacity_hint : int
        Expected number of labels; informational only.
    """

    __slots__ = ("_names", "_index", "capacity_hint")

    def __init__(self, capacity_hint: int = 0) -> None:
        self._names: List[str] = []
        self._index: Dict[str, int] = {}
        self.capacity_hint = capacity_hint

    def get_or_insert(self, name: str) -> int:
        """Return the index of *name*, appending it first if unseen."""
        index = self._index.get(name)
        if index is None:
            index = len(self._names)
            self._names.append(name)
            self._index[name] = index
        return index

    def get_index(self, name: str) -> Optional[int]:
        """Return the index of *name*, or None if it was never inserted."""
        return self._index.get(name)

    def name(self, index: int) -> str:
        """Return the name stored at *index*.

        Raises
        ------
        IndexError   if *index* is not a valid label index.
        """
        if not 0 <= index < len(self._names):
            raise IndexError(f"No label with index {index}.")
        return self._names[index]

    @property
    def names(self) -> List[str]:
        """Copy of all names, ordered by index."""
        return list(self._names)

    def num_labels(self) -> int:
        return len(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name) -> bool:
        return name in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __repr__(self) -> str:
        return f"LabelMap({len(self._names)} labels)"
