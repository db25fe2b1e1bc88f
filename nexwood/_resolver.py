"""
_resolver.py
============
Mapping of a NEWICK leaf token to a ``LabelMap`` index.

Three naming conventions occur in tree files, and each has its own
strategy (``ResolverKind``):

  DIRECT       the token is the taxon name ("Scarabaeus" -> 17)
  TRANSLATING  the token is a TRANSLATE key; the actual name is looked up,
               then inserted into the label map ("42" -> "Scarabaeus" -> 17)
  PRECOMPUTED  the token is a TRANSLATE key and the key -> index table was
               built once up front ("42" -> 17)

The file driver uses TRANSLATING for the first tree after a TRANSLATE
statement and PRECOMPUTED for every later tree sharing that table.  Files
with thousands of trees over one translation table thus pay for the
name lookups only once.
"""

from enum import Enum
from typing import Dict, Optional

from nexwood._errors import ParsingError
from nexwood._labels import LabelMap


class ResolverKind(Enum):
    DIRECT = "direct"
    TRANSLATING = "translating"
    PRECOMPUTED = "precomputed"


class LabelResolver:
    """
    Closed three-way label resolution strategy.

    Build with ``direct``, ``translating`` or ``precomputed``; ``resolve``
    dispatches on ``kind``.
    """

    __slots__ = ("kind", "_label_map", "_translation", "_index_map")

    def __init__(
        self,
        kind: ResolverKind,
        label_map: Optional[LabelMap] = None,
        translation: Optional[Dict[str, str]] = None,
        index_map: Optional[Dict[str, int]] = None,
    ) -> None:
        self.kind = kind
        self._label_map = label_map
        self._translation = translation
        self._index_map = index_map

    @classmethod
    def direct(cls, label_map: LabelMap) -> "LabelResolver":
        """Tokens are taxon names."""
        return cls(ResolverKind.DIRECT, label_map=label_map)

    @classmethod
    def translating(
        cls, translation: Dict[str, str], label_map: LabelMap
    ) -> "LabelResolver":
        """Tokens are translation keys; names are inserted on first sight."""
        return cls(ResolverKind.TRANSLATING, label_map=label_map, translation=translation)

    @classmethod
    def precomputed(
        cls, translation: Dict[str, str], label_map: LabelMap
    ) -> "LabelResolver":
        """
        Tokens are translation keys resolved through a key -> index table.

        Every translated name is resolved with ``get_or_insert`` while the
        table is built, so names missing from the map get the next free
        index instead of failing.  Once built, the table does not consult
        the label map again.
        """
        index_map = {
            key: label_map.get_or_insert(name) for key, name in translation.items()
        }
        return cls(ResolverKind.PRECOMPUTED, index_map=index_map)

    def resolve(self, token: str, scanner) -> int:
        """
        Return the label index for *token*.

        Raises
        ------
        ParsingError   INVALID_NEWICK_STRING if *token* is not a key of the
                       active translation table.
        """
        if self.kind is ResolverKind.DIRECT:
            return self._label_map.get_or_insert(token)

        if self.kind is ResolverKind.TRANSLATING:
            name = self._translation.get(token)
            if name is None:
                raise ParsingError.invalid_newick_string(
                    scanner, f"Label '{token}' not found in translation map"
                )
            return self._label_map.get_or_insert(name)

        if self.kind is ResolverKind.PRECOMPUTED:
            index = self._index_map.get(token)
            if index is None:
                raise ParsingError.invalid_newick_string(
                    scanner, f"Label '{token}' not found in index map"
                )
            return index

        raise AssertionError(f"Unhandled resolver kind {self.kind!r}")

    def __len__(self) -> int:
        if self.kind is ResolverKind.TRANSLATING:
            return len(self._translation)
        if self.kind is ResolverKind.PRECOMPUTED:
            return len(self._index_map)
        return len(self._label_map)

    def __repr__(self) -> str:
        return f"LabelResolver({self.kind.name}, {len(self)} entries)"
