"""
nexwood
=======

NEXUS tree-file parsing into a forest of strictly binary phylogenetic trees
sharing one taxon-label dictionary.

Main Functions
--------------
parse_nexus : Parse an in-memory NEXUS document
parse_nexus_file : Read a NEXUS file from disk and parse it
parse_newick : Parse a single NEWICK tree description

Model
-----
Tree : Arena of vertices with a single root
Vertex, VertexKind : Tagged root / internal / leaf records
BranchLength : Finite, non-negative branch length
LabelMap : Shared taxon name <-> index dictionary
LabelResolver, ResolverKind : Leaf-token resolution strategies

Diagnostics
-----------
ParsingError, ErrorKind : Position-aware parsing failures
BranchLengthError : Invalid branch length value

Context Managers
----------------
quiet : Suppress nexwood logging
suppress_logger : Suppress a specific logger

Examples
--------
>>> from nexwood import parse_newick
>>> tree, labels = parse_newick("(A:1.0,B:2.0);")
>>> tree.num_leaves(), labels.names
(2, ['A', 'B'])

>>> from nexwood import parse_nexus_file, quiet
>>> with quiet():
...     trees, labels = parse_nexus_file("posterior.trees")
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Parsing entry points
from ._nexus import parse_nexus
from ._io import parse_nexus_file
from ._newick import parse_newick, parse_newick_with_resolver

# Model
from ._tree import Tree
from ._vertex import BranchLength, BranchLengthError, Vertex, VertexKind
from ._labels import LabelMap
from ._resolver import LabelResolver, ResolverKind
from ._scanner import Scanner

# Diagnostics
from ._errors import ErrorKind, ParsingError

# Context managers (user-facing utilities)
from ._context import quiet, suppress_logger

# Public API
__all__ = [
    # Parsing
    "parse_nexus",
    "parse_nexus_file",
    "parse_newick",
    "parse_newick_with_resolver",
    # Model
    "Tree",
    "Vertex",
    "VertexKind",
    "BranchLength",
    "LabelMap",
    "LabelResolver",
    "ResolverKind",
    "Scanner",
    # Diagnostics
    "ErrorKind",
    "ParsingError",
    "BranchLengthError",
    # Context managers
    "quiet",
    "suppress_logger",
    # Version info
    "__version__",
]
