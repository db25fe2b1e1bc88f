"""
_logging.py
===========
Logging functions for nexwood.

All functions in this module have NO side effects except logging. They take
already computed values as parameters and format/emit log messages, so the
parsers stay free of presentation code and logging is easy to silence in
tests (see ``nexwood._context.quiet``).
"""

import logging

logger = logging.getLogger(__name__)


# ============================================================================ #
# Block-level events (called by the NEXUS driver)
# ============================================================================ #


def log_block_skipped(name: str, position: int) -> None:
    """
    Report a block whose content is not interpreted.

    Parameters
    ----------
    name : str
        Block name as written in the file.
    position : int
        Byte offset of the block's first statement.
    """
    logger.info("Skipping unsupported block '%s' at position %d", name, position)


def log_translation_table(n_entries: int, block_index: int) -> None:
    """
    Report a parsed TRANSLATE statement.

    Parameters
    ----------
    n_entries : int
        Number of key/name pairs.
    block_index : int
        Zero-based index of the TREES block holding the table.
    """
    logger.debug(
        "TREES block %d: translation table with %d entries", block_index, n_entries
    )


def log_leaf_count_mismatch(tree_name: str, n_leaves: int, expected: int) -> None:
    """
    Warn about a tree whose leaf count differs from the declared taxon count.

    Parameters
    ----------
    tree_name : str
        Name given in the TREE statement.
    n_leaves : int
        Number of leaves actually parsed.
    expected : int
        Taxon count declared by NTAX or implied by the translation table.
    """
    logger.warning(
        "Tree '%s' has %d leaves but %d taxa were declared",
        tree_name,
        n_leaves,
        expected,
    )


# ============================================================================ #
# File-level summary
# ============================================================================ #


def log_parse_summary(n_trees: int, n_labels: int, n_bytes: int) -> None:
    """
    Log the outcome of a complete NEXUS parse.

    Parameters
    ----------
    n_trees : int
        Number of trees parsed.
    n_labels : int
        Number of distinct taxon labels in the shared label map.
    n_bytes : int
        Size of the input in bytes.
    """
    if n_bytes >= 1024**2:
        size = f"{n_bytes / (1024**2):.1f} MB"
    else:
        size = f"{n_bytes / 1024:.1f} KB"
    logger.info(
        "Parsed %d tree(s) over %d taxa from %s of NEXUS input", n_trees, n_labels, size
    )
    if n_trees == 0:
        logger.warning("No TREE statements found in NEXUS input")
