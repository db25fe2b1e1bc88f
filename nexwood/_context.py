"""
_context.py
===========
Context managers for nexwood logging.

Both managers restore the previous logger level on exit, even if the
with-block raises.
"""

import logging
from contextlib import contextmanager


# ============================================================================ #
# Logging Context Managers
# ============================================================================ #


@contextmanager
def suppress_logger(logger_name: str, level: int = logging.CRITICAL):
    """
    Temporarily change a logger's level.

    Parameters
    ----------
    logger_name : str
        Name of the logger to change (e.g. 'nexwood._nexus').
    level : int, default logging.CRITICAL
        Temporary logging level.

    Examples
    --------
    >>> with suppress_logger('nexwood._nexus'):
    ...     trees, labels = parse_nexus(data)
    """
    logger = logging.getLogger(logger_name)
    original_level = logger.level

    try:
        logger.setLevel(level)
        yield
    finally:
        logger.setLevel(original_level)


@contextmanager
def quiet(level: int = logging.CRITICAL):
    """
    Temporarily silence every nexwood logger.

    Sets the level of the package logger ``'nexwood'``; module loggers
    (``'nexwood._nexus'``, ``'nexwood._logging'``, ...) inherit it unless
    they were given a level of their own.

    Examples
    --------
    >>> with quiet():
    ...     trees, labels = parse_nexus_file('sample.trees')

    >>> # Keep warnings, drop INFO
    >>> with quiet(logging.WARNING):
    ...     trees, labels = parse_nexus_file('sample.trees')
    """
    with suppress_logger("nexwood", level):
        yield
