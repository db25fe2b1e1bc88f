"""
conftest.py
===========
Session-level pytest configuration for the test suite.

Custom marks
------------
large_scale
    Applied to tests that generate NEXUS documents with thousands of trees
    sharing one translation table.  They run in a few seconds but can be
    deselected with ``-m "not large_scale"``.

    Registration here suppresses PytestUnknownMarkWarning and makes the mark
    visible in ``pytest --markers``.
"""


def pytest_configure(config):
    """
    Configure pytest before test collection begins.
    """
    config.addinivalue_line(
        "markers",
        "large_scale: many-tree NEXUS inputs "
        "(deselect with -m 'not large_scale')",
    )
