"""
_io.py
======
File-reading front end for the NEXUS parser.

The parsing core works on in-memory buffers only.  ``parse_nexus_file``
reads the whole file as bytes and hands it over, so ``OSError`` (missing
file, permissions, ...) and ``ParsingError`` stay distinct failure classes.
"""

import logging
import os
from typing import List, Tuple, Union

from nexwood._labels import LabelMap
from nexwood._nexus import parse_nexus
from nexwood._tree import Tree

logger = logging.getLogger(__name__)


def parse_nexus_file(path: Union[str, os.PathLike]) -> Tuple[List[Tree], LabelMap]:
    """
    Read *path* completely and parse it as NEXUS.

    Raises
    ------
    OSError        if the file cannot be read.
    ParsingError   if its content is malformed.
    """
    with open(path, "rb") as fh:
        data = fh.read()
    logger.info("Read %d bytes from %s", len(data), os.fspath(path))
    return parse_nexus(data)
