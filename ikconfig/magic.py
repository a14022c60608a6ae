"""
Exact byte-pattern search used to find compression signatures and the
embedded configuration marker.
"""

import logging

from .errors import MagicNotFoundError

logger = logging.getLogger(__name__)


def _normalize(buffer, pattern):
    if not pattern:
        raise ValueError("search pattern must not be empty")
    if not isinstance(buffer, (bytes, bytearray)):
        buffer = bytes(buffer)
    return buffer, bytes(pattern)


def search(buffer, pattern):
    """Return the offset of the first occurrence of pattern in buffer.

    Candidates too close to the end of the buffer to hold the whole pattern
    are rejected without reading past it. Raises MagicNotFoundError when the
    pattern does not occur and ValueError for an empty pattern.
    """
    buffer, pattern = _normalize(buffer, pattern)

    offset = buffer.find(pattern)
    if offset < 0:
        raise MagicNotFoundError(pattern)
    return offset


def find_all(buffer, pattern):
    """Yield every offset of pattern in buffer, lowest first."""
    buffer, pattern = _normalize(buffer, pattern)

    offset = buffer.find(pattern)
    while offset >= 0:
        yield offset
        offset = buffer.find(pattern, offset + 1)


def search_file(path, pattern):
    """Search a whole file for pattern.

    OSError from reading the file propagates unchanged; a missing pattern
    raises MagicNotFoundError naming the file.
    """
    with open(path, 'rb') as f:
        data = f.read()

    try:
        offset = search(data, pattern)
    except MagicNotFoundError:
        raise MagicNotFoundError(pattern, path) from None

    logger.debug("found %s at 0x%x in %s", bytes(pattern).hex(), offset, path)
    return offset
