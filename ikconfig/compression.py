"""
Compression formats a kernel image may use, their signatures, and the
decoders for the ones that are implemented.

All supported kernel compression types for kernel version 6.7.1:
CONFIG_HAVE_KERNEL_GZIP, _BZIP2, _LZMA, _XZ, _LZO, _LZ4 and _ZSTD.
"""

import bz2
import enum
import logging
import lzma
import zlib

import zstandard

from .errors import (
    DecodeError,
    MagicNotFoundError,
    UnrecognizedFormatError,
    UnsupportedFormatError,
)
from .magic import search

logger = logging.getLogger(__name__)


class Compression(enum.Enum):
    GZIP = 'gzip'
    BZIP2 = 'bzip2'
    LZMA = 'lzma'
    XZ = 'xz'
    LZO = 'lzo'
    LZ4 = 'lz4'
    ZSTD = 'zstd'
    NONE = 'none'
    UNKNOWN = 'unknown'

    def __str__(self):
        return self.value

    @property
    def magic(self):
        """Signature at the start of a stream, or None if not detectable."""
        return MAGIC[self]

    @property
    def supported(self):
        return self in _DECOMPRESSORS or self is Compression.NONE

    @classmethod
    def from_name(cls, name):
        try:
            return cls(name.strip().lower())
        except ValueError:
            choices = ', '.join(c.value for c in cls)
            raise ValueError(f"unknown compression {name!r} (choose from {choices})") from None


MAGIC = {
    Compression.GZIP: b'\x1f\x8b\x08',
    Compression.BZIP2: b'BZh',
    Compression.LZMA: None,
    Compression.XZ: b'\xfd7zXZ\x00',
    Compression.LZO: None,
    Compression.LZ4: None,
    Compression.ZSTD: b'\x28\xb5\x2f\xfd',
    Compression.NONE: None,
    Compression.UNKNOWN: None,
}

# Fixed probe order so an ambiguous buffer always resolves the same way.
PROBE_ORDER = (
    Compression.GZIP,
    Compression.BZIP2,
    Compression.XZ,
    Compression.ZSTD,
)

_DECOMPRESSORS = {
    Compression.GZIP: lambda: zlib.decompressobj(16 + zlib.MAX_WBITS),
    Compression.BZIP2: bz2.BZ2Decompressor,
    Compression.XZ: lambda: lzma.LZMADecompressor(format=lzma.FORMAT_XZ),
    Compression.ZSTD: lambda: zstandard.ZstdDecompressor().decompressobj(),
}

_DECODE_ERRORS = (zlib.error, lzma.LZMAError, zstandard.ZstdError, OSError, EOFError)


def detect(data, source=None):
    """Identify the compression of data from its signature.

    A signature at offset 0 wins, probed in PROBE_ORDER. Otherwise the
    stream is assumed to follow a boot stub and the signature that occurs
    earliest in data wins.
    """
    where = f" for {source}" if source else ""
    found = []
    for rank, compression in enumerate(PROBE_ORDER):
        try:
            offset = search(data, compression.magic)
        except MagicNotFoundError:
            continue
        if offset == 0:
            logger.info("detected %s compression%s", compression, where)
            return compression
        found.append((offset, rank, compression))

    if not found:
        raise UnrecognizedFormatError(source)

    offset, _, compression = min(found)
    logger.info("detected %s compression at 0x%x%s", compression, offset, where)
    return compression


def decompress_bytes(data, compression):
    """Decode one complete stream and return the plain bytes.

    Bytes after the end of the stream are ignored. A stream that is corrupt
    or ends before its end marker raises DecodeError.
    """
    if compression is Compression.NONE:
        return bytes(data)
    if compression is Compression.UNKNOWN:
        raise UnsupportedFormatError(compression, "compression must be detected before decoding")
    if compression not in _DECOMPRESSORS:
        raise UnsupportedFormatError(compression)

    decompressor = _DECOMPRESSORS[compression]()
    try:
        out = decompressor.decompress(data)
        if hasattr(decompressor, 'flush'):
            out += decompressor.flush()
    except _DECODE_ERRORS as e:
        raise DecodeError(compression, e) from e

    if not decompressor.eof:
        raise DecodeError(compression, "truncated stream")

    trailing = len(getattr(decompressor, 'unused_data', b''))
    if trailing:
        logger.debug("ignoring %d bytes after the %s stream", trailing, compression)
    return out
