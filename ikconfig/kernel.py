"""
Decompression of kernel images and extraction of the configuration embedded
by CONFIG_IKCONFIG.

With CONFIG_IKCONFIG the kernel carries its .config as

    IKCFG_ST <gzip stream> IKCFG_ED

somewhere in the uncompressed image. The image itself is usually compressed,
so it is first materialized to a temporary file, then searched for the
marker, and the gzip stream after the marker is decoded and parsed.
"""

import errno
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass

from . import kconfig
from .bootimg import extract_kernel, is_boot_image
from .compression import Compression, decompress_bytes, detect
from .errors import DecodeError, MagicNotFoundError, MarkerNotFoundError, UnsupportedFormatError
from .magic import find_all, search

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """Constants that locate the embedded configuration.

    header_size is the width of the 'IKCFG_ST' start tag: the 5 marker bytes
    followed by '_ST'. The gzip stream of the configuration begins right
    after it.
    """
    marker: bytes = b'IKCFG'
    header_size: int = len(b'IKCFG_ST')
    temp_prefix: str = 'ikconfig'
    decompressed_name: str = 'vmlinux'


DEFAULT_SETTINGS = Settings()


class KernelImage:
    """One kernel image on disk and, once decompressed, its materialization.

    The decompressed copy lives in a temporary directory owned by this
    handle; call cleanup() or use the handle as a context manager to remove
    it. The compression format is fixed at construction, create a new handle
    to decode the same file differently.
    """

    def __init__(self, path, compression=Compression.UNKNOWN, settings=DEFAULT_SETTINGS):
        if not os.path.exists(path):
            raise FileNotFoundError(errno.ENOENT, "kernel image not found", path)
        if isinstance(compression, str):
            compression = Compression.from_name(compression)

        self._path = os.fspath(path)
        self._compression = compression
        self._settings = settings
        self._resolved = None
        self._workdir = None
        self._path_decompressed = None

    def __repr__(self):
        return f"KernelImage({self._path!r}, compression={self._compression})"

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.cleanup()

    @property
    def path(self):
        return self._path

    @property
    def compression(self):
        """The compression format given by the caller, possibly UNKNOWN."""
        return self._compression

    @property
    def resolved_compression(self):
        """The format actually decoded, None before decompress()."""
        return self._resolved

    @property
    def path_decompressed(self):
        return self._path_decompressed

    @property
    def workdir(self):
        return self._workdir

    def decompress(self):
        """Materialize the uncompressed image and return its path.

        Runs at most once per handle; later calls return the same path.
        """
        if self._path_decompressed is not None:
            return self._path_decompressed

        if not self._compression.supported and self._compression is not Compression.UNKNOWN:
            raise UnsupportedFormatError(self._compression)

        with open(self._path, 'rb') as f:
            data = f.read()

        unwrapped = is_boot_image(data)
        if unwrapped:
            data = extract_kernel(data)

        compression = self._compression
        if compression is Compression.UNKNOWN:
            compression = detect(data, self._path)

        workdir = tempfile.mkdtemp(prefix=self._settings.temp_prefix)
        target = os.path.join(workdir, self._settings.decompressed_name)
        try:
            if compression is Compression.NONE and not unwrapped:
                self._link(target)
            else:
                if compression is not Compression.NONE:
                    data = self._decode_stream(data, compression)
                with open(target, 'wb') as out:
                    out.write(data)
        except BaseException:
            shutil.rmtree(workdir, ignore_errors=True)
            raise

        logger.info("decompressed %s (%s) to %s", self._path, compression, target)
        self._resolved = compression
        self._workdir = workdir
        self._path_decompressed = target
        return target

    def _link(self, target):
        try:
            os.link(self._path, target)
        except OSError as e:
            logger.debug("hard link to %s failed (%s), copying instead", target, e)
            shutil.copyfile(self._path, target)

    def _decode_stream(self, data, compression):
        # A bzImage/zImage starts with a boot stub, the payload follows it.
        # Signature bytes can also occur by chance inside the stub, so every
        # occurrence is tried in turn until one decodes.
        magic = compression.magic
        error = None
        for offset in find_all(data, magic):
            try:
                plain = decompress_bytes(data[offset:], compression)
            except DecodeError as e:
                logger.debug("no %s stream at 0x%x in %s: %s", compression, offset, self._path, e)
                error = e
                continue
            if offset:
                logger.info("%s stream starts at 0x%x in %s", compression, offset, self._path)
            return plain

        if error is None:
            raise MagicNotFoundError(magic, self._path)
        raise error

    def _read_decompressed(self):
        with open(self.decompress(), 'rb') as f:
            return f.read()

    def _find_marker(self, data):
        try:
            return search(data, self._settings.marker)
        except MagicNotFoundError:
            raise MarkerNotFoundError(self._settings.marker, self._path_decompressed) from None

    def locate_config(self):
        """Offset of the configuration marker in the decompressed image."""
        return self._find_marker(self._read_decompressed())

    def extract_config_text(self):
        """Decode the gzip stream following the marker and return it as text."""
        data = self._read_decompressed()
        start = self._find_marker(data) + self._settings.header_size
        payload = data[start:]
        logger.debug("config stream at 0x%x, %d bytes follow", start, len(payload))
        return decompress_bytes(payload, Compression.GZIP).decode('utf-8', errors='replace')

    def parse_config(self):
        """Return the embedded configuration as a KernelConfig mapping."""
        config = kconfig.parse_config(self.extract_config_text())
        logger.info("parsed %d config entries from %s", len(config), self._path)
        return config

    def cleanup(self):
        """Remove the temporary materialization, if any."""
        if self._workdir is not None:
            shutil.rmtree(self._workdir, ignore_errors=True)
            logger.debug("removed %s", self._workdir)
        self._workdir = None
        self._path_decompressed = None
        self._resolved = None


def extract_config(path, compression=Compression.UNKNOWN, settings=DEFAULT_SETTINGS):
    """Extract the configuration of one image without keeping any files."""
    with KernelImage(path, compression, settings) as image:
        return image.parse_config()
