"""
Exceptions raised while extracting an embedded kernel configuration.

I/O failures are not wrapped: they surface as the builtin OSError subclasses,
which already carry the offending filename.
"""


class IkconfigError(Exception):
    """Base class for all extraction failures."""


class MagicNotFoundError(IkconfigError):
    """A byte pattern does not occur in the searched buffer."""

    def __init__(self, pattern, source=None):
        self.pattern = bytes(pattern)
        self.source = source
        super().__init__(self._describe())

    def _describe(self):
        where = f" in {self.source}" if self.source else ""
        return f"magic bytes {self.pattern.hex(' ')} not found{where}"


class MarkerNotFoundError(MagicNotFoundError):
    """The embedded configuration marker is missing from a decompressed image."""

    def _describe(self):
        where = f" in {self.source}" if self.source else ""
        return (f"kernel config marker {self.pattern!r} not found{where}; "
                "was the kernel built with CONFIG_IKCONFIG?")


class UnsupportedFormatError(IkconfigError):
    """No decoder is implemented for the requested compression format."""

    def __init__(self, compression, message=None):
        self.compression = compression
        super().__init__(message or f"unsupported compression format: {compression}")


class UnrecognizedFormatError(UnsupportedFormatError):
    """Auto-detection found no known compression signature."""

    def __init__(self, source=None):
        where = f" for {source}" if source else ""
        super().__init__(None, f"unrecognized compression format{where}")
        self.source = source


class DecodeError(IkconfigError):
    """A compressed stream is malformed or truncated."""

    def __init__(self, compression, reason):
        self.compression = compression
        self.reason = reason
        super().__init__(f"error decompressing {compression}: {reason}")
