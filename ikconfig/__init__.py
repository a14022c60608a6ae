"""
Extract the configuration embedded in a Linux kernel image (CONFIG_IKCONFIG),
in the spirit of the kernel's scripts/extract-ikconfig.
"""

from .compression import Compression, decompress_bytes, detect
from .errors import (
    DecodeError,
    IkconfigError,
    MagicNotFoundError,
    MarkerNotFoundError,
    UnrecognizedFormatError,
    UnsupportedFormatError,
)
from .kconfig import ConfigState, KernelConfig, parse_config
from .kernel import DEFAULT_SETTINGS, KernelImage, Settings, extract_config
from .magic import search, search_file

__version__ = '0.1.0'

__all__ = [
    'Compression',
    'ConfigState',
    'DEFAULT_SETTINGS',
    'DecodeError',
    'IkconfigError',
    'KernelConfig',
    'KernelImage',
    'MagicNotFoundError',
    'MarkerNotFoundError',
    'Settings',
    'UnrecognizedFormatError',
    'UnsupportedFormatError',
    'decompress_bytes',
    'detect',
    'extract_config',
    'parse_config',
    'search',
    'search_file',
]
