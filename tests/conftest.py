"""
Pytest configuration and fixtures

Kernel images are synthesized: a fake vmlinux with an IKCFG_ST/IKCFG_ED
section, compressed with the standard encoder of each format.
"""
import bz2
import gzip
import lzma
import struct

import pytest
import zstandard

from ikconfig import Compression


CONFIG_TEXT = """\
#
# Automatically generated file; DO NOT EDIT.
# Linux/x86 6.7.1 Kernel Configuration
#
CONFIG_CC_VERSION_TEXT="gcc (GCC) 13.2.1 20230801"
CONFIG_CC_IS_GCC=y
CONFIG_GCC_VERSION=130201
CONFIG_64BIT=y
CONFIG_HZ=300
CONFIG_EXT4_FS=m
CONFIG_LOCALVERSION=""
# CONFIG_KASAN is not set
CONFIG_IKCONFIG=y
CONFIG_IKCONFIG_PROC=y
"""

COMPRESSORS = {
    Compression.GZIP: gzip.compress,
    Compression.BZIP2: bz2.compress,
    Compression.XZ: lambda data: lzma.compress(data, format=lzma.FORMAT_XZ),
    Compression.ZSTD: lambda data: zstandard.ZstdCompressor().compress(data),
}


def make_vmlinux(config_text=CONFIG_TEXT, with_config=True):
    """A fake uncompressed kernel with the config section in the middle."""
    body = b'\x7fELF\x02\x01\x01' + bytes(4089) + b'Linux version 6.7.1\x00' + bytes(2048)
    if with_config:
        body += b'IKCFG_ST' + gzip.compress(config_text.encode()) + b'IKCFG_ED'
    return body + bytes(1024)


def make_boot_image(kernel, page_size=2048, name=b'test-boot'):
    """Android boot image (header v0) wrapping kernel, with a small ramdisk."""
    ramdisk = gzip.compress(b'ramdisk contents')
    header = struct.pack('<8s10I16s512s32s1024s', b'ANDROID!',
                         len(kernel), 0x10008000, len(ramdisk), 0x11000000,
                         0, 0x10f00000, 0x10000100, page_size, 0, 0,
                         name, b'console=ttyS0', b'', b'')

    def pad(blob):
        return blob + bytes(-len(blob) % page_size)

    return pad(header) + pad(kernel) + pad(ramdisk)


@pytest.fixture
def vmlinux():
    return make_vmlinux()


@pytest.fixture
def write_file(tmp_path):
    """Write bytes to a file under tmp_path and return its path."""
    def _write(name, data):
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)
    return _write


@pytest.fixture
def kernel_file(write_file, vmlinux):
    """Write the fake kernel compressed with the given format."""
    def _kernel(compression, data=None):
        data = vmlinux if data is None else data
        if compression in COMPRESSORS:
            data = COMPRESSORS[compression](data)
        return write_file(f'vmlinuz-{compression}', data)
    return _kernel
