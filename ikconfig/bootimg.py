"""
Android boot image support: pull the kernel section out of a boot.img so it
can be decoded like any other kernel image.
"""

import logging
import struct

logger = logging.getLogger(__name__)

BOOT_MAGIC = b'ANDROID!'


class BootImageHeader:
    """Android boot image header, enough of it to locate the kernel."""

    # magic(8) kernel_size kernel_addr ramdisk_size ramdisk_addr second_size
    # second_addr tags_addr page_size header_version os_version name(16)
    # cmdline(512) id(32) extra_cmdline(1024)
    FORMAT = '<8s10I16s512s32s1024s'
    SIZE = struct.calcsize(FORMAT)

    def __init__(self):
        self.kernel_size = 0
        self.kernel_addr = 0
        self.ramdisk_size = 0
        self.second_size = 0
        self.page_size = 0
        self.header_version = 0
        self.os_version = 0
        self.name = ''
        self.cmdline = ''

    def parse(self, data):
        """Parse boot image header from bytes."""
        if len(data) < self.SIZE:
            raise ValueError("Boot image header too small")

        fields = struct.unpack_from(self.FORMAT, data, 0)
        if fields[0] != BOOT_MAGIC:
            raise ValueError(f"Invalid boot magic: {fields[0]!r}")

        (self.kernel_size, self.kernel_addr, self.ramdisk_size, _,
         self.second_size, _, _, self.page_size,
         self.header_version, self.os_version) = fields[1:11]
        self.name = fields[11].split(b'\x00', 1)[0].decode('utf-8', errors='ignore')
        self.cmdline = fields[12].split(b'\x00', 1)[0].decode('utf-8', errors='ignore')

        # v3/v4 keep kernel_size and header_version where v0-v2 have them but
        # drop page_size in favour of a fixed 4096 byte page. On v0 images the
        # same word holds dt_size, which is never this small.
        if self.header_version in (3, 4):
            self.kernel_addr = 0
            self.ramdisk_size = fields[2]
            self.second_size = 0
            self.os_version = fields[3]
            self.page_size = 4096
            self.name = ''
            self.cmdline = ''
        elif self.page_size == 0:
            self.page_size = 2048
        return self


def is_boot_image(data):
    return data[:len(BOOT_MAGIC)] == BOOT_MAGIC


def extract_kernel(data):
    """Return the kernel section of a boot image; it starts one page in."""
    header = BootImageHeader().parse(data)
    start = header.page_size
    end = start + header.kernel_size
    if header.kernel_size == 0 or end > len(data):
        raise ValueError(
            f"Boot image kernel section out of range: {header.kernel_size} bytes at 0x{start:x}")

    logger.info("boot image %r: kernel is %d bytes at 0x%x", header.name, header.kernel_size, start)
    return data[start:end]
