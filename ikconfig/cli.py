#!/usr/bin/env python3
"""
Print the configuration embedded in a kernel image.
Accepts vmlinux, compressed vmlinuz/bzImage/zImage and Android boot.img files.
"""

import argparse
import logging
import sys

from .compression import Compression
from .errors import IkconfigError
from .kernel import KernelImage


def extract_ikconfig(path, compression, key=None, keep=False):
    """Extract and print the config of one image. Returns the exit status."""
    try:
        image = KernelImage(path, compression)
        try:
            config = image.parse_config()
            decompressed = image.path_decompressed
        finally:
            if not keep:
                image.cleanup()
    except (IkconfigError, OSError, ValueError) as e:
        print(f"Error extracting kernel config from {path}: {e}", file=sys.stderr)
        return 1

    if keep:
        print(f"Decompressed image kept at {decompressed}", file=sys.stderr)

    if key is not None:
        try:
            print(config.get_value(key))
        except KeyError as e:
            print(f"Error: {e.args[0]}", file=sys.stderr)
            return 1
        return 0

    sys.stdout.write(config.to_text())
    return 0


def main(argv=None):
    ap = argparse.ArgumentParser(description='Extract the embedded .config from a kernel image')
    ap.add_argument('image', help='Kernel image or boot.img file')
    ap.add_argument('--compression', '-c', default=Compression.UNKNOWN.value,
                    choices=[c.value for c in Compression],
                    help='Compression of the image (default: detect from its signature)')
    ap.add_argument('--key', '-k', help='Print only the value of this option')
    ap.add_argument('--keep', action='store_true',
                    help='Keep the decompressed image instead of deleting it')
    ap.add_argument('--verbose', '-v', action='store_true', help='Log progress to stderr')
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    status = extract_ikconfig(args.image, Compression(args.compression), args.key, args.keep)
    sys.exit(status)


if __name__ == '__main__':
    main()
