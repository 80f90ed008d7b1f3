import bz2
import gzip
import logging
import lzma
import os
import sys
from contextlib import contextmanager
from typing import BinaryIO, Optional, Union

logger = logging.getLogger(__name__)

# Longest magic number below
MAGIC_PEEK = 6

COMPRESSION_MAGIC = {
    b"\x1f\x8b": "gzip",
    b"BZh": "bz2",
    b"\xfd7zXZ\x00": "xz",
}

_OPENERS = {
    "gzip": lambda fileobj: gzip.GzipFile(fileobj=fileobj, mode="rb"),
    "bz2": lambda fileobj: bz2.BZ2File(fileobj, mode="rb"),
    "xz": lambda fileobj: lzma.LZMAFile(fileobj, mode="rb"),
}


class PrefixedSource:
    """
    Byte source that replays bytes already pulled off a handle for sniffing
    before reading the rest of the handle.
    """

    def __init__(self, prefix: bytes, handle: BinaryIO):
        self._prefix = prefix
        self._handle = handle

    def read(self, size: int = -1) -> bytes:
        if not self._prefix:
            return self._handle.read(size)
        if size is None or size < 0:
            data = self._prefix + self._handle.read()
            self._prefix = b""
            return data
        data = self._prefix[:size]
        self._prefix = self._prefix[size:]
        return data

    def close(self) -> None:
        # The handle belongs to whoever opened it
        self._prefix = b""


def detect_compression(prefix: bytes) -> Optional[str]:
    for magic, name in COMPRESSION_MAGIC.items():
        if prefix.startswith(magic):
            return name
    return None


def _read_prefix(handle: BinaryIO) -> bytes:
    prefix = b""
    while len(prefix) < MAGIC_PEEK:
        data = handle.read(MAGIC_PEEK - len(prefix))
        if not data:
            break
        prefix += data
    return prefix


def wrap_byte_source(handle: BinaryIO):
    """
    Return a readable byte source over `handle`, decompressing gzip, bzip2
    or xz input picked by its magic bytes. Plain input is passed through.
    """
    prefix = _read_prefix(handle)
    source = PrefixedSource(prefix, handle)
    compression = detect_compression(prefix)
    if compression is None:
        return source
    logger.info(f"Detected {compression} compressed input")
    return _OPENERS[compression](source)


@contextmanager
def open_byte_source(path: Union[str, os.PathLike, BinaryIO]):
    """
    Open a path ("-" for stdin) or an already open binary handle as a byte
    source, closing whatever was opened here on exit.
    """
    if hasattr(path, "read") or path == "-":
        source = wrap_byte_source(sys.stdin.buffer if path == "-" else path)
        try:
            yield source
        finally:
            source.close()
        return

    with open(path, "rb") as handle:
        source = wrap_byte_source(handle)
        try:
            yield source
        finally:
            source.close()
