"""Compressed documents.

Documents on disk are gzip streams wrapping the raw codec. Region containers compress each of
their chunks with zlib instead, so both are supported here.
"""

from __future__ import annotations

import gzip
import logging
import zlib
from enum import Enum
from functools import partial
from io import BytesIO
from pathlib import Path
from typing import IO
from typing import TYPE_CHECKING

from anyio.to_thread import run_sync

from nbtbox._internal._logging import DocumentLogger
from nbtbox._internal.settings import NBTBOX_GZIP_LEVEL
from nbtbox.common.exceptions import FormatError
from nbtbox.common.exceptions import StreamError
from nbtbox.core.codec import decode
from nbtbox.core.codec import decode_bytes
from nbtbox.core.codec import encode
from nbtbox.core.codec import encode_bytes

if TYPE_CHECKING:
    from anyio import CapacityLimiter

    from nbtbox.core.tag import CompoundTag
    from nbtbox.core.tag import Tag

__all__ = (
    "Compression",
    "compress_bytes",
    "decode_compressed",
    "decompress_bytes",
    "detect_compression",
    "dump_file",
    "dump_file_async",
    "encode_compressed",
    "load_file",
    "load_file_async",
    "read_gzip",
    "write_gzip",
)

_LOG = logging.getLogger(__name__)

_GZIP_MAGIC = b"\x1f\x8b"
_ZLIB_DEFLATE = 8


class Compression(Enum):
    """How a document is compressed."""

    NONE = "none"
    GZIP = "gzip"
    ZLIB = "zlib"


def write_gzip(tag: Tag, sink: IO[bytes]) -> None:
    """Write a gzip compressed document to the sink.

    The gzip stream is finished before returning. The sink itself is flushed but left open.
    """
    with gzip.GzipFile(fileobj=sink, mode="wb", compresslevel=NBTBOX_GZIP_LEVEL(), mtime=0) as gz:
        encode(tag, gz)
    sink.flush()


def read_gzip(source: IO[bytes], *, strict: bool = False) -> CompoundTag:
    """Read a gzip compressed document from the source."""
    with gzip.GzipFile(fileobj=source, mode="rb") as gz:
        return decode(gz, strict=strict)


def compress_bytes(data: bytes, compression: Compression) -> bytes:
    """Compress the given bytes."""
    match compression:
        case Compression.NONE:
            return bytes(data)
        case Compression.GZIP:
            return gzip.compress(data, compresslevel=NBTBOX_GZIP_LEVEL(), mtime=0)
        case Compression.ZLIB:
            return zlib.compress(data, NBTBOX_GZIP_LEVEL())
    msg = f"Unknown compression {compression!r}"
    raise ValueError(msg)


def decompress_bytes(data: bytes, compression: Compression) -> bytes:
    """Decompress the given bytes."""
    try:
        match compression:
            case Compression.NONE:
                return bytes(data)
            case Compression.GZIP:
                return gzip.decompress(data)
            case Compression.ZLIB:
                return zlib.decompress(data)
    except (gzip.BadGzipFile, zlib.error, EOFError) as exc:
        msg = f"Failed to decompress {compression.value} data: {exc}"
        raise FormatError(msg) from exc
    msg = f"Unknown compression {compression!r}"
    raise ValueError(msg)


def detect_compression(data: bytes) -> Compression:
    """Guess how the given data is compressed from its first two bytes."""
    if data[:2] == _GZIP_MAGIC:
        return Compression.GZIP
    if len(data) >= 2 and data[0] & 0x0F == _ZLIB_DEFLATE and (data[0] << 8 | data[1]) % 31 == 0:
        return Compression.ZLIB
    return Compression.NONE


def encode_compressed(tag: Tag, compression: Compression = Compression.GZIP) -> bytes:
    """Return the compressed bytes of a document."""
    if compression is Compression.GZIP:
        buffer = BytesIO()
        write_gzip(tag, buffer)
        return buffer.getvalue()
    return compress_bytes(encode_bytes(tag), compression)


def decode_compressed(
    data: bytes,
    compression: Compression | None = None,
    *,
    strict: bool = False,
) -> CompoundTag:
    """Decode a compressed document - the compression is detected if not given."""
    if compression is None:
        compression = detect_compression(data)
    if compression is Compression.GZIP:
        return read_gzip(BytesIO(data), strict=strict)
    return decode_bytes(decompress_bytes(data, compression), strict=strict)


def load_file(
    path: Path | str,
    compression: Compression | None = None,
    *,
    strict: bool = False,
) -> CompoundTag:
    """Load a document from a file - the compression is detected if not given."""
    path = Path(path)
    log = DocumentLogger(_LOG, path)
    try:
        file = path.open("rb")
    except OSError as exc:
        msg = f"Failed to open {path}: {exc}"
        raise StreamError(msg) from exc
    with file:
        if compression is None:
            compression = detect_compression(file.peek(2)[:2])
        log.debug("loading %s document", compression.value)
        match compression:
            case Compression.GZIP:
                root = read_gzip(file, strict=strict)
            case Compression.ZLIB:
                root = decode_compressed(file.read(), compression, strict=strict)
            case _:
                root = decode(file, strict=strict)
    log.debug("loaded root tag %r", root.name)
    return root


def dump_file(
    tag: Tag,
    path: Path | str,
    compression: Compression = Compression.GZIP,
) -> None:
    """Save a document to a file, replacing any existing content."""
    path = Path(path)
    log = DocumentLogger(_LOG, path)
    log.debug("saving %s document", compression.value)
    try:
        file = path.open("wb")
    except OSError as exc:
        msg = f"Failed to open {path}: {exc}"
        raise StreamError(msg) from exc
    with file:
        match compression:
            case Compression.GZIP:
                write_gzip(tag, file)
            case Compression.ZLIB:
                file.write(encode_compressed(tag, compression))
            case _:
                encode(tag, file)


async def load_file_async(
    path: Path | str,
    compression: Compression | None = None,
    *,
    strict: bool = False,
    limiter: CapacityLimiter | None = None,
) -> CompoundTag:
    """Load a document from a file in a worker thread."""
    return await run_sync(partial(load_file, path, compression, strict=strict), limiter=limiter)


async def dump_file_async(
    tag: Tag,
    path: Path | str,
    compression: Compression = Compression.GZIP,
    *,
    limiter: CapacityLimiter | None = None,
) -> None:
    """Save a document to a file in a worker thread."""
    await run_sync(partial(dump_file, tag, path, compression), limiter=limiter)
