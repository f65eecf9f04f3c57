"""The raw binary codec.

A document is a single named Compound tag. Everything is big-endian and strings are prefixed with
their length in bytes.
"""

from __future__ import annotations

import logging
import zlib
from collections.abc import Iterable
from collections.abc import Iterator
from contextlib import contextmanager
from gzip import BadGzipFile
from io import BytesIO
from struct import Struct
from struct import error as StructError  # noqa: N812
from typing import IO
from typing import TYPE_CHECKING

from nbtbox._internal.settings import NBTBOX_MAX_DEPTH
from nbtbox._internal.settings import NBTBOX_READ_CHUNK_SIZE
from nbtbox.common.exceptions import FormatError
from nbtbox.common.exceptions import StreamError
from nbtbox.common.streaming import ByteStreamReader
from nbtbox.core.kind import TagKind
from nbtbox.core.tag import CompoundTag

if TYPE_CHECKING:
    from nbtbox.core.tag import Tag

__all__ = (
    "TagReader",
    "TagWriter",
    "decode",
    "decode_bytes",
    "decode_chunks",
    "encode",
    "encode_bytes",
)

_LOG = logging.getLogger(__name__)

_BYTE = Struct(">b")
_SHORT = Struct(">h")
_INT = Struct(">i")
_LONG = Struct(">q")
_FLOAT = Struct(">f")
_DOUBLE = Struct(">d")
_UNSIGNED_BYTE = Struct(">B")

_MAX_STRING_LENGTH = 32767
"""The length prefix of a string is a signed 16-bit integer."""


def encode(tag: Tag, sink: IO[bytes]) -> None:
    """Write a tag, including its kind and name, to the given sink.

    A tag without a name is written with an empty name, which is how unnamed roots appear on the
    wire.
    """
    try:
        TagWriter(sink).write_tag(tag)
    except RecursionError as exc:
        msg = "Tags are nested too deeply to encode"
        raise FormatError(msg, tag) from exc


def decode(source: IO[bytes], *, strict: bool = False) -> CompoundTag:
    """Read a complete document from the given source.

    Exactly one root tag is consumed. Bytes after it are left unread unless `strict` is set, in
    which case any trailing byte is an error.
    """
    reader = TagReader(source)
    root = reader.read_root()
    if strict and not reader.at_end():
        msg = f"Unexpected data after the root tag {root.name!r}"
        raise FormatError(msg, root)
    return root


def encode_bytes(tag: Tag) -> bytes:
    """Return the encoded bytes of a tag."""
    buffer = BytesIO()
    encode(tag, buffer)
    return buffer.getvalue()


def decode_bytes(data: bytes | bytearray | memoryview, *, strict: bool = False) -> CompoundTag:
    """Decode a complete document from the given bytes."""
    buffer = BytesIO(data)
    root = decode(buffer, strict=strict)
    if (trailing := len(buffer.getbuffer()) - buffer.tell()) > 0:
        _LOG.warning("Ignored %d bytes after the root tag %r", trailing, root.name)
    return root


def decode_chunks(chunks: Iterable[bytes], *, strict: bool = False) -> CompoundTag:
    """Decode a complete document from an iterable of byte chunks."""
    with ByteStreamReader(iter(chunks)) as reader:
        return decode(reader, strict=strict)


class TagReader:
    """Reads tag payloads from a binary source.

    A short read is reported as a [FormatError][nbtbox.common.exceptions.FormatError] and a
    failure of the source as a [StreamError][nbtbox.common.exceptions.StreamError]. Long payloads
    are read in bounded chunks so that a forged length prefix cannot allocate more memory than
    the source actually provides.
    """

    __slots__ = ("_chunk_size", "_depth", "_max_depth", "_source")

    def __init__(
        self,
        source: IO[bytes],
        *,
        max_depth: int | None = None,
        chunk_size: int | None = None,
    ) -> None:
        self._source = source
        self._depth = 0
        self._max_depth = NBTBOX_MAX_DEPTH() if max_depth is None else max_depth
        self._chunk_size = NBTBOX_READ_CHUNK_SIZE() if chunk_size is None else chunk_size

    def read_root(self) -> CompoundTag:
        """Read a named root tag, which must be a compound."""
        data = self._read(1)
        if not data:
            msg = "Unexpected end of stream before reading root tag"
            raise FormatError(msg)
        kind_id = data[0]
        if kind_id != TagKind.COMPOUND:
            msg = f"Root tag was not a Compound tag; tag ID was {kind_id}"
            raise FormatError(msg)
        name = self.read_string()
        _LOG.debug("Decoding root compound %r", name)
        try:
            return CompoundTag.read_payload(self, name)
        except RecursionError as exc:
            msg = f"Tags are nested too deeply to decode with a depth limit of {self._max_depth}"
            raise FormatError(msg) from exc

    @contextmanager
    def nested(self) -> Iterator[None]:
        """Track one level of container nesting."""
        self._depth += 1
        try:
            if self._depth > self._max_depth:
                msg = f"Tags are nested deeper than {self._max_depth} levels"
                raise FormatError(msg)
            yield
        finally:
            self._depth -= 1

    def at_end(self) -> bool:
        """Whether the source has no more data - consumes one byte if it does."""
        return not self._read(1)

    def read_exact(self, size: int) -> bytes:
        """Read exactly the given number of bytes."""
        if size <= self._chunk_size:
            data = self._read_fully(size)
        else:
            buffer = bytearray()
            while len(buffer) < size:
                chunk = self._read_fully(min(self._chunk_size, size - len(buffer)))
                buffer += chunk
                if not chunk:
                    break
            data = bytes(buffer)
        if len(data) < size:
            msg = f"Unexpected end of stream: expected {size} bytes, got {len(data)}"
            raise FormatError(msg)
        return data

    def read_kind(self) -> TagKind:
        """Read a one byte tag kind."""
        return TagKind.from_id(_UNSIGNED_BYTE.unpack(self.read_exact(1))[0])

    def read_byte(self) -> int:
        """Read a signed 8-bit integer."""
        return _BYTE.unpack(self.read_exact(1))[0]

    def read_short(self) -> int:
        """Read a signed 16-bit integer."""
        return _SHORT.unpack(self.read_exact(2))[0]

    def read_int(self) -> int:
        """Read a signed 32-bit integer."""
        return _INT.unpack(self.read_exact(4))[0]

    def read_long(self) -> int:
        """Read a signed 64-bit integer."""
        return _LONG.unpack(self.read_exact(8))[0]

    def read_float(self) -> float:
        """Read a single precision float."""
        return _FLOAT.unpack(self.read_exact(4))[0]

    def read_double(self) -> float:
        """Read a double precision float."""
        return _DOUBLE.unpack(self.read_exact(8))[0]

    def read_length(self, what: str) -> int:
        """Read a 32-bit length prefix, which must not be negative."""
        size = self.read_int()
        if size < 0:
            msg = f"{what} size was negative: {size}"
            raise FormatError(msg)
        return size

    def read_string(self) -> str:
        """Read a string prefixed with its length in bytes."""
        size = self.read_short()
        if size < 0:
            msg = f"String length was negative: {size}"
            raise FormatError(msg)
        data = self.read_exact(size)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            msg = f"String was not valid UTF-8: {exc}"
            raise FormatError(msg) from exc

    def read_int_array(self, size: int) -> list[int]:
        """Read the given number of signed 32-bit integers."""
        data = self.read_exact(size * _INT.size)
        return list(Struct(f">{size}i").unpack(data))

    def _read_fully(self, size: int) -> bytes:
        data = self._read(size)
        if len(data) == size or not data:
            return data
        parts = [data]
        received = len(data)
        while received < size and (more := self._read(size - received)):
            parts.append(more)
            received += len(more)
        return b"".join(parts)

    def _read(self, size: int) -> bytes:
        if size == 0:
            return b""
        try:
            return self._source.read(size) or b""
        except (BadGzipFile, zlib.error) as exc:
            msg = f"Compressed data is corrupt: {exc}"
            raise FormatError(msg) from exc
        except EOFError as exc:
            msg = f"Unexpected end of compressed stream: {exc}"
            raise FormatError(msg) from exc
        except OSError as exc:
            msg = f"Failed to read from {self._source!r}: {exc}"
            raise StreamError(msg) from exc


class TagWriter:
    """Writes tags to a binary sink."""

    __slots__ = ("_sink",)

    def __init__(self, sink: IO[bytes]) -> None:
        self._sink = sink

    def write_tag(self, tag: Tag, name: str | None = None) -> None:
        """Write the kind, name and payload of a tag.

        The name defaults to the name of the tag, and to an empty string if the tag has none.
        """
        if name is None:
            name = "" if tag.name is None else tag.name
        try:
            self.write_kind(tag.kind)
            self.write_string(name)
            tag.write_payload(self)
        except FormatError as exc:
            if not exc.tags:
                exc.add_tags(tag)
            raise

    def write(self, data: bytes | bytearray) -> None:
        """Write raw bytes."""
        try:
            self._sink.write(data)
        except OSError as exc:
            msg = f"Failed to write to {self._sink!r}: {exc}"
            raise StreamError(msg) from exc

    def write_kind(self, kind: TagKind) -> None:
        """Write a one byte tag kind."""
        self.write(_UNSIGNED_BYTE.pack(kind))

    def write_byte(self, value: int) -> None:
        """Write a signed 8-bit integer."""
        self.write(_pack(_BYTE, value))

    def write_short(self, value: int) -> None:
        """Write a signed 16-bit integer."""
        self.write(_pack(_SHORT, value))

    def write_int(self, value: int) -> None:
        """Write a signed 32-bit integer."""
        self.write(_pack(_INT, value))

    def write_long(self, value: int) -> None:
        """Write a signed 64-bit integer."""
        self.write(_pack(_LONG, value))

    def write_float(self, value: float) -> None:
        """Write a single precision float."""
        self.write(_pack(_FLOAT, value))

    def write_double(self, value: float) -> None:
        """Write a double precision float."""
        self.write(_pack(_DOUBLE, value))

    def write_length(self, size: int) -> None:
        """Write a 32-bit length prefix."""
        self.write_int(size)

    def write_string(self, value: str) -> None:
        """Write a string prefixed with its length in bytes."""
        data = value.encode("utf-8")
        if len(data) > _MAX_STRING_LENGTH:
            msg = f"String is {len(data)} bytes long, the limit is {_MAX_STRING_LENGTH}"
            raise FormatError(msg)
        self.write(_SHORT.pack(len(data)))
        self.write(data)

    def write_int_array(self, values: list[int]) -> None:
        """Write signed 32-bit integers without a length prefix."""
        self.write(_pack(Struct(f">{len(values)}i"), *values))


def _pack(fmt: Struct, *values: int | float) -> bytes:
    try:
        return fmt.pack(*values)
    except (StructError, OverflowError) as exc:
        msg = f"Cannot encode {values if len(values) > 1 else values[0]!r}: {exc}"
        raise FormatError(msg) from exc
