from __future__ import annotations

from dataclasses import replace
from typing import TypedDict

from nbtbox._internal._utils import frozenclass
from nbtbox.common.exceptions import FormatError
from nbtbox.core.compression import Compression
from nbtbox.core.compression import decode_compressed
from nbtbox.core.compression import encode_compressed
from nbtbox.core.tag import CompoundTag

__all__ = (
    "NBT_CONTENT_TYPE",
    "NbtOptions",
    "NbtSerializer",
    "SerializedData",
    "nbt_serializer",
)

NBT_CONTENT_TYPE = "application/x-nbt"
"""The MIME type of an encoded document."""

_CONTENT_ENCODINGS: dict[Compression, str | None] = {
    Compression.NONE: None,
    Compression.GZIP: "gzip",
    Compression.ZLIB: "deflate",
}
_COMPRESSIONS = {v: k for k, v in _CONTENT_ENCODINGS.items()}


class SerializedData(TypedDict):
    """The serialized representation of a document."""

    data: bytes
    """The serialized data."""
    content_encoding: str | None
    """The encoding of the data."""
    content_type: str
    """The MIME type of the data."""


@frozenclass
class NbtOptions:
    """Options for the NBT serializer."""

    compression: Compression = Compression.GZIP
    """How serialized documents are compressed."""
    strict: bool = False
    """Whether trailing bytes after the root tag are an error."""


@frozenclass(kw_only=False)
class NbtSerializer:
    """Serializes documents to NBT bytes and back."""

    name: str
    """The globally unique name of the serializer."""
    options: NbtOptions = NbtOptions()
    """Options for serialization and deserialization."""

    types: tuple[type[CompoundTag], ...] = (CompoundTag,)
    """The types that the serializer can handle."""
    content_types: tuple[str, ...] = (NBT_CONTENT_TYPE,)
    """The content types that the serializer uses."""

    def serialize(self, value: CompoundTag) -> SerializedData:
        """Serialize the given document."""
        if not isinstance(value, CompoundTag):
            msg = f"Expected a CompoundTag, got {type(value).__name__}"
            raise TypeError(msg)
        compression = self.options.compression
        return {
            "data": encode_compressed(value, compression),
            "content_encoding": _CONTENT_ENCODINGS[compression],
            "content_type": NBT_CONTENT_TYPE,
        }

    def deserialize(self, data: SerializedData) -> CompoundTag:
        """Deserialize the given data."""
        if data["content_type"] not in self.content_types:
            msg = f"Cannot deserialize content type {data['content_type']!r}"
            raise FormatError(msg)
        if (encoding := data["content_encoding"]) not in _COMPRESSIONS:
            msg = f"Unknown content encoding {encoding!r}"
            raise FormatError(msg)
        return decode_compressed(data["data"], _COMPRESSIONS[encoding], strict=self.options.strict)

    def configure(self, options: NbtOptions) -> NbtSerializer:
        """Create a new serializer with the given options."""
        return replace(self, options=options)


nbt_serializer = NbtSerializer("nbtbox.nbt@v1")
"""Serializes gzip compressed documents."""
