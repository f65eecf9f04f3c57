"""MessagePack projection of a tag tree.

The packed value has the same shape as the JSON projection, typed or untyped, which makes it a
compact alternative for tools that only need to inspect a tree.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

from msgpack import Packer
from msgpack import Unpacker

from nbtbox._internal._utils import frozenclass
from nbtbox.core.projector import project
from nbtbox.core.serializer import SerializedData

if TYPE_CHECKING:
    from collections.abc import Callable
    from collections.abc import Iterable
    from collections.abc import Iterator

    from nbtbox.core.tag import Tag

__all__ = (
    "MSGPACK_CONTENT_TYPE",
    "MsgPackOptions",
    "MsgPackType",
    "pack_projection",
    "pack_projection_stream",
    "unpack_projection",
    "unpack_projection_stream",
)

MsgPackType = (
    Any  # Include any to account for msgpack extension types
    | int
    | str
    | float
    | bool
    | dict[str, "MsgPackType"]
    | list["MsgPackType"]
    | None
)
"""A type alias for MessagePack data."""

MSGPACK_CONTENT_TYPE = "application/msgpack"
"""The MIME type of packed projections."""


@frozenclass
class MsgPackOptions:
    """Options for MessagePack projections."""

    typed: bool = False
    """Whether every node is wrapped with its type."""
    packer_type: Callable[[], Packer] = Packer
    unpacker_type: Callable[[], Unpacker] = Unpacker


_DEFAULT_OPTIONS = MsgPackOptions()


def pack_projection(tag: Tag, options: MsgPackOptions = _DEFAULT_OPTIONS) -> SerializedData:
    """Pack the projection of the given tag."""
    return {
        "content_encoding": None,
        "content_type": MSGPACK_CONTENT_TYPE,
        "data": options.packer_type().pack(project(tag, typed=options.typed)),
    }


def unpack_projection(
    data: SerializedData,
    options: MsgPackOptions = _DEFAULT_OPTIONS,
) -> MsgPackType:
    """Unpack a projection packed with the given options."""
    unpacker = options.unpacker_type()
    unpacker.feed(data["data"])
    return unpacker.unpack()


def pack_projection_stream(
    tags: Iterable[Tag],
    options: MsgPackOptions = _DEFAULT_OPTIONS,
) -> Iterator[bytes]:
    """Pack the projections of the given tags one after another."""
    packer = options.packer_type()
    for tag in tags:
        yield packer.pack(project(tag, typed=options.typed))


def unpack_projection_stream(
    chunks: Iterable[bytes],
    options: MsgPackOptions = _DEFAULT_OPTIONS,
) -> Iterator[MsgPackType]:
    """Unpack a stream of projections from chunks of bytes."""
    unpacker = options.unpacker_type()
    for chunk in chunks:
        unpacker.feed(chunk)
        yield from unpacker
