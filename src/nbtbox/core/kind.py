from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING

from nbtbox.common.exceptions import FormatError

if TYPE_CHECKING:
    from nbtbox.core.tag import Tag


class TagKind(IntEnum):
    """The discriminator identifying which of the tag variants a node is."""

    END = 0
    BYTE = 1
    SHORT = 2
    INT = 3
    LONG = 4
    FLOAT = 5
    DOUBLE = 6
    BYTE_ARRAY = 7
    STRING = 8
    LIST = 9
    COMPOUND = 10
    INT_ARRAY = 11

    @classmethod
    def from_id(cls, kind_id: int) -> TagKind:
        """Return the kind with the given wire id."""
        try:
            return cls(kind_id)
        except ValueError:
            msg = f"Unknown tag kind id {kind_id}"
            raise FormatError(msg) from None

    @property
    def type_name(self) -> str:
        """The lower-case name used in typed JSON output."""
        return self.name.replace("_", "").lower()

    @property
    def tag_class(self) -> type[Tag]:
        """The tag class implementing this kind."""
        from nbtbox.core.tag import TAG_CLASSES

        return TAG_CLASSES[self]

    @property
    def is_scalar(self) -> bool:
        """Whether this kind holds a single number or string."""
        return self in _SCALAR_KINDS


_SCALAR_KINDS = frozenset(
    {
        TagKind.BYTE,
        TagKind.SHORT,
        TagKind.INT,
        TagKind.LONG,
        TagKind.FLOAT,
        TagKind.DOUBLE,
        TagKind.STRING,
    }
)
