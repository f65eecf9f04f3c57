from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from nbtbox.core.kind import TagKind
    from nbtbox.core.tag import Tag


class NbtError(Exception):
    """Base for all errors raised by nbtbox."""


class StreamError(NbtError, OSError):
    """Raised when the underlying source or sink fails."""


class FormatError(NbtError, ValueError):
    """Raised when data does not follow the NBT format or a schema."""

    def __init__(
        self,
        msg: str,
        *tags: Tag,
        field_name: str | None = None,
        type_name: str | None = None,
        expected: TagKind | None = None,
        actual: TagKind | None = None,
    ) -> None:
        super().__init__(msg)
        self.tags: list[Tag] = list(tags)
        """The tags that were malformed, if any."""
        self.field_name = field_name
        """The schema field that failed to map, if any."""
        self.type_name = type_name
        """The name of the mapped type, if any."""
        self.expected = expected
        """The kind a schema field expected, if any."""
        self.actual = actual
        """The kind that was found instead - None if the tag was missing."""

    def add_tags(self, *tags: Tag) -> None:
        """Record more tags as malformed."""
        self.tags.extend(tags)

    @property
    def malformed(self) -> Sequence[Tag]:
        """The tags that were malformed."""
        return tuple(self.tags)


class UnsupportedOperationError(NbtError, TypeError):
    """Raised when an operation is not supported for the given object or type."""


class NotRegistered(KeyError):
    """Raised when a registry does not have an item."""

    if TYPE_CHECKING:

        def __init__(self, msg: str) -> None: ...

    def __repr__(self) -> str:
        return self.args[0]
