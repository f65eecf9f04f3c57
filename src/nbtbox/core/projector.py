"""Read-only JSON projection of a tag tree.

The projection is produced as a stream of text chunks so that large trees never need to be held
in memory as a single string. Compound keys are always sorted, which makes the output of a given
tree deterministic.

In the typed mode every node is wrapped as `{"type": ..., "value": ...}` where the type is the
lower-cased kind name (for example `bytearray`) and the value is the projection of the node, whose
children are wrapped in turn.

NaN and infinite Float or Double values have no JSON form, so projecting them to text raises a
[FormatError][nbtbox.common.exceptions.FormatError].
"""

from __future__ import annotations

import json
import math
from typing import IO
from typing import TYPE_CHECKING
from typing import Any

from nbtbox.common.exceptions import FormatError
from nbtbox.common.exceptions import UnsupportedOperationError
from nbtbox.core.tag import ByteArrayTag
from nbtbox.core.tag import CompoundTag
from nbtbox.core.tag import DoubleTag
from nbtbox.core.tag import EndTag
from nbtbox.core.tag import FloatTag
from nbtbox.core.tag import IntArrayTag
from nbtbox.core.tag import ListTag

if TYPE_CHECKING:
    from collections.abc import Iterable
    from collections.abc import Iterator

    from nbtbox.core.tag import Tag

__all__ = (
    "JsonProjector",
    "project",
)


class JsonProjector:
    """Projects tags to JSON text.

    The output is the same as `json.dumps(project(tag, typed), sort_keys=True,
    ensure_ascii=False)` with compact separators, or with the given indent if there is one.
    """

    __slots__ = ("_indent", "_item_separator", "_key_separator", "_typed")

    def __init__(self, *, typed: bool = False, indent: int | None = None) -> None:
        self._typed = typed
        self._indent = indent
        self._item_separator = ","
        self._key_separator = ":" if indent is None else ": "

    @property
    def typed(self) -> bool:
        """Whether every node is wrapped with its type."""
        return self._typed

    def iter_json(self, tag: Tag) -> Iterator[str]:
        """Yield the JSON text of a tag in chunks."""
        return self._iter_tag(tag, 0)

    def dump(self, tag: Tag, fp: IO[str]) -> None:
        """Write the JSON text of a tag to a text stream."""
        for chunk in self._iter_tag(tag, 0):
            fp.write(chunk)

    def dumps(self, tag: Tag) -> str:
        """Return the JSON text of a tag."""
        return "".join(self._iter_tag(tag, 0))

    def _iter_tag(self, tag: Tag, level: int) -> Iterator[str]:
        if not self._typed:
            return self._iter_payload(tag, level)
        return self._iter_object(
            (
                ("type", iter((_dumps(tag.kind.type_name),))),
                ("value", self._iter_payload(tag, level + 1)),
            ),
            level,
        )

    def _iter_payload(self, tag: Tag, level: int) -> Iterator[str]:
        match tag:
            case CompoundTag():
                yield from self._iter_object(
                    ((key, self._iter_tag(tag[key], level + 1)) for key in sorted(tag)), level
                )
            case ListTag():
                yield from self._iter_array((self._iter_tag(t, level + 1) for t in tag), level)
            case IntArrayTag():
                yield from self._iter_array((iter((_dumps(v),)) for v in tag.value), level)
            case ByteArrayTag():
                yield _dumps(tag.json_value())
            case EndTag():
                msg = "The End tag has no JSON projection"
                raise UnsupportedOperationError(msg)
            case FloatTag() | DoubleTag() if not math.isfinite(tag.value):
                msg = f"{tag.kind.name} value {tag.value} has no JSON representation"
                raise FormatError(msg, tag)
            case _:
                yield _dumps(tag.json_value())

    def _iter_object(
        self,
        items: Iterable[tuple[str, Iterator[str]]],
        level: int,
    ) -> Iterator[str]:
        empty = True
        for key, value in items:
            yield ("{" if empty else self._item_separator) + self._newline(level + 1)
            yield _dumps(key) + self._key_separator
            yield from value
            empty = False
        yield "{}" if empty else self._newline(level) + "}"

    def _iter_array(self, items: Iterable[Iterator[str]], level: int) -> Iterator[str]:
        empty = True
        for value in items:
            yield ("[" if empty else self._item_separator) + self._newline(level + 1)
            yield from value
            empty = False
        yield "[]" if empty else self._newline(level) + "]"

    def _newline(self, level: int) -> str:
        if self._indent is None:
            return ""
        return "\n" + " " * (self._indent * level)


def project(tag: Tag, *, typed: bool = False) -> Any:
    """Return the JSON projection of a tag as native Python values."""
    if not typed:
        return tag.json_value()
    match tag:
        case CompoundTag():
            value: Any = {key: project(tag[key], typed=True) for key in sorted(tag)}
        case ListTag():
            value = [project(t, typed=True) for t in tag]
        case _:
            value = tag.json_value()
    return {"type": tag.kind.type_name, "value": value}


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, allow_nan=False)
