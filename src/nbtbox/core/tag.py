"""The tag value model.

Every node of an NBT tree is a [Tag][nbtbox.core.tag.Tag]. There is one concrete class per
[TagKind][nbtbox.core.kind.TagKind]:

- scalars: `ByteTag`, `ShortTag`, `IntTag`, `LongTag`, `FloatTag`, `DoubleTag`, `StringTag`
- arrays: `ByteArrayTag`, `IntArrayTag`
- containers: `ListTag` (a mutable sequence) and `CompoundTag` (a mutable mapping)
- the `END` sentinel, which only ever appears on the wire

Tags compare equal when they have the same kind, name and value. Containers are keyed by name
directly, so a compound can never hold two children with the same name.
"""

from __future__ import annotations

import abc
import operator
from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import Mapping
from collections.abc import MutableMapping
from collections.abc import MutableSequence
from struct import Struct
from typing import TYPE_CHECKING
from typing import Any
from typing import ClassVar
from typing import Generic
from typing import TypeVar
from typing import cast
from typing import overload

from typing_extensions import Self

from nbtbox._internal._utils import UNDEFINED
from nbtbox._internal._utils import indent_lines
from nbtbox._internal._utils import not_implemented
from nbtbox.common.exceptions import FormatError
from nbtbox.common.exceptions import UnsupportedOperationError
from nbtbox.core.kind import TagKind

if TYPE_CHECKING:
    from nbtbox.core.codec import TagReader
    from nbtbox.core.codec import TagWriter

__all__ = (
    "END",
    "TAG_CLASSES",
    "ByteArrayTag",
    "ByteTag",
    "CompoundTag",
    "DoubleTag",
    "EndTag",
    "FloatTag",
    "IntArrayTag",
    "IntTag",
    "ListTag",
    "LongTag",
    "ShortTag",
    "StringTag",
    "Tag",
)

V = TypeVar("V")

TAG_CLASSES: dict[TagKind, type[Tag]] = {}
"""The tag class implementing each kind."""

_FLOAT = Struct(">f")


class Tag(abc.ABC):
    """Base class for all tags."""

    kind: ClassVar[TagKind]
    """The kind of this tag."""

    __slots__ = ("_name",)

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "kind" in cls.__dict__:
            TAG_CLASSES[cls.kind] = cls

    def __init__(self, name: str | None = None) -> None:
        self._name: str | None = None
        self.name = name

    @property
    def name(self) -> str | None:
        """The name of this tag - None for list elements."""
        return self._name

    @name.setter
    def name(self, value: str | None) -> None:
        if value is not None and not isinstance(value, str):
            msg = f"Tag names must be strings, got {value!r}"
            raise TypeError(msg)
        self._name = value

    @classmethod
    @abc.abstractmethod
    @not_implemented
    def read_payload(cls, reader: TagReader, name: str | None) -> Self:
        """Decode the payload of a tag of this kind."""
        ...

    @abc.abstractmethod
    @not_implemented
    def write_payload(self, writer: TagWriter) -> None:
        """Encode the payload of this tag."""
        ...

    @abc.abstractmethod
    @not_implemented
    def json_value(self) -> Any:
        """Return the untyped JSON projection of this tag as native Python values."""
        ...

    @abc.abstractmethod
    @not_implemented
    def describe(self) -> str:
        """Return a diagnostic rendering of this tag."""
        ...

    @abc.abstractmethod
    @not_implemented
    def _copy(self) -> Self: ...

    @abc.abstractmethod
    @not_implemented
    def _same_value(self, other: Self) -> bool: ...

    def clone(self, name: str | None = UNDEFINED) -> Self:
        """Return an independent deep copy of this tag, optionally with a new name."""
        tag = self._copy()
        if name is not UNDEFINED:
            tag.name = name
        return tag

    def same_name(self, other: Tag) -> bool:
        """Whether the other tag has the same name, regardless of kind or value."""
        return self._name == other._name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tag):
            return NotImplemented
        return (
            type(self) is type(other) and self._name == other._name and self._same_value(other)
        )

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return self.describe()

    def _quoted_name(self) -> str:
        return "" if self._name is None else f' "{self._name}"'

    def _name_repr(self) -> str:
        return "" if self._name is None else f", name={self._name!r}"


class EndTag(Tag):
    """The sentinel that terminates a compound on the wire.

    There is only one instance, [END][nbtbox.core.tag.END]. It has no name and no payload.
    """

    kind = TagKind.END

    __slots__ = ()

    _instance: ClassVar[EndTag | None] = None

    def __new__(cls) -> EndTag:
        if cls._instance is not None:
            msg = "The End tag cannot be constructed twice - use nbtbox.core.tag.END"
            raise UnsupportedOperationError(msg)
        return super().__new__(cls)

    def __init__(self) -> None:
        super().__init__(None)

    @property
    def name(self) -> None:
        """The End tag never has a name."""
        return None

    @name.setter
    def name(self, value: str | None) -> None:
        if value is not None:
            msg = "The End tag cannot be named"
            raise UnsupportedOperationError(msg)

    @classmethod
    def read_payload(cls, reader: TagReader, name: str | None) -> EndTag:
        return END

    def write_payload(self, writer: TagWriter) -> None:
        pass

    def json_value(self) -> Any:
        msg = "The End tag has no JSON value"
        raise UnsupportedOperationError(msg)

    def describe(self) -> str:
        return "End"

    def clone(self, name: str | None = UNDEFINED) -> EndTag:
        return self

    def _copy(self) -> EndTag:
        return self

    def _same_value(self, other: EndTag) -> bool:
        return True

    def __copy__(self) -> EndTag:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> EndTag:
        return self

    def __reduce__(self) -> str:
        return "END"

    def __repr__(self) -> str:
        return "END"


END = EndTag()
"""The single End tag."""
EndTag._instance = END  # noqa: SLF001


class _ValueTag(Tag, Generic[V]):
    """A tag holding a single payload value."""

    __slots__ = ("_value",)

    def __init__(self, value: V, name: str | None = None) -> None:
        super().__init__(name)
        self.value = value

    @property
    def value(self) -> V:
        """The payload of this tag."""
        return self._value

    @value.setter
    def value(self, value: V) -> None:
        self._value = self._validate(value)

    def _validate(self, value: Any) -> V:
        return value

    def json_value(self) -> Any:
        return self._value

    def describe(self) -> str:
        return f"{type(self).__name__}{self._quoted_name()}: {self._value}"

    def _copy(self) -> Self:
        return type(self)(self._value, self._name)

    def _same_value(self, other: Self) -> bool:
        return self._value == other._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r}{self._name_repr()})"


class _IntegralTag(_ValueTag[int]):
    bits: ClassVar[int]

    __slots__ = ()

    def __init__(self, value: int = 0, name: str | None = None) -> None:
        super().__init__(value, name)

    def _validate(self, value: Any) -> int:
        number = operator.index(value)
        limit = 1 << (self.bits - 1)
        if not -limit <= number < limit:
            msg = f"{number} is out of range for {self.kind.name}"
            raise FormatError(msg)
        return number


class ByteTag(_IntegralTag):
    """A signed 8-bit integer."""

    kind = TagKind.BYTE
    bits = 8

    __slots__ = ()

    @classmethod
    def read_payload(cls, reader: TagReader, name: str | None) -> ByteTag:
        return cls(reader.read_byte(), name)

    def write_payload(self, writer: TagWriter) -> None:
        writer.write_byte(self._value)


class ShortTag(_IntegralTag):
    """A signed 16-bit integer."""

    kind = TagKind.SHORT
    bits = 16

    __slots__ = ()

    @classmethod
    def read_payload(cls, reader: TagReader, name: str | None) -> ShortTag:
        return cls(reader.read_short(), name)

    def write_payload(self, writer: TagWriter) -> None:
        writer.write_short(self._value)


class IntTag(_IntegralTag):
    """A signed 32-bit integer."""

    kind = TagKind.INT
    bits = 32

    __slots__ = ()

    @classmethod
    def read_payload(cls, reader: TagReader, name: str | None) -> IntTag:
        return cls(reader.read_int(), name)

    def write_payload(self, writer: TagWriter) -> None:
        writer.write_int(self._value)


class LongTag(_IntegralTag):
    """A signed 64-bit integer."""

    kind = TagKind.LONG
    bits = 64

    __slots__ = ()

    @classmethod
    def read_payload(cls, reader: TagReader, name: str | None) -> LongTag:
        return cls(reader.read_long(), name)

    def write_payload(self, writer: TagWriter) -> None:
        writer.write_long(self._value)


class FloatTag(_ValueTag[float]):
    """A single precision float - assigned values are rounded to single precision."""

    kind = TagKind.FLOAT

    __slots__ = ()

    def __init__(self, value: float = 0.0, name: str | None = None) -> None:
        super().__init__(value, name)

    def _validate(self, value: Any) -> float:
        try:
            return _FLOAT.unpack(_FLOAT.pack(float(value)))[0]
        except OverflowError:
            msg = f"{value} is out of range for FLOAT"
            raise FormatError(msg) from None

    @classmethod
    def read_payload(cls, reader: TagReader, name: str | None) -> FloatTag:
        return cls(reader.read_float(), name)

    def write_payload(self, writer: TagWriter) -> None:
        writer.write_float(self._value)


class DoubleTag(_ValueTag[float]):
    """A double precision float."""

    kind = TagKind.DOUBLE

    __slots__ = ()

    def __init__(self, value: float = 0.0, name: str | None = None) -> None:
        super().__init__(value, name)

    def _validate(self, value: Any) -> float:
        return float(value)

    @classmethod
    def read_payload(cls, reader: TagReader, name: str | None) -> DoubleTag:
        return cls(reader.read_double(), name)

    def write_payload(self, writer: TagWriter) -> None:
        writer.write_double(self._value)


class StringTag(_ValueTag[str]):
    """A UTF-8 string."""

    kind = TagKind.STRING

    __slots__ = ()

    def __init__(self, value: str = "", name: str | None = None) -> None:
        super().__init__(value, name)

    def _validate(self, value: Any) -> str:
        if not isinstance(value, str):
            msg = f"Expected a string, got {value!r}"
            raise TypeError(msg)
        return value

    @classmethod
    def read_payload(cls, reader: TagReader, name: str | None) -> StringTag:
        return cls(reader.read_string(), name)

    def write_payload(self, writer: TagWriter) -> None:
        writer.write_string(self._value)

    def describe(self) -> str:
        return f'StringTag{self._quoted_name()}: "{self._value}"'


class ByteArrayTag(_ValueTag[bytearray]):
    """An array of signed bytes - held as a bytearray of their unsigned values."""

    kind = TagKind.BYTE_ARRAY

    __slots__ = ()

    def __init__(
        self,
        value: bytes | bytearray | Iterable[int] = b"",
        name: str | None = None,
    ) -> None:
        super().__init__(value, name)  # type: ignore[arg-type]

    def _validate(self, value: Any) -> bytearray:
        return bytearray(value)

    @classmethod
    def read_payload(cls, reader: TagReader, name: str | None) -> ByteArrayTag:
        size = reader.read_length("ByteArray")
        return cls(reader.read_exact(size), name)

    def write_payload(self, writer: TagWriter) -> None:
        writer.write_length(len(self._value))
        writer.write(self._value)

    def json_value(self) -> str:
        return self._value.hex().upper()

    def describe(self) -> str:
        signed = (b - 256 if b > 127 else b for b in self._value)  # noqa: PLR2004
        return f"ByteArrayTag{self._quoted_name()}: [{', '.join(map(str, signed))}]"

    def _copy(self) -> ByteArrayTag:
        return ByteArrayTag(bytearray(self._value), self._name)

    def __repr__(self) -> str:
        return f"ByteArrayTag({bytes(self._value)!r}{self._name_repr()})"


class IntArrayTag(_ValueTag[list[int]]):
    """An array of signed 32-bit integers."""

    kind = TagKind.INT_ARRAY

    __slots__ = ()

    def __init__(self, value: Iterable[int] = (), name: str | None = None) -> None:
        super().__init__(value, name)  # type: ignore[arg-type]

    def _validate(self, value: Any) -> list[int]:
        numbers = [operator.index(v) for v in value]
        for number in numbers:
            if not -(1 << 31) <= number < (1 << 31):
                msg = f"{number} is out of range for an IntArray element"
                raise FormatError(msg)
        return numbers

    @classmethod
    def read_payload(cls, reader: TagReader, name: str | None) -> IntArrayTag:
        size = reader.read_length("IntArray")
        return cls(reader.read_int_array(size), name)

    def write_payload(self, writer: TagWriter) -> None:
        writer.write_length(len(self._value))
        writer.write_int_array(self._value)

    def json_value(self) -> list[int]:
        return list(self._value)

    def describe(self) -> str:
        return f"IntArrayTag{self._quoted_name()}: [{', '.join(map(str, self._value))}]"

    def _copy(self) -> IntArrayTag:
        return IntArrayTag(list(self._value), self._name)


class ListTag(Tag, MutableSequence[Tag]):
    """An ordered sequence of unnamed tags that all share one element kind.

    The element kind is fixed when the list is created, even if the list is empty.
    """

    kind = TagKind.LIST

    __slots__ = ("_element_kind", "_items")

    def __init__(
        self,
        element_kind: TagKind,
        tags: Iterable[Tag] = (),
        name: str | None = None,
    ) -> None:
        super().__init__(name)
        self._element_kind = TagKind(element_kind)
        self._items: list[Tag] = []
        self.extend(tags)

    @classmethod
    def of(cls, element_kind: TagKind, values: Iterable[Any], name: str | None = None) -> ListTag:
        """Create a list by wrapping each value in a tag of the given element kind."""
        tag_class = TagKind(element_kind).tag_class
        if not issubclass(tag_class, _ValueTag):
            msg = f"Cannot create a list of {element_kind.name} from plain values"
            raise UnsupportedOperationError(msg)
        return cls(element_kind, (tag_class(v) for v in values), name)

    @property
    def element_kind(self) -> TagKind:
        """The kind of every element of this list."""
        return self._element_kind

    def payloads(self) -> list[Any]:
        """Return the values held by the elements of a list of scalars or arrays."""
        if not issubclass(self._element_kind.tag_class, _ValueTag):
            msg = f"A list of {self._element_kind.name} has no plain values"
            raise UnsupportedOperationError(msg)
        return [tag.value for tag in self._items]  # type: ignore[attr-defined]

    def extend_from(self, other: ListTag) -> None:
        """Append copies of the elements of another list with the same element kind."""
        if other._element_kind is not self._element_kind:
            msg = (
                f"{self._element_kind.name} required, "
                f"given list of {other._element_kind.name}"
            )
            raise FormatError(msg, other)
        self._items.extend(tag.clone() for tag in other._items)

    def _check(self, tag: Tag) -> Tag:
        if not isinstance(tag, Tag):
            msg = f"Expected a tag, got {tag!r}"
            raise TypeError(msg)
        if tag.name is not None:
            msg = f'Tags in lists must be unnamed; given tag had name "{tag.name}"'
            raise FormatError(msg, tag)
        if self._element_kind is TagKind.END:
            msg = "Cannot add tags to a list of End"
            raise FormatError(msg, tag)
        if tag.kind is not self._element_kind:
            msg = f"{self._element_kind.name} required, given {tag.kind.name}"
            raise FormatError(msg, tag)
        return tag

    @overload
    def __getitem__(self, index: int) -> Tag: ...

    @overload
    def __getitem__(self, index: slice) -> list[Tag]: ...

    def __getitem__(self, index: int | slice) -> Tag | list[Tag]:
        return self._items[index]

    @overload
    def __setitem__(self, index: int, value: Tag) -> None: ...

    @overload
    def __setitem__(self, index: slice, value: Iterable[Tag]) -> None: ...

    def __setitem__(self, index: int | slice, value: Any) -> None:
        if isinstance(index, slice):
            self._items[index] = [self._check(t) for t in value]
        else:
            self._items[index] = self._check(value)

    def __delitem__(self, index: int | slice) -> None:
        del self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Tag]:
        return iter(self._items)

    def insert(self, index: int, value: Tag) -> None:
        """Insert a tag before the given index."""
        self._items.insert(index, self._check(value))

    @classmethod
    def read_payload(cls, reader: TagReader, name: str | None) -> ListTag:
        element_kind = reader.read_kind()
        count = reader.read_length("List")
        if element_kind is TagKind.END and count:
            msg = f"A list of End must be empty, got {count} elements"
            raise FormatError(msg)
        tag = cls(element_kind, name=name)
        element_class = element_kind.tag_class
        with reader.nested():
            # elements are decoded one by one so a forged count cannot preallocate
            for _ in range(count):
                tag._items.append(element_class.read_payload(reader, None))
        return tag

    def write_payload(self, writer: TagWriter) -> None:
        writer.write_kind(self._element_kind)
        writer.write_length(len(self._items))
        for tag in self._items:
            tag.write_payload(writer)

    def json_value(self) -> list[Any]:
        return [tag.json_value() for tag in self._items]

    def describe(self) -> str:
        body = ",\n".join(tag.describe() for tag in self._items)
        header = f"ListTag of {self._element_kind.name}{self._quoted_name()}"
        return f"{header}: [\n{indent_lines(body)}\n]" if body else f"{header}: []"

    def _copy(self) -> ListTag:
        copy = ListTag(self._element_kind, name=self._name)
        copy._items = [tag.clone() for tag in self._items]
        return copy

    def _same_value(self, other: ListTag) -> bool:
        return self._element_kind is other._element_kind and self._items == other._items

    def __repr__(self) -> str:
        return f"ListTag(TagKind.{self._element_kind.name}, {self._items!r}{self._name_repr()})"


class CompoundTag(Tag, MutableMapping[str, Tag]):
    """A mapping of uniquely named child tags.

    Assigning `compound[name] = tag` stores the tag itself when it already has that name, and a
    copy named after the key otherwise, so a tag taken from a list or another compound is never
    renamed in place. Assigning to an existing name replaces the old child. Children are written
    under their keys.
    """

    kind = TagKind.COMPOUND

    __slots__ = ("_tags",)

    def __init__(
        self,
        tags: Iterable[Tag] | Mapping[str, Tag] = (),
        name: str | None = None,
    ) -> None:
        super().__init__(name)
        self._tags: dict[str, Tag] = {}
        if isinstance(tags, Mapping):
            for key, tag in tags.items():
                self[key] = tag
        else:
            self.add(*tags)

    def add(self, *tags: Tag) -> None:
        """Add named tags, replacing any children with the same names."""
        for tag in tags:
            if not isinstance(tag, Tag):
                msg = f"Expected a tag, got {tag!r}"
                raise TypeError(msg)
            if tag.name is None:
                msg = "Tags in compounds must be named"
                raise FormatError(msg, tag)
            self[tag.name] = tag

    def update_from(self, other: CompoundTag) -> None:
        """Add copies of the children of another compound."""
        for key, tag in other._tags.items():
            self._tags[key] = tag.clone(key)

    def find(self, name: str, kind: TagKind) -> Tag:
        """Return the child with the given name, which must have the given kind."""
        tag = self._tags.get(name)
        if tag is None:
            msg = f'No tag with the name "{name}"'
            raise FormatError(msg, self)
        if tag.kind is not kind:
            msg = f'"{name}" is {tag.kind.name} instead of {kind.name}'
            raise FormatError(msg, tag)
        return tag

    def _get_value(self, name: str, kind: TagKind) -> Any:
        if name not in self._tags:
            return None
        return self.find(name, kind).value  # type: ignore[attr-defined]

    def _set_value(self, name: str, kind: TagKind, value: Any) -> None:
        if value is None:
            self._tags.pop(name, None)
        elif (tag := self._tags.get(name)) is not None and tag.kind is kind:
            tag.value = value  # type: ignore[attr-defined]
        else:
            self[name] = kind.tag_class(value, name)  # type: ignore[call-arg]

    def get_byte(self, name: str) -> int | None:
        """Return the value of a Byte child, or None if there is none."""
        return self._get_value(name, TagKind.BYTE)

    def get_short(self, name: str) -> int | None:
        """Return the value of a Short child, or None if there is none."""
        return self._get_value(name, TagKind.SHORT)

    def get_int(self, name: str) -> int | None:
        """Return the value of an Int child, or None if there is none."""
        return self._get_value(name, TagKind.INT)

    def get_long(self, name: str) -> int | None:
        """Return the value of a Long child, or None if there is none."""
        return self._get_value(name, TagKind.LONG)

    def get_float(self, name: str) -> float | None:
        """Return the value of a Float child, or None if there is none."""
        return self._get_value(name, TagKind.FLOAT)

    def get_double(self, name: str) -> float | None:
        """Return the value of a Double child, or None if there is none."""
        return self._get_value(name, TagKind.DOUBLE)

    def get_string(self, name: str) -> str | None:
        """Return the value of a String child, or None if there is none."""
        return self._get_value(name, TagKind.STRING)

    def get_byte_array(self, name: str) -> bytearray | None:
        """Return the value of a ByteArray child, or None if there is none."""
        return self._get_value(name, TagKind.BYTE_ARRAY)

    def get_int_array(self, name: str) -> list[int] | None:
        """Return the value of an IntArray child, or None if there is none."""
        return self._get_value(name, TagKind.INT_ARRAY)

    def get_list(self, name: str) -> ListTag | None:
        """Return a List child, or None if there is none."""
        if name not in self._tags:
            return None
        return cast("ListTag", self.find(name, TagKind.LIST))

    def get_compound(self, name: str) -> CompoundTag | None:
        """Return a Compound child, or None if there is none."""
        if name not in self._tags:
            return None
        return cast("CompoundTag", self.find(name, TagKind.COMPOUND))

    def set_byte(self, name: str, value: int | None) -> None:
        """Set a Byte child - None removes it."""
        self._set_value(name, TagKind.BYTE, value)

    def set_short(self, name: str, value: int | None) -> None:
        """Set a Short child - None removes it."""
        self._set_value(name, TagKind.SHORT, value)

    def set_int(self, name: str, value: int | None) -> None:
        """Set an Int child - None removes it."""
        self._set_value(name, TagKind.INT, value)

    def set_long(self, name: str, value: int | None) -> None:
        """Set a Long child - None removes it."""
        self._set_value(name, TagKind.LONG, value)

    def set_float(self, name: str, value: float | None) -> None:
        """Set a Float child - None removes it."""
        self._set_value(name, TagKind.FLOAT, value)

    def set_double(self, name: str, value: float | None) -> None:
        """Set a Double child - None removes it."""
        self._set_value(name, TagKind.DOUBLE, value)

    def set_string(self, name: str, value: str | None) -> None:
        """Set a String child - None removes it."""
        self._set_value(name, TagKind.STRING, value)

    def set_byte_array(self, name: str, value: bytes | bytearray | None) -> None:
        """Set a ByteArray child - None removes it."""
        self._set_value(name, TagKind.BYTE_ARRAY, value)

    def set_int_array(self, name: str, value: Iterable[int] | None) -> None:
        """Set an IntArray child - None removes it."""
        self._set_value(name, TagKind.INT_ARRAY, value)

    def set_float_list(self, name: str, *values: float) -> ListTag:
        """Append values to a List of Float child, creating it if needed."""
        return self._extend_list(name, TagKind.FLOAT, values)

    def set_double_list(self, name: str, *values: float) -> ListTag:
        """Append values to a List of Double child, creating it if needed."""
        return self._extend_list(name, TagKind.DOUBLE, values)

    def _extend_list(self, name: str, kind: TagKind, values: Iterable[Any]) -> ListTag:
        if (tag := self.get_list(name)) is None:
            tag = self.create_list(name, kind)
        tag.extend(kind.tag_class(v) for v in values)  # type: ignore[call-arg]
        return tag

    def create_list(self, name: str, element_kind: TagKind) -> ListTag:
        """Add an empty list with the given element kind, replacing any child with that name."""
        tag = ListTag(element_kind, name=name)
        self[name] = tag
        return tag

    def create_compound(self, name: str) -> CompoundTag:
        """Add an empty compound, replacing any child with that name."""
        tag = CompoundTag(name=name)
        self[name] = tag
        return tag

    def __getitem__(self, name: str) -> Tag:
        return self._tags[name]

    def __setitem__(self, name: str, tag: Tag) -> None:
        if not isinstance(tag, Tag):
            msg = f"Expected a tag, got {tag!r}"
            raise TypeError(msg)
        if tag.kind is TagKind.END:
            msg = "Cannot add the End tag to a compound"
            raise FormatError(msg, tag)
        if tag.name != name:
            tag = tag.clone(name)
        self._tags[name] = tag

    def __delitem__(self, name: str) -> None:
        del self._tags[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __contains__(self, name: object) -> bool:
        return name in self._tags

    @classmethod
    def read_payload(cls, reader: TagReader, name: str | None) -> CompoundTag:
        tag = cls(name=name)
        with reader.nested():
            while (kind := reader.read_kind()) is not TagKind.END:
                child_name = reader.read_string()
                tag._tags[child_name] = kind.tag_class.read_payload(reader, child_name)
        return tag

    def write_payload(self, writer: TagWriter) -> None:
        for key, tag in self._tags.items():
            writer.write_tag(tag, key)
        writer.write_kind(TagKind.END)

    def json_value(self) -> dict[str, Any]:
        return {key: self._tags[key].json_value() for key in sorted(self._tags)}

    def describe(self) -> str:
        body = ",\n".join(self._tags[key].describe() for key in sorted(self._tags))
        header = f"CompoundTag{self._quoted_name()}"
        return f"{header}: {{\n{indent_lines(body)}\n}}" if body else f"{header}: {{}}"

    def _copy(self) -> CompoundTag:
        copy = CompoundTag(name=self._name)
        copy._tags = {key: tag.clone() for key, tag in self._tags.items()}
        return copy

    def _same_value(self, other: CompoundTag) -> bool:
        return self._tags == other._tags

    def __repr__(self) -> str:
        return f"CompoundTag({self._tags!r}{self._name_repr()})"
