"""Declarations of how objects map onto compound tags.

A [Schema][nbtbox.core.schema.Schema] lists the fields of a type in the order they are written.
Each [Field][nbtbox.core.schema.Field] says which tag the field becomes and how to read and write
the value on an object, so no introspection of the object is ever needed:

```python
@dataclass
class Point:
    x: int = 0
    y: int = 0

    nbt_schema: ClassVar[Schema[Point]]


Point.nbt_schema = Schema(
    type=Point,
    fields=[scalar("X", TagKind.INT, attribute="x"), scalar("Y", TagKind.INT, attribute="y")],
)
```
"""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Sequence
from enum import Enum
from typing import Any
from typing import ClassVar
from typing import Generic
from typing import Protocol
from typing import TypeVar

from nbtbox._internal._utils import frozenclass
from nbtbox.core.kind import TagKind

__all__ = (
    "Field",
    "FieldShape",
    "Mappable",
    "Schema",
    "nested",
    "object_array",
    "scalar",
    "scalar_array",
)

T = TypeVar("T")

Getter = Callable[[Any], Any]
"""Return the value of a field from an object."""
Setter = Callable[[Any, Any], None]
"""Assign the value of a field on an object."""
NestedFactory = Callable[[Any], Any]
"""Create a nested object given the object that encloses it."""


class FieldShape(Enum):
    """The shape of the value held by a field."""

    SCALAR = "scalar"
    """A number or string held in a single tag."""
    OBJECT = "object"
    """A mappable object held in a compound."""
    SCALAR_ARRAY = "scalar_array"
    """A sequence of numbers or strings held in an array or a list."""
    OBJECT_ARRAY = "object_array"
    """A sequence of mappable objects held in a list of compounds."""


@frozenclass
class Field:
    """A field of a mappable type."""

    name: str
    """The name of the tag holding the field."""
    shape: FieldShape
    """The shape of the field's value."""
    kind: TagKind | None = None
    """The kind of the scalar or of the array elements - None for object shapes."""
    attribute: str | None = None
    """The attribute holding the value if it differs from the name."""
    getter: Getter | None = None
    """Reads the value instead of the attribute."""
    setter: Setter | None = None
    """Writes the value instead of the attribute."""
    optional: bool = False
    """Whether the tag may be absent."""
    item_type: type[Any] | None = None
    """The mappable type of the object shapes."""
    factory: NestedFactory | None = None
    """Creates nested objects from the enclosing one - defaults to the nested type's schema."""

    def __post_init__(self) -> None:
        if self.shape in (FieldShape.SCALAR, FieldShape.SCALAR_ARRAY):
            if self.kind is None or not self.kind.is_scalar:
                msg = f"Field {self.name!r} must have a scalar kind, got {self.kind!r}"
                raise ValueError(msg)
        elif self.item_type is None:
            msg = f"Field {self.name!r} must have an item type"
            raise ValueError(msg)

    @property
    def tag_kind(self) -> TagKind:
        """The kind of the tag this field is written as by default."""
        match self.shape:
            case FieldShape.SCALAR:
                return self.kind  # type: ignore[return-value]
            case FieldShape.OBJECT:
                return TagKind.COMPOUND
            case FieldShape.SCALAR_ARRAY if self.kind is TagKind.BYTE:
                return TagKind.BYTE_ARRAY
            case FieldShape.SCALAR_ARRAY if self.kind is TagKind.INT:
                return TagKind.INT_ARRAY
            case _:
                return TagKind.LIST

    def get(self, obj: Any) -> Any:
        """Read the value of this field from an object."""
        if self.getter is not None:
            return self.getter(obj)
        return getattr(obj, self.attribute or self.name)

    def set(self, obj: Any, value: Any) -> None:
        """Write the value of this field on an object."""
        if self.setter is not None:
            self.setter(obj, value)
        else:
            setattr(obj, self.attribute or self.name, value)


@frozenclass
class Schema(Generic[T]):
    """The ordered fields of a mappable type."""

    type: type[T]
    """The mapped type."""
    fields: Sequence[Field]
    """The fields in the order they are written."""
    factory: Callable[[], T] | None = None
    """Creates an empty object - defaults to calling the type."""

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        seen: set[str] = set()
        for f in self.fields:
            if f.name in seen:
                msg = f"Duplicate field {f.name!r} in schema for {self.type.__qualname__}"
                raise ValueError(msg)
            seen.add(f.name)

    def create(self) -> T:
        """Create an empty object of the mapped type."""
        return self.factory() if self.factory is not None else self.type()


class Mappable(Protocol):
    """A type that declares its own schema."""

    nbt_schema: ClassVar[Schema]
    """The schema of the type."""


def scalar(
    name: str,
    kind: TagKind,
    *,
    attribute: str | None = None,
    optional: bool = False,
    getter: Getter | None = None,
    setter: Setter | None = None,
) -> Field:
    """Declare a field holding a single number or string."""
    return Field(
        name=name,
        shape=FieldShape.SCALAR,
        kind=kind,
        attribute=attribute,
        optional=optional,
        getter=getter,
        setter=setter,
    )


def nested(
    name: str,
    item_type: type[Any],
    *,
    factory: NestedFactory | None = None,
    attribute: str | None = None,
    optional: bool = False,
    getter: Getter | None = None,
    setter: Setter | None = None,
) -> Field:
    """Declare a field holding a mappable object."""
    return Field(
        name=name,
        shape=FieldShape.OBJECT,
        item_type=item_type,
        factory=factory,
        attribute=attribute,
        optional=optional,
        getter=getter,
        setter=setter,
    )


def scalar_array(
    name: str,
    kind: TagKind,
    *,
    attribute: str | None = None,
    optional: bool = False,
    getter: Getter | None = None,
    setter: Setter | None = None,
) -> Field:
    """Declare a field holding a sequence of numbers or strings.

    Byte sequences accept signed or unsigned values and always decode to `bytes`. Int sequences
    decode to a list.
    """
    return Field(
        name=name,
        shape=FieldShape.SCALAR_ARRAY,
        kind=kind,
        attribute=attribute,
        optional=optional,
        getter=getter,
        setter=setter,
    )


def object_array(
    name: str,
    item_type: type[Any],
    *,
    factory: NestedFactory | None = None,
    attribute: str | None = None,
    optional: bool = False,
    getter: Getter | None = None,
    setter: Setter | None = None,
) -> Field:
    """Declare a field holding a sequence of mappable objects."""
    return Field(
        name=name,
        shape=FieldShape.OBJECT_ARRAY,
        item_type=item_type,
        factory=factory,
        attribute=attribute,
        optional=optional,
        getter=getter,
        setter=setter,
    )
