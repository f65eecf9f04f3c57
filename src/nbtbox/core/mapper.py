from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING
from typing import Any
from typing import TypeVar
from typing import cast

from nbtbox.common.exceptions import FormatError
from nbtbox.core.kind import TagKind
from nbtbox.core.registry import SchemaRegistry
from nbtbox.core.schema import FieldShape
from nbtbox.core.tag import ByteArrayTag
from nbtbox.core.tag import CompoundTag
from nbtbox.core.tag import IntArrayTag
from nbtbox.core.tag import ListTag

if TYPE_CHECKING:
    from nbtbox.core.schema import Field
    from nbtbox.core.schema import Schema
    from nbtbox.core.tag import Tag

__all__ = ("TagMapper",)

T = TypeVar("T")

_LOG = logging.getLogger(__name__)

_ARRAY_KINDS = {TagKind.BYTE: TagKind.BYTE_ARRAY, TagKind.INT: TagKind.INT_ARRAY}


class TagMapper:
    """Converts objects to compound tags and back according to their schemas."""

    __slots__ = ("_prefer_list", "_registry")

    def __init__(
        self,
        registry: SchemaRegistry | None = None,
        *,
        prefer_list: bool = False,
    ) -> None:
        self._registry = registry if registry is not None else SchemaRegistry()
        self._prefer_list = prefer_list

    @property
    def registry(self) -> SchemaRegistry:
        """The registry schemas are looked up in."""
        return self._registry

    @property
    def prefer_list(self) -> bool:
        """Whether byte and int arrays are written as lists instead of array tags."""
        return self._prefer_list

    def serialize(self, obj: Any, name: str | None = None) -> CompoundTag:
        """Convert an object to a compound.

        Fields are written in the order they are declared. A field whose value is None is
        omitted.
        """
        schema = self._registry.get_schema(type(obj))
        compound = CompoundTag(name=name)
        for field in schema.fields:
            if (value := field.get(obj)) is None:
                continue
            tag = self._encode_field(field, value)
            tag.name = field.name
            compound[field.name] = tag
        return compound

    def deserialize(
        self,
        compound: CompoundTag,
        cls: type[T],
        factory: Callable[[], T] | None = None,
    ) -> T:
        """Convert a compound to an object of the given type.

        The factory creates the object before its fields are assigned - it defaults to the one of
        the type's schema. Fields whose tag is absent keep the value given by the factory.
        """
        schema = self._registry.get_schema(cls)
        obj = factory() if factory is not None else schema.create()
        self._fill(compound, obj, schema)
        return obj

    def _fill(self, compound: CompoundTag, obj: Any, schema: Schema) -> None:
        for field in schema.fields:
            tag = compound.get(field.name)
            if tag is None:
                if not field.optional:
                    type_name = schema.type.__qualname__
                    msg = f'Required field "{field.name}" of {type_name} is missing'
                    raise FormatError(
                        msg,
                        compound,
                        field_name=field.name,
                        type_name=type_name,
                        expected=field.tag_kind,
                    )
                _LOG.debug("Optional field %r of %s is absent", field.name, schema.type)
                continue
            self._check_kind(field, tag, schema)
            field.set(obj, self._decode_field(field, tag, obj))

    def _encode_field(self, field: Field, value: Any) -> Tag:
        kind = field.kind
        match field.shape:
            case FieldShape.SCALAR:
                return kind.tag_class(value)  # type: ignore[union-attr,call-arg]
            case FieldShape.OBJECT:
                return self.serialize(value)
            case FieldShape.SCALAR_ARRAY if kind is TagKind.BYTE:
                data = _to_unsigned_bytes(value, field.name)
                if self._prefer_list:
                    return ListTag.of(kind, _to_signed_bytes(data))
                return ByteArrayTag(data)
            case FieldShape.SCALAR_ARRAY if kind is TagKind.INT and not self._prefer_list:
                return IntArrayTag(value)
            case FieldShape.SCALAR_ARRAY:
                return ListTag.of(kind, value)  # type: ignore[arg-type]
            case FieldShape.OBJECT_ARRAY:
                return ListTag(TagKind.COMPOUND, (self.serialize(v) for v in value))
        msg = f"Unknown field shape {field.shape!r}"
        raise ValueError(msg)

    def _check_kind(self, field: Field, tag: Tag, schema: Schema) -> None:
        expected = field.tag_kind
        actual = tag.kind
        if field.shape in (FieldShape.SCALAR_ARRAY, FieldShape.OBJECT_ARRAY):
            element_kind = field.kind or TagKind.COMPOUND
            if isinstance(tag, ListTag):
                # empty lists are often written with an element kind of End
                if not tag or tag.element_kind is element_kind:
                    return
                expected, actual = element_kind, tag.element_kind  # type: ignore[assignment]
            elif actual is _ARRAY_KINDS.get(element_kind):  # type: ignore[arg-type]
                return
        elif actual is expected:
            return
        type_name = schema.type.__qualname__
        msg = f'Field "{field.name}" of {type_name} is {actual.name} instead of {expected.name}'
        raise FormatError(
            msg,
            tag,
            field_name=field.name,
            type_name=type_name,
            expected=expected,
            actual=actual,
        )

    def _decode_field(self, field: Field, tag: Tag, parent: Any) -> Any:
        match field.shape:
            case FieldShape.SCALAR:
                return tag.value  # type: ignore[attr-defined]
            case FieldShape.OBJECT:
                return self._decode_object(field, tag, parent)  # type: ignore[arg-type]
            case FieldShape.SCALAR_ARRAY if isinstance(tag, ListTag):
                values = [t.value for t in tag]  # type: ignore[union-attr]
                if field.kind is TagKind.BYTE:
                    return _to_unsigned_bytes(values, field.name)
                return values
            case FieldShape.SCALAR_ARRAY if isinstance(tag, ByteArrayTag):
                return bytes(tag.value)
            case FieldShape.SCALAR_ARRAY:
                return list(tag.value)  # type: ignore[attr-defined]
            case FieldShape.OBJECT_ARRAY:
                items = cast("ListTag", tag)
                return [self._decode_object(field, t, parent) for t in items]
        msg = f"Unknown field shape {field.shape!r}"
        raise ValueError(msg)

    def _decode_object(self, field: Field, compound: CompoundTag, parent: Any) -> Any:
        schema = self._registry.get_schema(field.item_type)  # type: ignore[arg-type]
        obj = field.factory(parent) if field.factory is not None else schema.create()
        self._fill(compound, obj, schema)
        return obj


def _to_unsigned_bytes(values: Any, field_name: str) -> bytes:
    """Accept signed or unsigned byte values - anything else is out of range."""
    if isinstance(values, bytes | bytearray | memoryview):
        return bytes(values)
    data = bytearray()
    for value in values:
        if not -128 <= value <= 255:  # noqa: PLR2004
            msg = f'Field "{field_name}" holds {value}, which is out of range for a byte'
            raise FormatError(msg, field_name=field_name, expected=TagKind.BYTE)
        data.append(value & 0xFF)
    return bytes(data)


def _to_signed_bytes(data: bytes) -> list[int]:
    return [b - 256 if b > 127 else b for b in data]  # noqa: PLR2004
