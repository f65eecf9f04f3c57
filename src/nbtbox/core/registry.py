from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING
from typing import Any
from typing import TypeVar
from typing import cast

from nbtbox._internal._utils import full_class_name
from nbtbox.common.exceptions import NotRegistered
from nbtbox.common.exceptions import UnsupportedOperationError
from nbtbox.core.schema import Schema

if TYPE_CHECKING:
    from collections.abc import Iterator
    from collections.abc import Sequence

__all__ = ("SchemaRegistry",)

T = TypeVar("T")


class SchemaRegistry:
    """A registry of the schemas of mappable types.

    Types that declare a `nbt_schema` class attribute do not need to be registered. Schemas given
    explicitly take priority over those of merged registries. Lookups walk the MRO of a type and,
    at each class, prefer a registered schema to the one the class declares.
    """

    __slots__ = ("_schema_by_name", "_schema_by_type")

    def __init__(
        self,
        *,
        schemas: Sequence[Schema] | None = None,
        registries: Sequence[SchemaRegistry] | None = None,
    ) -> None:
        schema_by_type: dict[type[Any], Schema] = {}
        # later registries override earlier ones
        for reg in registries or ():
            schema_by_type.update(reg._schema_by_type)  # noqa: SLF001
        for schema in schemas or ():
            if not isinstance(schema, Schema):
                msg = f"Expected a Schema, got {schema!r}"
                raise TypeError(msg)
            schema_by_type[schema.type] = schema
        self._schema_by_type = schema_by_type
        self._schema_by_name = {full_class_name(t): s for t, s in schema_by_type.items()}

    def __iter__(self) -> Iterator[Schema]:
        return iter(self._schema_by_type.values())

    def __len__(self) -> int:
        return len(self._schema_by_type)

    def has_schema(self, cls: type[Any]) -> bool:
        """Check if a schema is known for the given type or its parent classes."""
        try:
            self.get_schema(cls)
        except UnsupportedOperationError:
            return False
        return True

    def get_schema(self, cls: type[T]) -> Schema[T]:
        """Get the schema of the given type or of the nearest parent class that has one."""
        return cast("Schema[T]", _infer_from_type(self._schema_by_type, cls))

    def get_schema_by_name(self, name: str) -> Schema:
        """Get a registered schema by the fully qualified name of its type."""
        if schema := self._schema_by_name.get(name):
            return schema
        msg = f"No schema found with name {name!r}."
        raise NotRegistered(msg)


def _infer_from_type(mapping: Mapping[type, Schema], cls: type) -> Schema:
    """Get the first schema that handles the given type or its parent classes."""
    for base in cls.mro():
        if schema := mapping.get(base):
            return schema
        if isinstance(schema := base.__dict__.get("nbt_schema"), Schema):
            return schema
    msg = f"No schema found for {full_class_name(cls)}."
    raise UnsupportedOperationError(msg)
