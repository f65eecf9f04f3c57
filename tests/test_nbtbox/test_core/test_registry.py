import pytest

from nbtbox._internal._utils import full_class_name
from nbtbox.common.exceptions import NotRegistered
from nbtbox.core.kind import TagKind
from nbtbox.core.registry import SchemaRegistry
from nbtbox.core.schema import Field
from nbtbox.core.schema import FieldShape
from nbtbox.core.schema import Schema
from nbtbox.core.schema import nested
from nbtbox.core.schema import scalar
from nbtbox.core.schema import scalar_array
from tests.mapping_utils import ITEM_SCHEMA
from tests.mapping_utils import POSITION_SCHEMA
from tests.mapping_utils import REGISTRY
from tests.mapping_utils import Entity
from tests.mapping_utils import Item
from tests.mapping_utils import Position


class SpecialItem(Item):
    pass


def test_schema_lookup_walks_the_mro():
    assert REGISTRY.get_schema(Item) is ITEM_SCHEMA
    assert REGISTRY.get_schema(SpecialItem) is ITEM_SCHEMA
    assert REGISTRY.has_schema(SpecialItem)
    assert not REGISTRY.has_schema(int)


def test_declared_schemas_are_found():
    assert REGISTRY.get_schema(Entity) is Entity.nbt_schema
    assert SchemaRegistry().get_schema(Entity) is Entity.nbt_schema


def test_registered_schemas_take_priority_over_declared_ones():
    override = Schema(type=Entity, fields=[scalar("Name", TagKind.STRING, attribute="name")])
    assert SchemaRegistry(schemas=[override]).get_schema(Entity) is override


def test_merging_registries():
    position = Schema(type=Position, fields=[])
    merged = SchemaRegistry(registries=[REGISTRY], schemas=[position])
    assert merged.get_schema(Item) is ITEM_SCHEMA
    assert merged.get_schema(Position) is position
    assert REGISTRY.get_schema(Position) is POSITION_SCHEMA
    assert len(merged) == 2
    assert set(merged) == {ITEM_SCHEMA, position}


def test_lookup_by_name():
    assert REGISTRY.get_schema_by_name(full_class_name(Item)) is ITEM_SCHEMA
    with pytest.raises(NotRegistered) as exc_info:
        REGISTRY.get_schema_by_name("missing.Type")
    assert repr(exc_info.value) == "No schema found with name 'missing.Type'."


def test_registering_something_other_than_a_schema_fails():
    with pytest.raises(TypeError):
        SchemaRegistry(schemas=[Item])


def test_schema_fields_must_be_unique():
    with pytest.raises(ValueError, match="Duplicate field 'id'"):
        Schema(type=Item, fields=[scalar("id", TagKind.STRING), scalar("id", TagKind.INT)])


def test_scalar_fields_need_a_scalar_kind():
    with pytest.raises(ValueError, match="must have a scalar kind"):
        scalar("x", TagKind.COMPOUND)
    with pytest.raises(ValueError, match="must have a scalar kind"):
        scalar_array("x", TagKind.LIST)
    with pytest.raises(ValueError, match="must have an item type"):
        Field(name="x", shape=FieldShape.OBJECT)


def test_field_accessors():
    field = scalar(
        "Count",
        TagKind.BYTE,
        getter=lambda item: item.count * 2,
        setter=lambda item, value: setattr(item, "count", value // 2),
    )
    item = Item(count=3)
    assert field.get(item) == 6
    field.set(item, 10)
    assert item.count == 5
    assert scalar("id", TagKind.STRING).get(Item(id="x")) == "x"


def test_field_tag_kinds():
    assert scalar("x", TagKind.LONG).tag_kind is TagKind.LONG
    assert nested("x", Position).tag_kind is TagKind.COMPOUND
    assert scalar_array("x", TagKind.BYTE).tag_kind is TagKind.BYTE_ARRAY
    assert scalar_array("x", TagKind.INT).tag_kind is TagKind.INT_ARRAY
    assert scalar_array("x", TagKind.STRING).tag_kind is TagKind.LIST


def test_schema_create():
    assert POSITION_SCHEMA.create() == Position()
    assert Schema(type=Position, fields=[], factory=lambda: Position(1, 2, 3)).create() == Position(
        1, 2, 3
    )
