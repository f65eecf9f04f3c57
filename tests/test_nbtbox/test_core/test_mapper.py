from dataclasses import replace
from typing import get_type_hints

import pytest

from nbtbox.common.exceptions import FormatError
from nbtbox.common.exceptions import UnsupportedOperationError
from nbtbox.core.codec import decode_bytes
from nbtbox.core.codec import encode_bytes
from nbtbox.core.kind import TagKind
from nbtbox.core.mapper import TagMapper
from nbtbox.core.tag import CompoundTag
from nbtbox.core.tag import IntTag
from nbtbox.core.tag import ListTag
from nbtbox.core.tag import ShortTag
from nbtbox.core.tag import StringTag
from tests.mapping_utils import REGISTRY
from tests.mapping_utils import Entity
from tests.mapping_utils import Item
from tests.mapping_utils import Position
from tests.mapping_utils import make_entity


@pytest.mark.parametrize("prefer_list", [False, True])
def test_round_trip(prefer_list):
    mapper = TagMapper(REGISTRY, prefer_list=prefer_list)
    entity = make_entity()
    compound = mapper.serialize(entity, name="")
    decoded = mapper.deserialize(decode_bytes(encode_bytes(compound)), Entity)
    assert decoded.custom_name == "unnamed"
    assert replace(decoded, custom_name=None) == entity
    assert isinstance(decoded.data, bytes)
    assert all(item.holder is decoded for item in decoded.inventory)


def test_fields_are_written_in_declared_order():
    compound = TagMapper(REGISTRY).serialize(make_entity())
    assert list(compound) == ["Name", "Health", "Pos", "Motion", "Data", "Sections", "Inventory"]
    assert compound.get_compound("Pos").get_double("Y") == 64.0
    assert compound.get_list("Inventory").element_kind is TagKind.COMPOUND
    assert [c.get_string("id") for c in compound.get_list("Inventory")] == [
        "stone",
        "dirt",
        "torch",
    ]


def test_byte_and_int_arrays_become_array_tags():
    compound = TagMapper(REGISTRY).serialize(make_entity())
    assert compound["Data"].kind is TagKind.BYTE_ARRAY
    assert compound.get_byte_array("Data") == bytearray(b"\x00\xff\x10")
    assert compound["Sections"].kind is TagKind.INT_ARRAY
    assert compound.get_list("Motion").element_kind is TagKind.DOUBLE


def test_byte_and_int_arrays_become_lists_if_preferred():
    compound = TagMapper(REGISTRY, prefer_list=True).serialize(make_entity())
    assert compound.get_list("Data").payloads() == [0, -1, 16]
    assert compound.get_list("Sections").payloads() == [1, -2, 3]


def test_absent_optional_fields_keep_their_defaults():
    decoded = TagMapper(REGISTRY).deserialize(
        CompoundTag([StringTag("Zed", "Name"), ShortTag(5, "Health")]),
        Entity,
    )
    assert decoded == Entity(name="Zed", health=5)


def test_empty_lists_of_any_kind_are_accepted():
    compound = TagMapper(REGISTRY).serialize(make_entity())
    compound["Motion"] = ListTag(TagKind.END)
    compound["Inventory"] = ListTag(TagKind.END)
    decoded = TagMapper(REGISTRY).deserialize(compound, Entity)
    assert decoded.motion == []
    assert decoded.inventory == []


def test_custom_factory():
    compound = TagMapper(REGISTRY).serialize(make_entity())
    decoded = TagMapper(REGISTRY).deserialize(compound, Entity, lambda: Entity(custom_name="x"))
    assert decoded.custom_name == "x"


def test_missing_required_field():
    compound = TagMapper(REGISTRY).serialize(make_entity())
    del compound["Health"]
    with pytest.raises(FormatError, match='Required field "Health" of Entity is missing') as exc:
        TagMapper(REGISTRY).deserialize(compound, Entity)
    assert exc.value.field_name == "Health"
    assert exc.value.type_name == "Entity"
    assert exc.value.expected is TagKind.SHORT
    assert exc.value.actual is None


def test_missing_required_field_of_nested_object():
    compound = TagMapper(REGISTRY).serialize(make_entity())
    del compound.get_list("Inventory")[1]["id"]
    with pytest.raises(FormatError, match='Required field "id" of Item is missing'):
        TagMapper(REGISTRY).deserialize(compound, Entity)


def test_field_of_the_wrong_kind():
    compound = TagMapper(REGISTRY).serialize(make_entity())
    compound.set_string("Health", "lots")
    with pytest.raises(FormatError, match='"Health" of Entity is STRING instead of SHORT') as exc:
        TagMapper(REGISTRY).deserialize(compound, Entity)
    assert exc.value.expected is TagKind.SHORT
    assert exc.value.actual is TagKind.STRING
    assert exc.value.tags == [compound["Health"]]


def test_list_field_of_the_wrong_element_kind():
    compound = TagMapper(REGISTRY).serialize(make_entity())
    compound["Inventory"] = ListTag.of(TagKind.INT, [1])
    with pytest.raises(FormatError, match="INT instead of COMPOUND") as exc:
        TagMapper(REGISTRY).deserialize(compound, Entity)
    assert exc.value.field_name == "Inventory"


def test_array_field_accepts_lists_and_rejects_other_kinds():
    mapper = TagMapper(REGISTRY)
    compound = mapper.serialize(make_entity())
    compound["Sections"] = ListTag.of(TagKind.INT, [7])
    assert mapper.deserialize(compound, Entity).sections == [7]
    compound["Sections"] = IntTag(7)
    with pytest.raises(FormatError, match="INT instead of INT_ARRAY"):
        mapper.deserialize(compound, Entity)


def test_types_without_a_schema_are_unsupported():
    with pytest.raises(UnsupportedOperationError, match="No schema found"):
        TagMapper().serialize(object())
    with pytest.raises(UnsupportedOperationError):
        TagMapper().deserialize(CompoundTag(), Position)


def test_declared_schemas_need_no_registry():
    mapper = TagMapper()
    entity = Entity(name="bare", health=1)
    assert mapper.deserialize(mapper.serialize(entity), Entity) == entity
    with pytest.raises(UnsupportedOperationError):
        mapper.serialize(replace(entity, inventory=[Item("stone")]))


@pytest.mark.parametrize("prefer_list", [False, True])
def test_byte_fields_accept_signed_and_unsigned_values(prefer_list):
    mapper = TagMapper(REGISTRY, prefer_list=prefer_list)
    entity = replace(make_entity(), data=[200, -1, 5])
    decoded = mapper.deserialize(mapper.serialize(entity), Entity)
    assert decoded.data == b"\xc8\xff\x05"


@pytest.mark.parametrize("prefer_list", [False, True])
def test_byte_fields_reject_values_out_of_range(prefer_list):
    mapper = TagMapper(REGISTRY, prefer_list=prefer_list)
    with pytest.raises(FormatError, match='"Data" holds 256') as exc_info:
        mapper.serialize(replace(make_entity(), data=[1, 256]))
    assert exc_info.value.field_name == "Data"


def test_mapper_signature():
    hints = get_type_hints(TagMapper.__init__)
    assert hints["return"] is type(None)
    assert hints["prefer_list"] is bool
