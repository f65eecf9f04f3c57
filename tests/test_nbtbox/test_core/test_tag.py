import copy
import pickle
import struct

import pytest

from nbtbox.common.exceptions import FormatError
from nbtbox.common.exceptions import UnsupportedOperationError
from nbtbox.core.kind import TagKind
from nbtbox.core.tag import END
from nbtbox.core.tag import TAG_CLASSES
from nbtbox.core.tag import ByteArrayTag
from nbtbox.core.tag import ByteTag
from nbtbox.core.tag import CompoundTag
from nbtbox.core.tag import DoubleTag
from nbtbox.core.tag import EndTag
from nbtbox.core.tag import FloatTag
from nbtbox.core.tag import IntArrayTag
from nbtbox.core.tag import IntTag
from nbtbox.core.tag import ListTag
from nbtbox.core.tag import LongTag
from nbtbox.core.tag import ShortTag
from nbtbox.core.tag import StringTag


def test_every_kind_has_a_tag_class():
    assert set(TAG_CLASSES) == set(TagKind)
    for kind in TagKind:
        assert kind.tag_class.kind is kind


def test_kind_lookup_by_id():
    assert TagKind.from_id(7) is TagKind.BYTE_ARRAY
    assert TagKind.BYTE_ARRAY.type_name == "bytearray"
    assert TagKind.INT_ARRAY.type_name == "intarray"
    with pytest.raises(FormatError, match="Unknown tag kind id 12"):
        TagKind.from_id(12)


@pytest.mark.parametrize(
    ("tag_class", "low", "high"),
    [
        (ByteTag, -(2**7), 2**7 - 1),
        (ShortTag, -(2**15), 2**15 - 1),
        (IntTag, -(2**31), 2**31 - 1),
        (LongTag, -(2**63), 2**63 - 1),
    ],
)
def test_integral_tags_check_their_range(tag_class, low, high):
    assert tag_class(low).value == low
    assert tag_class(high).value == high
    with pytest.raises(FormatError, match="out of range"):
        tag_class(low - 1)
    tag = tag_class(0)
    with pytest.raises(FormatError, match="out of range"):
        tag.value = high + 1
    assert tag.value == 0


def test_float_tags_are_rounded_to_single_precision():
    assert FloatTag(0.1).value == struct.unpack(">f", struct.pack(">f", 0.1))[0]
    assert FloatTag(0.1).value != 0.1
    assert DoubleTag(0.1).value == 0.1
    with pytest.raises(FormatError):
        FloatTag(1e300)


def test_int_array_elements_are_checked():
    assert IntArrayTag([-(2**31), 2**31 - 1]).value == [-(2**31), 2**31 - 1]
    with pytest.raises(FormatError):
        IntArrayTag([2**31])


def test_string_tags_require_strings():
    with pytest.raises(TypeError):
        StringTag(b"bytes")


def test_list_rejects_a_mismatched_kind():
    tags = ListTag(TagKind.INT, [IntTag(1)])
    string = StringTag("x")
    with pytest.raises(FormatError, match="INT required, given STRING") as exc_info:
        tags.append(string)
    assert exc_info.value.tags == [string]
    assert exc_info.value.malformed == (string,)
    assert list(tags) == [IntTag(1)]


def test_list_rejects_named_tags():
    tags = ListTag(TagKind.INT)
    with pytest.raises(FormatError, match='given tag had name "x"'):
        tags.append(IntTag(1, "x"))
    assert len(tags) == 0


def test_list_of_end_stays_empty():
    tags = ListTag(TagKind.END)
    with pytest.raises(FormatError):
        tags.append(END)
    assert tags.element_kind is TagKind.END


def test_list_sequence_operations():
    tags = ListTag.of(TagKind.INT, [1, 2, 3])
    tags.insert(0, IntTag(0))
    tags[1] = IntTag(10)
    tags[2:3] = [IntTag(20), IntTag(21)]
    del tags[-1]
    assert tags.payloads() == [0, 10, 20, 21]
    assert tags.pop().value == 21
    tags.remove(IntTag(0))
    assert tags.payloads() == [10, 20]
    with pytest.raises(FormatError):
        tags[0] = ByteTag(1)
    with pytest.raises(FormatError):
        tags[0:1] = [IntTag(1), ByteTag(1)]
    assert tags.payloads() == [10, 20]


def test_list_of_containers_has_no_plain_values():
    with pytest.raises(UnsupportedOperationError):
        ListTag.of(TagKind.COMPOUND, [{}])
    with pytest.raises(UnsupportedOperationError):
        ListTag(TagKind.COMPOUND).payloads()


def test_list_extend_from_copies_elements():
    source = ListTag.of(TagKind.SHORT, [1, 2])
    target = ListTag.of(TagKind.SHORT, [0])
    target.extend_from(source)
    source[0].value = 100
    assert target.payloads() == [0, 1, 2]
    with pytest.raises(FormatError, match="SHORT required, given list of INT"):
        target.extend_from(ListTag(TagKind.INT))


def test_compound_last_write_wins():
    compound = CompoundTag()
    compound["x"] = IntTag(1)
    compound["x"] = StringTag("y")
    assert len(compound) == 1
    assert compound["x"] == StringTag("y", "x")
    assert compound["x"].name == "x"


def test_compound_assignment_never_renames_the_given_tag():
    elements = ListTag(TagKind.INT, [IntTag(1)])
    compound = CompoundTag()
    compound["x"] = elements[0]
    assert elements[0].name is None
    assert compound["x"] == IntTag(1, "x")
    compound["y"] = compound["x"]
    assert compound["x"].name == "x"
    assert compound["y"] == IntTag(1, "y")
    named = IntTag(2, "z")
    compound["z"] = named
    assert compound["z"] is named


def test_compound_add_requires_names():
    compound = CompoundTag()
    compound.add(IntTag(1, "a"), IntTag(2, "b"), IntTag(3, "a"))
    assert list(compound) == ["a", "b"]
    assert compound.get_int("a") == 3
    with pytest.raises(FormatError, match="must be named"):
        compound.add(IntTag(1))


def test_compound_rejects_end():
    with pytest.raises(FormatError):
        CompoundTag()["end"] = END


def test_compound_typed_getters():
    compound = CompoundTag([IntTag(1, "i"), StringTag("s", "s")])
    assert compound.get_int("i") == 1
    assert compound.get_string("s") == "s"
    assert compound.get_int("missing") is None
    assert compound.get_list("missing") is None
    with pytest.raises(FormatError, match='"s" is STRING instead of INT'):
        compound.get_int("s")
    with pytest.raises(FormatError, match='No tag with the name "missing"'):
        compound.find("missing", TagKind.INT)


def test_compound_typed_setters():
    compound = CompoundTag()
    compound.set_short("n", 5)
    tag = compound["n"]
    compound.set_short("n", 6)
    assert compound["n"] is tag
    assert tag.value == 6
    compound.set_int("n", 7)
    assert compound["n"] == IntTag(7, "n")
    compound.set_int("n", None)
    assert "n" not in compound
    compound.set_byte_array("b", b"\x01\x02")
    assert compound.get_byte_array("b") == bytearray(b"\x01\x02")
    compound.set_int_array("a", range(3))
    assert compound.get_int_array("a") == [0, 1, 2]


def test_compound_number_lists():
    compound = CompoundTag()
    compound.set_double_list("Pos", 1.0, 2.0)
    compound.set_double_list("Pos", 3.0)
    compound.set_float_list("Rotation", 90.0, 0.5)
    assert compound.get_list("Pos").payloads() == [1.0, 2.0, 3.0]
    assert compound.get_list("Rotation").element_kind is TagKind.FLOAT


def test_compound_create_children():
    compound = CompoundTag()
    compound.create_compound("c").set_int("x", 1)
    compound.create_list("l", TagKind.STRING).append(StringTag("a"))
    assert compound.get_compound("c").get_int("x") == 1
    assert compound.get_list("l").payloads() == ["a"]


def test_compound_update_from_copies_children():
    source = CompoundTag([ListTag.of(TagKind.INT, [1], "l")])
    target = CompoundTag([IntTag(0, "i")])
    target.update_from(source)
    source.get_list("l").append(IntTag(2))
    assert target.get_list("l").payloads() == [1]
    assert set(target) == {"i", "l"}


def test_clone_is_deep():
    original = CompoundTag(
        [
            ListTag(TagKind.COMPOUND, [CompoundTag([IntArrayTag([1], "a")])], "l"),
            ByteArrayTag(b"\x00", "b"),
        ],
        name="root",
    )
    clone = original.clone()
    assert clone == original
    clone.get_list("l")[0].get_int_array("a").append(2)
    clone.get_byte_array("b")[0] = 1
    assert original.get_list("l")[0].get_int_array("a") == [1]
    assert original.get_byte_array("b") == bytearray(b"\x00")
    assert clone != original


def test_clone_can_rename():
    tag = IntTag(1, "a")
    assert tag.clone("b") == IntTag(1, "b")
    assert tag.clone(None).name is None
    assert tag.name == "a"


def test_equality_is_structural():
    assert IntTag(1, "a") == IntTag(1, "a")
    assert IntTag(1, "a") != IntTag(1, "b")
    assert IntTag(1, "a") != IntTag(2, "a")
    assert IntTag(1, "a") != LongTag(1, "a")
    assert ListTag(TagKind.INT) != ListTag(TagKind.LONG)
    assert IntTag(1, "a").same_name(StringTag("x", "a"))


def test_tags_are_unhashable():
    with pytest.raises(TypeError):
        hash(IntTag(1))
    with pytest.raises(TypeError):
        hash(CompoundTag())


def test_end_is_a_singleton():
    with pytest.raises(UnsupportedOperationError):
        EndTag()
    assert END.clone() is END
    assert END.clone("named") is END
    assert copy.deepcopy(END) is END
    assert pickle.loads(pickle.dumps(END)) is END  # noqa: S301
    assert END.name is None
    with pytest.raises(UnsupportedOperationError):
        END.name = "x"
    with pytest.raises(UnsupportedOperationError):
        END.json_value()


def test_describe():
    compound = CompoundTag(
        [IntTag(1, "a"), ListTag.of(TagKind.STRING, ["x"], "b"), ByteArrayTag(b"\x01\xff", "c")],
        name="root",
    )
    assert str(IntTag(5, "x")) == 'IntTag "x": 5'
    assert str(IntTag(5)) == "IntTag: 5"
    assert str(compound) == (
        'CompoundTag "root": {\n'
        '\tIntTag "a": 1,\n'
        '\tListTag of STRING "b": [\n'
        '\t\tStringTag: "x"\n'
        "\t],\n"
        '\tByteArrayTag "c": [1, -1]\n'
        "}"
    )
    assert str(ListTag(TagKind.INT)) == "ListTag of INT: []"
    assert str(CompoundTag()) == "CompoundTag: {}"


def test_repr():
    assert repr(IntTag(5, "x")) == "IntTag(5, name='x')"
    assert repr(ByteArrayTag(b"\x01")) == "ByteArrayTag(b'\\x01')"
    assert repr(ListTag.of(TagKind.BYTE, [1])) == "ListTag(TagKind.BYTE, [ByteTag(1)])"
    assert repr(END) == "END"
