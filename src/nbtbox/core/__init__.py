from nbtbox.core.codec import TagReader
from nbtbox.core.codec import TagWriter
from nbtbox.core.codec import decode
from nbtbox.core.codec import decode_bytes
from nbtbox.core.codec import decode_chunks
from nbtbox.core.codec import encode
from nbtbox.core.codec import encode_bytes
from nbtbox.core.compression import Compression
from nbtbox.core.compression import decode_compressed
from nbtbox.core.compression import dump_file
from nbtbox.core.compression import dump_file_async
from nbtbox.core.compression import encode_compressed
from nbtbox.core.compression import load_file
from nbtbox.core.compression import load_file_async
from nbtbox.core.compression import read_gzip
from nbtbox.core.compression import write_gzip
from nbtbox.core.kind import TagKind
from nbtbox.core.mapper import TagMapper
from nbtbox.core.projector import JsonProjector
from nbtbox.core.projector import project
from nbtbox.core.registry import SchemaRegistry
from nbtbox.core.schema import Field
from nbtbox.core.schema import FieldShape
from nbtbox.core.schema import Mappable
from nbtbox.core.schema import Schema
from nbtbox.core.schema import nested
from nbtbox.core.schema import object_array
from nbtbox.core.schema import scalar
from nbtbox.core.schema import scalar_array
from nbtbox.core.serializer import NbtSerializer
from nbtbox.core.serializer import SerializedData
from nbtbox.core.serializer import nbt_serializer
from nbtbox.core.tag import END
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
from nbtbox.core.tag import Tag

__all__ = (
    "END",
    "ByteArrayTag",
    "ByteTag",
    "CompoundTag",
    "Compression",
    "DoubleTag",
    "EndTag",
    "Field",
    "FieldShape",
    "FloatTag",
    "IntArrayTag",
    "IntTag",
    "JsonProjector",
    "ListTag",
    "LongTag",
    "Mappable",
    "NbtSerializer",
    "Schema",
    "SchemaRegistry",
    "SerializedData",
    "ShortTag",
    "StringTag",
    "Tag",
    "TagKind",
    "TagMapper",
    "TagReader",
    "TagWriter",
    "decode",
    "decode_bytes",
    "decode_chunks",
    "decode_compressed",
    "dump_file",
    "dump_file_async",
    "encode",
    "encode_bytes",
    "encode_compressed",
    "load_file",
    "load_file_async",
    "nbt_serializer",
    "nested",
    "object_array",
    "project",
    "read_gzip",
    "scalar",
    "scalar_array",
    "write_gzip",
)
