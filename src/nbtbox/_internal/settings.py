from collections.abc import Callable
from os import environ
from typing import TypeVar

T = TypeVar("T")


def make_setting(
    name: str,
    default: T,
    from_string: Callable[[str], T] = lambda x: x,
) -> Callable[[], T]:
    """Create a setting with a name, default value, and optional conversion function."""
    return lambda: from_string(environ[name]) if name in environ else default


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        msg = f"Expected a positive integer, got {value!r}"
        raise ValueError(msg)
    return number


def _compression_level(value: str) -> int:
    number = int(value)
    if not 0 <= number <= 9:  # noqa: PLR2004
        msg = f"Expected a compression level between 0 and 9, got {value!r}"
        raise ValueError(msg)
    return number


NBTBOX_MAX_DEPTH = make_setting("NBTBOX_MAX_DEPTH", 256, from_string=_positive_int)
"""The deepest nesting of List and Compound tags accepted when decoding."""

NBTBOX_READ_CHUNK_SIZE = make_setting("NBTBOX_READ_CHUNK_SIZE", 65536, from_string=_positive_int)
"""The largest number of bytes read at once for array and string payloads."""

NBTBOX_GZIP_LEVEL = make_setting("NBTBOX_GZIP_LEVEL", 9, from_string=_compression_level)
"""The compression level used when writing gzip or zlib data."""
