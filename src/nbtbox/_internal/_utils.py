from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from dataclasses import field
from functools import wraps
from typing import Any
from typing import TypeVar
from typing import cast
from typing import dataclass_transform

T = TypeVar("T")
F = TypeVar("F", bound=Callable)

UNDEFINED = cast("Any", type("UNDEFINED", (), {"__repr__": lambda _: "UNDEFINED"})())
"""A sentinel for arguments that were not given, where None is a meaningful value."""


@dataclass_transform(frozen_default=True, kw_only_default=True, field_specifiers=(field,))
def frozenclass(cls: type[T] | None = None, /, **kwargs: Any) -> Any:
    """Create a dataclass that is frozen and keyword-only unless told otherwise."""
    kwargs.setdefault("frozen", True)
    kwargs.setdefault("kw_only", True)
    return dataclass(**kwargs) if cls is None else dataclass(**kwargs)(cls)


def full_class_name(cls: type) -> str:
    """Return the fully qualified name of a class."""
    return f"{cls.__module__}.{cls.__qualname__}"


def not_implemented(f: F) -> F:
    """Mark a method that subclasses must override - calling it raises NotImplementedError."""

    @wraps(f)
    def wrapper(obj: Any, *args: Any, **kwargs: Any) -> Any:
        msg = f"{type(obj).__name__} does not implement {f.__name__}"
        raise NotImplementedError(msg)

    return cast("F", wrapper)


def indent_lines(text: str, prefix: str = "\t") -> str:
    """Prefix every line of the given text."""
    return prefix + text.replace("\n", "\n" + prefix)
