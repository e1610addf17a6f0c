"""Dependency selectors declared by components in ``consumes``.

A tag is either a class or a string. Selectors say how many producers of a
tag a component expects:

- ``One(tag)``: exactly one producer. A bare tag means the same.
- ``Many(tag)``: zero or more producers, values collected in execution order.
- ``Satisfies(capability)``: producers whose produced class is a subclass of
  (or structurally satisfies) a capability class or runtime-checkable
  protocol. The first value produced is passed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeAlias

Tag: TypeAlias = type | str


def is_tag(value: Any) -> bool:
    return isinstance(value, type) or (isinstance(value, str) and bool(value))


def tag_name(tag: Tag | None) -> str:
    if tag is None:
        return "nothing"
    if isinstance(tag, type):
        return tag.__qualname__
    return repr(tag)


@dataclass(frozen=True)
class One:
    tag: Tag

    def matches(self, produced: Tag | None) -> bool:
        return produced is not None and produced == self.tag

    def __str__(self) -> str:
        return tag_name(self.tag)


@dataclass(frozen=True)
class Many:
    tag: Tag

    def matches(self, produced: Tag | None) -> bool:
        return produced is not None and produced == self.tag

    def __str__(self) -> str:
        return f"Many({tag_name(self.tag)})"


@dataclass(frozen=True)
class Satisfies:
    capability: type

    def matches(self, produced: Tag | None) -> bool:
        return isinstance(produced, type) and issubclass(produced, self.capability)

    def __str__(self) -> str:
        return f"Satisfies({tag_name(self.capability)})"


Selector: TypeAlias = One | Many | Satisfies


def as_selector(value: Any) -> Selector:
    """Coerce a ``consumes`` entry into a selector.

    Raises:
        TypeError: *value* is neither a selector nor a valid tag.
    """
    if isinstance(value, (One, Many)):
        if not is_tag(value.tag):
            raise TypeError(f"invalid tag {value.tag!r} in {type(value).__name__}")
        return value
    if isinstance(value, Satisfies):
        if not isinstance(value.capability, type):
            raise TypeError(f"capability must be a class, got {value.capability!r}")
        try:
            issubclass(object, value.capability)
        except TypeError as exc:
            # Protocols with data members, or not runtime_checkable.
            msg = f"capability {tag_name(value.capability)} does not support subclass checks: {exc}"
            raise TypeError(msg) from exc
        return value
    if is_tag(value):
        return One(value)
    raise TypeError(f"invalid dependency selector {value!r}")
