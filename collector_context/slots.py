"""
Slot variants held by a CollectorContext.

A slot is either a PlainSlot, whose value is returned unchanged, or a
CollectorSlot, whose collector receives combined data and is finalized by
``load_collectors()``. The variant is decided once, when the value is
registered.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from collector_context.collector import Collector


@dataclass(frozen=True)
class PlainSlot:
    """Opaque value published by a validation step."""

    name: str
    value: Any


@dataclass(frozen=True)
class CollectorSlot:
    """Collector published by a validation step."""

    name: str
    collector: Collector[Any]

    @property
    def value(self) -> Any:
        return self.collector


Slot = Union[PlainSlot, CollectorSlot]


def is_collector(value: Any) -> bool:
    """Return True if ``value`` exposes the collector methods.

    Both attributes must be callable: a plain value that merely has fields
    named ``combine`` or ``finalize`` stays a plain value. Classes are excluded
    too, so a collector type registered by mistake is not called unbound.
    """
    if isinstance(value, type) or not isinstance(value, Collector):
        return False
    return callable(getattr(value, "combine", None)) and callable(
        getattr(value, "finalize", None)
    )


def make_slot(name: str, value: Any) -> Slot:
    """Classify ``value`` into the slot variant that will hold it."""
    if is_collector(value):
        return CollectorSlot(name=name, collector=value)
    return PlainSlot(name=name, value=value)
