"""
Collector protocol and base implementations.

A collector absorbs incremental data during a validation run through
``combine()`` and produces one aggregate result through ``finalize()``.
Anything exposing both methods is treated as a collector by
CollectorContext; everything else is stored as a plain value.

Example:
    counter = ReducingCollector(0, lambda total, n: total + n)
    counter.combine(1)
    counter.combine(2)
    counter.finalize()  # 3
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")
R = TypeVar("R", covariant=True)


@runtime_checkable
class Collector(Protocol[R]):
    """Structural type for accumulators stored in a CollectorContext."""

    def combine(self, data: Any) -> None:
        ...

    def finalize(self) -> R:
        ...


class AbstractCollector(ABC, Generic[T]):
    """Base class for collectors that only need to produce a result.

    ``combine()`` ignores its input by default; subclasses override it when
    they accept incremental data. ``finalize()`` must be implemented.
    """

    def combine(self, data: Any) -> None:
        pass

    @abstractmethod
    def finalize(self) -> T:
        """Return the aggregate result for the run."""


class ReducingCollector(AbstractCollector[T]):
    """Folds every combined item into an accumulated value.

    Args:
        initial: Starting value of the fold.
        reducer: ``reducer(accumulated, data)`` returning the new accumulated value.

    ``finalize()`` returns the current accumulated value and does not change
    it, so loading the same collector twice yields the same result.
    """

    def __init__(self, initial: T, reducer: Callable[[T, Any], T]) -> None:
        self.value = initial
        self._reducer = reducer

    def combine(self, data: Any) -> None:
        self.value = self._reducer(self.value, data)

    def finalize(self) -> T:
        return self.value

    def __repr__(self) -> str:
        return f"ReducingCollector(value={self.value!r})"
