"""
CollectorContext - per-run registry of plain values and collectors.

Validation steps publish values under a name, feed incremental data into
collectors while the document is validated, and read finalized results once
the run is over.

Example:
    from collector_context import CollectorContext, ReducingCollector

    context = CollectorContext.get_instance()
    context.reset()
    context.add("count", ReducingCollector(0, lambda total, n: total + n))
    context.add("schema_version", "2020-12")

    for _ in range(3):
        context.combine_with_collector("count", 1)

    context.load_collectors()
    context.get("count")           # 3
    context.get("schema_version")  # "2020-12"
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional

from collector_context.config.settings import CollectorSettings
from collector_context.exceptions import (
    CollectorNotFoundError,
    CollectorsAlreadyLoadedError,
    NotACollectorError,
)
from collector_context.logger import slot_fields
from collector_context.slots import CollectorSlot, Slot, make_slot
from collector_context.thread_info import ThreadInfo

logger = logging.getLogger(__name__)

# Namespaced so the entry cannot collide with other users of ThreadInfo
COLLECTOR_CONTEXT_THREAD_LOCAL_KEY = "collector_context.CollectorKey"


class CollectorContext:
    """Named slot table holding plain values and collectors for one run.

    Instances are ordinary objects: the validation engine can create one and
    pass it through its call graph explicitly. Code that cannot receive it
    explicitly resolves the instance bound to the current thread with
    ``get_instance()``.

    Attributes:
        settings: CollectorSettings controlling strict mode and reloading.

    Thread Safety:
        Not thread-safe. One instance belongs to one thread at a time;
        ``get_instance()`` hands every thread its own instance.

    Lifecycle:
        add() -> combine_with_collector()* -> load_collectors() -> get()
        -> reset() before the thread runs another validation.
    """

    _default_settings: CollectorSettings = CollectorSettings()

    def __init__(self, settings: Optional[CollectorSettings] = None) -> None:
        self.settings = settings or self._default_settings
        self._slots: Dict[str, Slot] = {}
        self._results: Dict[str, Any] = {}
        self._loaded = False

    @classmethod
    def get_instance(cls) -> "CollectorContext":
        """Return the context bound to the current thread, creating it on first use.

        The same instance is returned for every call on one thread until the
        thread ends or ``ThreadInfo.clear()`` runs on it. Call ``reset()``
        before reusing it for another run.
        """
        context = ThreadInfo.get(COLLECTOR_CONTEXT_THREAD_LOCAL_KEY)
        if context is None:
            context = cls()
            ThreadInfo.set(COLLECTOR_CONTEXT_THREAD_LOCAL_KEY, context)
            logger.debug("Bound new CollectorContext to current thread")
        return context

    @classmethod
    def configure_defaults(cls, settings: CollectorSettings) -> None:
        """Set the settings used by contexts created without explicit settings."""
        cls._default_settings = settings

    def add(self, name: str, value: Any) -> None:
        """Register a plain value or a collector under ``name``.

        An existing slot with the same name is replaced, together with any
        result already loaded for it.

        Args:
            name: Slot name.
            value: A collector (anything with ``combine`` and ``finalize``) or
                any other value, which is stored and returned unchanged.
        """
        slot = make_slot(name, value)
        self._slots[name] = slot
        self._results.pop(name, None)
        kind = "collector" if isinstance(slot, CollectorSlot) else "plain"
        logger.debug(
            f"Registered {kind} slot '{name}'",
            extra=slot_fields(slot_name=name, slot_kind=kind),
        )

    def get(self, name: str, default: Any = None) -> Any:
        """Return the data associated with ``name``.

        For a collector this is the collector itself until
        ``load_collectors()`` has run, and its finalized result afterwards.
        Plain values are always returned unchanged. Unknown names return
        ``default``.
        """
        if name in self._results:
            return self._results[name]
        slot = self._slots.get(name)
        if slot is None:
            return default
        return slot.value

    def combine_with_collector(self, name: str, data: Any) -> None:
        """Combine ``data`` into the collector registered under ``name``.

        Missing names and plain-value slots are ignored, so validation steps
        can contribute data whether or not anyone registered a collector for
        it. With ``settings.strict`` enabled they raise instead.

        Raises:
            CollectorNotFoundError: strict mode only, ``name`` is not registered.
            NotACollectorError: strict mode only, ``name`` holds a plain value.
        """
        slot = self._slots.get(name)
        if isinstance(slot, CollectorSlot):
            slot.collector.combine(data)
            return

        if self.settings.strict:
            if slot is None:
                raise CollectorNotFoundError(name, available=list(self._slots))
            raise NotACollectorError(name, value_type=type(slot.value).__name__)

    def load_collectors(self) -> None:
        """Finalize every collector and store its result under the same name.

        Plain values are left untouched. Calling this again before
        ``reset()`` re-runs every ``finalize()`` and overwrites the previous
        results, unless ``settings.allow_reload`` is disabled.

        Raises:
            CollectorsAlreadyLoadedError: reloading is disabled and collectors
                were already loaded since the last reset.
        """
        if self._loaded:
            if not self.settings.allow_reload:
                raise CollectorsAlreadyLoadedError()
            logger.warning(
                "load_collectors() called again before reset(); "
                "finalize() will run a second time for every collector",
                extra=slot_fields(reload=True),
            )

        count = 0
        for name, slot in list(self._slots.items()):
            if isinstance(slot, CollectorSlot):
                self._results[name] = slot.collector.finalize()
                count += 1

        self._loaded = True
        logger.debug(
            f"Loaded {count} collectors from {len(self._slots)} slots",
            extra=slot_fields(collectors=count, slots=len(self._slots)),
        )

    def reset(self) -> None:
        """Clear every slot and loaded result.

        The instance stays bound to its thread. Call this before starting a
        new validation run on a reused thread.
        """
        cleared = len(self._slots)
        self._slots = {}
        self._results = {}
        self._loaded = False
        logger.debug("CollectorContext reset", extra=slot_fields(slots_cleared=cleared))

    @property
    def loaded(self) -> bool:
        """True once ``load_collectors()`` has run since the last reset."""
        return self._loaded

    def is_collector(self, name: str) -> bool:
        """Return True if ``name`` holds a collector."""
        return isinstance(self._slots.get(name), CollectorSlot)

    def names(self) -> List[str]:
        """Sorted list of registered slot names."""
        return sorted(self._slots)

    def results(self) -> Dict[str, Any]:
        """Copy of the finalized results, keyed by collector name."""
        return dict(self._results)

    def __contains__(self, name: object) -> bool:
        return name in self._slots

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def summary(self) -> str:
        """Return a summary string of registered slots.

        Example:
            >>> print(context.summary())
            CollectorContext (2 slots, loaded):
              - count [collector]
              - schema_version [plain]
        """
        if not self._slots:
            return "CollectorContext: No slots registered"

        state = "loaded" if self._loaded else "open"
        lines = [f"CollectorContext ({len(self._slots)} slots, {state}):"]
        for name in sorted(self._slots):
            kind = "collector" if self.is_collector(name) else "plain"
            lines.append(f"  - {name} [{kind}]")

        return "\n".join(lines)
