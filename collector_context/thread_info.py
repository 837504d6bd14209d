"""
ThreadInfo - thread-scoped key/value store.

Each thread sees its own dictionary. Entries are created lazily on first
``set`` and disappear with the thread. Keys should be namespaced strings so
unrelated users of the store do not collide.

Example:
    ThreadInfo.set("myapp.RequestKey", request)
    ThreadInfo.get("myapp.RequestKey")
    ThreadInfo.remove("myapp.RequestKey")
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Optional

# Thread-local storage for per-thread dictionaries
_thread_storage = threading.local()


class ThreadInfo:
    """Per-thread key/value storage.

    Thread Safety:
        Each thread only ever touches its own dictionary, so no locking is
        needed. A value stored by one thread is never visible to another.
    """

    @staticmethod
    def _values() -> Dict[str, Any]:
        if not hasattr(_thread_storage, "values"):
            _thread_storage.values = {}
        return _thread_storage.values

    @classmethod
    def get(cls, key: str, default: Optional[Any] = None) -> Any:
        """Return the value bound to ``key`` on the current thread, or ``default``."""
        return cls._values().get(key, default)

    @classmethod
    def set(cls, key: str, value: Any) -> None:
        """Bind ``value`` to ``key`` on the current thread."""
        cls._values()[key] = value

    @classmethod
    def remove(cls, key: str) -> Any:
        """Unbind ``key`` on the current thread and return its old value, if any."""
        return cls._values().pop(key, None)

    @classmethod
    def clear(cls) -> None:
        """Drop every value bound on the current thread."""
        _thread_storage.values = {}
