from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional


@dataclass
class _Entry:
    value: Any
    stored_at: float = field(default_factory=time.monotonic)


class PageCache:
    """In-process cache of read results keyed by page path.

    Mutations call invalidate() with the page paths they affect; a path
    drops every key equal to it or nested under it (query strings included).
    """

    _lock = threading.Lock()
    _entries: Dict[str, _Entry] = {}
    ttl_seconds: float = 300.0

    @classmethod
    def get(cls, key: str) -> Optional[Any]:
        with cls._lock:
            entry = cls._entries.get(key)
            if entry is None:
                return None
            if time.monotonic() - entry.stored_at > cls.ttl_seconds:
                cls._entries.pop(key, None)
                return None
            return entry.value

    @classmethod
    def set(cls, key: str, value: Any) -> None:
        with cls._lock:
            cls._entries[key] = _Entry(value=value)

    @classmethod
    def get_or_load(cls, key: str, loader: Callable[[], Any]) -> Any:
        cached = cls.get(key)
        if cached is not None:
            return cached
        value = loader()
        cls.set(key, value)
        return value

    @classmethod
    def invalidate(cls, *paths: str) -> int:
        removed = 0
        with cls._lock:
            for key in list(cls._entries):
                if any(_matches(key, p) for p in paths):
                    del cls._entries[key]
                    removed += 1
        return removed

    @classmethod
    def clear(cls) -> None:
        with cls._lock:
            cls._entries.clear()

    @classmethod
    def keys(cls) -> Iterable[str]:
        with cls._lock:
            return list(cls._entries)


def _matches(key: str, path: str) -> bool:
    path = path.rstrip("/") or "/"
    return key == path or key.startswith(path + "/") or key.startswith(path + "?")
