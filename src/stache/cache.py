"""Parsed-template caches.

An `Environment` memoizes token trees by ``template + ":" + ":".join(tags)``
so the same text parsed under different delimiters is cached separately.
Caching never changes rendered output, only how often templates are parsed.

Any object with ``get(key)``, ``set(key, tokens)`` and ``clear()`` can be
installed as ``Environment.cache``.

Thread-Safety:
Reads are plain dict reads. Writes take a lock and insert only if the key
is absent, so two threads that parse the same template concurrently store
one tree. Redundant parses are harmless because token trees are immutable.

"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from stache._types import Token
from stache.utils.constants import CACHE_KEY_SEPARATOR

TokenTree = tuple[Token, ...]


@runtime_checkable
class CacheProtocol(Protocol):
    def get(self, key: str) -> TokenTree | None: ...

    def set(self, key: str, tokens: TokenTree) -> None: ...

    def clear(self) -> None: ...


def make_cache_key(source: str, tags: Sequence[str]) -> str:
    """Cache key for source parsed under tags."""
    return source + CACHE_KEY_SEPARATOR + CACHE_KEY_SEPARATOR.join(tags)


class TemplateCache:
    """Unbounded in-memory cache of token trees.

    Entries are never evicted; `clear()` empties the cache.

    Example:
            >>> cache = TemplateCache()
            >>> cache.set("key", ())
            >>> cache.get("key")
            ()
            >>> cache.info()
            {'size': 1, 'hits': 1, 'misses': 0}
    """

    __slots__ = ("_entries", "_hits", "_lock", "_misses")

    def __init__(self) -> None:
        self._entries: dict[str, TokenTree] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> TokenTree | None:
        tokens = self._entries.get(key)
        if tokens is None:
            self._misses += 1
        else:
            self._hits += 1
        return tokens

    def set(self, key: str, tokens: TokenTree) -> None:
        with self._lock:
            self._entries.setdefault(key, tokens)

    def clear(self) -> None:
        with self._lock:
            self._entries = {}
            self._hits = 0
            self._misses = 0

    def info(self) -> dict[str, int]:
        """Return size and hit/miss counters."""
        return {"size": len(self._entries), "hits": self._hits, "misses": self._misses}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


class NullCache:
    """A cache that stores nothing. Installed when caching is disabled."""

    __slots__ = ()

    def get(self, key: str) -> TokenTree | None:
        return None

    def set(self, key: str, tokens: TokenTree) -> None:
        pass

    def clear(self) -> None:
        pass

    def info(self) -> dict[str, int]:
        return {"size": 0, "hits": 0, "misses": 0}

    def __len__(self) -> int:
        return 0
