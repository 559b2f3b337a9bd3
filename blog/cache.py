"""
In-process content cache.

One ContentCache per memoized mapping (listing pages, entries, tag title
lists). Values live for the whole process: no expiry, no eviction. A restart
is the only invalidation.

Concurrent first requests for the same key are coalesced: the first caller
computes, the others wait for its result, so a key is computed once and
written once.
"""

import logging
import threading
from typing import Any, Callable, Dict, Hashable, Optional

logger = logging.getLogger(__name__)


class _InFlight:
    """A computation in progress that late callers can wait on."""

    def __init__(self):
        self.done = threading.Event()
        self.value: Any = None
        self.error: Optional[BaseException] = None


class ContentCache:
    """Thread-safe memo table with single-flight computation per key"""

    def __init__(self, name: str, max_entries: Optional[int] = None):
        self.name = name
        self.max_entries = max_entries
        self._values: Dict[Hashable, Any] = {}
        self._inflight: Dict[Hashable, _InFlight] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            return self._values.get(key, default)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._values

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)

    def get_or_compute(
        self,
        key: Hashable,
        compute: Callable[[], Any],
        store_if: Optional[Callable[[Any], bool]] = None
    ) -> Any:
        """
        Return the cached value for key, computing it on a miss.

        Args:
            key: cache key
            compute: zero-argument callable producing the value
            store_if: predicate deciding whether a computed value is memoized
                (defaults to always)

        Returns:
            The cached or freshly computed value. Callers that waited on
            another thread's computation get that same value even when it
            was not memoized.

        Raises:
            Whatever compute raises; failures are never cached.
        """
        with self._lock:
            if key in self._values:
                logger.debug(f"{self.name} cache hit: {key!r}")
                return self._values[key]
            call = self._inflight.get(key)
            leader = call is None
            if leader:
                call = _InFlight()
                self._inflight[key] = call

        if not leader:
            logger.debug(f"{self.name} cache waiting on in-flight computation: {key!r}")
            call.done.wait()
            if call.error is not None:
                raise call.error
            return call.value

        logger.debug(f"{self.name} cache miss: {key!r}")
        try:
            value = compute()
        except BaseException as e:
            call.error = e
            raise
        else:
            call.value = value
            if store_if is None or store_if(value):
                self._store(key, value)
            return value
        finally:
            with self._lock:
                self._inflight.pop(key, None)
            call.done.set()

    def _store(self, key: Hashable, value: Any) -> None:
        with self._lock:
            if (self.max_entries is not None
                    and key not in self._values
                    and len(self._values) >= self.max_entries):
                logger.warning(
                    f"{self.name} cache full ({self.max_entries} entries); "
                    f"serving {key!r} without memoizing it"
                )
                return
            self._values[key] = value
