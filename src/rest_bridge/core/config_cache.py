# Copyright 2024-2026 The rest-bridge Authors
# SPDX-License-Identifier: Apache-2.0

"""
Bounded cache of client configurations, keyed by destination address.

Concurrent callers targeting the same address share one configuration
instead of racing to mutate a single shared client. The cache holds at most
``capacity`` entries and evicts the least recently used one when full.
Entries may also disappear at any time (``reclaim``, or a configuration
whose client has been closed); the next lookup simply rebuilds them.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import structlog

from rest_bridge.core.client_config import ClientConfiguration, ConfigurationFactory
from rest_bridge.core.models import ConfigurationError

logger = structlog.get_logger(__name__)

DEFAULT_CAPACITY = 10


@dataclass
class CacheStatistics:
    """Usage counters since the last ``start()``."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    reclaims: int = 0


class ClientConfigCache:
    """
    Thread-safe LRU cache of ``ClientConfiguration`` objects.

    An evicted configuration is retired: closed at once when idle, or when
    the last ``lease()`` on it ends. Configurations taken with plain
    ``get()`` are not tracked, so an eviction may close them under their
    holder; callers that send requests use ``lease()``. ``reclaim()`` never
    closes, and ``stop()`` closes everything.
    """

    def __init__(self, factory: ConfigurationFactory, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"Cache capacity must be at least 1, got {capacity}")
        self._factory = factory
        self._capacity = capacity
        self._entries: OrderedDict[str, ClientConfiguration] = OrderedDict()
        self._lock = threading.Lock()
        self._stats = CacheStatistics()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def statistics(self) -> CacheStatistics:
        with self._lock:
            return CacheStatistics(**vars(self._stats))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, address: object) -> bool:
        with self._lock:
            return address in self._entries

    def start(self) -> None:
        with self._lock:
            self._stats = CacheStatistics()

    def stop(self) -> None:
        """Close and drop every cached configuration."""
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()
        for configuration in entries:
            configuration.close()
        logger.debug("bridge.cache_cleared", released=len(entries))

    def get(self, address: str) -> ClientConfiguration:
        """
        Return the configuration for ``address``, creating it on a miss.

        Raises:
            ConfigurationError: The factory failed; nothing is cached.
        """
        return self._lookup(address, lease=False)

    @contextmanager
    def lease(self, address: str) -> Iterator[ClientConfiguration]:
        """
        Hold the configuration for ``address`` for the duration of one call.

        An entry evicted while leased is closed when its last lease ends.
        """
        configuration = self._lookup(address, lease=True)
        try:
            yield configuration
        finally:
            configuration.release()

    def _lookup(self, address: str, *, lease: bool) -> ClientConfiguration:
        evicted: list[ClientConfiguration] = []
        with self._lock:
            configuration = self._entries.get(address)
            if configuration is not None and configuration.closed:
                del self._entries[address]
                self._stats.reclaims += 1
                configuration = None

            if configuration is not None:
                self._entries.move_to_end(address)
                self._stats.hits += 1
                logger.debug("bridge.cache_hit", address=address)
            else:
                self._stats.misses += 1
                try:
                    configuration = self._factory.create(address)
                except ConfigurationError:
                    raise
                except Exception as e:
                    raise ConfigurationError(
                        f"Cannot create client configuration for '{address}': {e}"
                    ) from e

                self._entries[address] = configuration
                while len(self._entries) > self._capacity:
                    evicted_address, old = self._entries.popitem(last=False)
                    evicted.append(old)
                    self._stats.evictions += 1
                    logger.debug("bridge.cache_evicted", address=evicted_address)

                logger.debug("bridge.cache_miss", address=address, size=len(self._entries))

            if lease:
                configuration.acquire()

        for old in evicted:
            old.retire()
        return configuration

    def reclaim(self, address: str | None = None) -> int:
        """
        Drop ``address`` (or every entry) without closing it.

        Callers still holding a reclaimed configuration keep using it; the
        next ``get`` builds a fresh one. Returns the number of entries dropped.
        """
        with self._lock:
            if address is None:
                dropped = len(self._entries)
                self._entries.clear()
            else:
                dropped = 1 if self._entries.pop(address, None) is not None else 0
            self._stats.reclaims += dropped
        return dropped
