# Copyright 2024-2026 The rest-bridge Authors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the client configuration cache."""

from __future__ import annotations

import threading
import time

import httpx
import pytest

from rest_bridge.core.client_config import ClientConfiguration, ConfigurationFactory
from rest_bridge.core.config_cache import ClientConfigCache
from rest_bridge.core.models import ConfigurationError, InvocationError


class CountingFactory(ConfigurationFactory):
    """Builds real configurations and counts how often it was asked to."""

    def __init__(self, delay: float = 0.0, fail_for: str | None = None) -> None:
        self.created: list[str] = []
        self._delay = delay
        self._fail_for = fail_for
        self._lock = threading.Lock()

    def create(self, address: str) -> ClientConfiguration:
        if address == self._fail_for:
            raise ValueError("malformed address")
        if self._delay:
            time.sleep(self._delay)
        with self._lock:
            self.created.append(address)
        return ClientConfiguration(
            address, transport=httpx.MockTransport(lambda req: httpx.Response(200))
        )


@pytest.fixture
def factory() -> CountingFactory:
    return CountingFactory()


class TestGet:
    def test_first_get_creates_once_then_reuses(self, factory: CountingFactory):
        cache = ClientConfigCache(factory, capacity=3)

        first = cache.get("https://a.example.com")
        second = cache.get("https://a.example.com")

        assert first is second
        assert factory.created == ["https://a.example.com"]
        assert first.address == "https://a.example.com"

    def test_distinct_addresses_get_distinct_configurations(self, factory: CountingFactory):
        cache = ClientConfigCache(factory, capacity=3)

        a = cache.get("https://a.example.com")
        b = cache.get("https://b.example.com")

        assert a is not b
        assert len(cache) == 2

    def test_statistics(self, factory: CountingFactory):
        cache = ClientConfigCache(factory, capacity=3)
        cache.get("https://a.example.com")
        cache.get("https://a.example.com")
        cache.get("https://b.example.com")

        stats = cache.statistics
        assert stats.misses == 2
        assert stats.hits == 1

        cache.start()
        assert cache.statistics.hits == 0
        assert cache.statistics.misses == 0

    def test_invalid_capacity(self, factory: CountingFactory):
        with pytest.raises(ValueError):
            ClientConfigCache(factory, capacity=0)


class TestEviction:
    def test_never_exceeds_capacity(self, factory: CountingFactory):
        cache = ClientConfigCache(factory, capacity=2)
        for i in range(5):
            cache.get(f"https://{i}.example.com")
            assert len(cache) <= 2
        assert cache.statistics.evictions == 3

    def test_evicts_least_recently_used(self, factory: CountingFactory):
        cache = ClientConfigCache(factory, capacity=2)
        cache.get("https://a.example.com")
        cache.get("https://b.example.com")
        # touch a so that b becomes the oldest
        cache.get("https://a.example.com")

        cache.get("https://c.example.com")

        assert "https://a.example.com" in cache
        assert "https://b.example.com" not in cache
        assert "https://c.example.com" in cache

    def test_evicted_entry_is_rebuilt(self, factory: CountingFactory):
        cache = ClientConfigCache(factory, capacity=1)
        first = cache.get("https://a.example.com")
        cache.get("https://b.example.com")

        again = cache.get("https://a.example.com")

        assert again is not first
        assert factory.created.count("https://a.example.com") == 2

    def test_idle_evicted_entry_is_closed(self, factory: CountingFactory):
        cache = ClientConfigCache(factory, capacity=1)
        first = cache.get("https://a.example.com")

        cache.get("https://b.example.com")

        assert first.closed

    def test_leased_entry_closed_when_lease_ends(self, factory: CountingFactory):
        cache = ClientConfigCache(factory, capacity=1)

        with cache.lease("https://a.example.com") as leased:
            cache.get("https://b.example.com")
            assert "https://a.example.com" not in cache
            assert not leased.closed

        assert leased.closed

    def test_lease_on_cached_entry_keeps_it_open(self, factory: CountingFactory):
        cache = ClientConfigCache(factory, capacity=2)

        with cache.lease("https://a.example.com") as leased:
            pass

        assert not leased.closed
        assert cache.get("https://a.example.com") is leased


class TestReclaim:
    def test_get_after_reclaim_reconstructs(self, factory: CountingFactory):
        cache = ClientConfigCache(factory, capacity=3)
        first = cache.get("https://a.example.com")

        assert cache.reclaim("https://a.example.com") == 1
        second = cache.get("https://a.example.com")

        assert second is not first
        assert not first.closed
        assert factory.created == ["https://a.example.com", "https://a.example.com"]

    def test_reclaim_all(self, factory: CountingFactory):
        cache = ClientConfigCache(factory, capacity=3)
        cache.get("https://a.example.com")
        cache.get("https://b.example.com")

        assert cache.reclaim() == 2
        assert len(cache) == 0
        assert cache.statistics.reclaims == 2

    def test_reclaim_unknown_address(self, factory: CountingFactory):
        cache = ClientConfigCache(factory)
        assert cache.reclaim("https://nowhere.example.com") == 0

    def test_closed_entry_is_treated_as_miss(self, factory: CountingFactory):
        cache = ClientConfigCache(factory, capacity=3)
        first = cache.get("https://a.example.com")
        first.close()

        second = cache.get("https://a.example.com")

        assert second is not first
        assert not second.closed


class TestLifecycle:
    def test_stop_closes_and_clears(self, factory: CountingFactory):
        cache = ClientConfigCache(factory, capacity=3)
        a = cache.get("https://a.example.com")
        b = cache.get("https://b.example.com")

        cache.stop()

        assert len(cache) == 0
        assert a.closed
        assert b.closed

    def test_send_after_stop_is_invocation_error(self, factory: CountingFactory):
        cache = ClientConfigCache(factory, capacity=3)
        configuration = cache.get("https://a.example.com")
        cache.stop()

        with pytest.raises(InvocationError, match="closed"):
            configuration.create_web_client().invoke("GET")


class TestErrors:
    def test_factory_failure_raises_configuration_error(self):
        cache = ClientConfigCache(CountingFactory(fail_for="bad"), capacity=3)

        with pytest.raises(ConfigurationError, match="bad"):
            cache.get("bad")

        assert "bad" not in cache
        assert len(cache) == 0

    def test_configuration_error_passes_through(self):
        class Failing(ConfigurationFactory):
            def create(self, address: str) -> ClientConfiguration:
                raise ConfigurationError("transport setup failed")

        cache = ClientConfigCache(Failing())
        with pytest.raises(ConfigurationError, match="transport setup failed"):
            cache.get("https://a.example.com")


class TestConcurrency:
    def test_racing_creators_share_one_configuration(self):
        factory = CountingFactory(delay=0.05)
        cache = ClientConfigCache(factory, capacity=3)
        barrier = threading.Barrier(8)
        results: list[ClientConfiguration] = []
        results_lock = threading.Lock()

        def worker() -> None:
            barrier.wait()
            configuration = cache.get("https://a.example.com")
            with results_lock:
                results.append(configuration)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert factory.created == ["https://a.example.com"]
        assert len(results) == 8
        assert all(r is results[0] for r in results)
