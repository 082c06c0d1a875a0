"""Tests for cache-first retrieval with MemoryCache and a counting rate source."""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import patch

import pytest

from fx_platform.exchange.errors import RateSourceUnavailableError
from fx_platform.exchange.models import Currency, ExchangeEdge
from fx_platform.exchange.rate_cache import RateCache
from fx_platform.exchange.rate_source import RateSourceInterface
from fx_platform.exchange.retrieval import RateRetrieval
from fx_platform.services.cache.memory_cache import MemoryCache
from fx_platform.services.logger.memory_logger import MemoryLogger
from fx_platform.services.metrics.memory_metrics import MemoryMetrics

# ── Stub ──────────────────────────────────────────────────────────────────────

class _CountingSource(RateSourceInterface):
    def __init__(self, edges: list[ExchangeEdge] | None = None, error: Exception | None = None) -> None:
        self.edges = edges or []
        self.error = error
        self.calls = 0

    def fetch_all_exchanges(self) -> list[ExchangeEdge]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.edges)


EDGES = [
    ExchangeEdge("USD", "EUR", Decimal("0.85")),
    ExchangeEdge("EUR", "GBP", Decimal("0.9")),
]


def _retrieval(source: _CountingSource) -> tuple[RateRetrieval, RateCache, MemoryMetrics]:
    cache = RateCache(MemoryCache())
    metrics = MemoryMetrics()
    return RateRetrieval(cache, source, MemoryLogger(), metrics), cache, metrics

# ── get_all_currencies ────────────────────────────────────────────────────────

def test_currencies_from_currency_entry():
    source = _CountingSource(EDGES)
    retrieval, cache, metrics = _retrieval(source)
    cache.set_currencies([Currency("USD"), Currency("EUR")])

    assert retrieval.get_all_currencies() == [Currency("USD"), Currency("EUR")]
    assert source.calls == 0
    assert metrics.counters["rate_cache_hit{entry=currency}"] == 1


def test_currencies_fall_back_to_exchange_entry_without_source():
    source = _CountingSource(EDGES)
    retrieval, cache, _ = _retrieval(source)
    cache.set_exchanges(EDGES)

    result = retrieval.get_all_currencies()

    assert {c.code for c in result} == {"USD", "EUR", "GBP"}
    assert len(result) == 3
    assert source.calls == 0
    assert cache.get_currencies() == result


def test_empty_currency_entry_counts_as_miss():
    source = _CountingSource(EDGES)
    retrieval, cache, _ = _retrieval(source)
    cache.set_currencies([])
    cache.set_exchanges(EDGES)

    assert len(retrieval.get_all_currencies()) == 3
    assert source.calls == 0


def test_currencies_fall_through_to_source_and_fill_both_entries():
    source = _CountingSource(EDGES)
    retrieval, cache, _ = _retrieval(source)

    result = retrieval.get_all_currencies()

    assert [c.code for c in result] == ["USD", "EUR", "GBP"]
    assert source.calls == 1
    assert cache.get_exchanges() == EDGES
    assert cache.get_currencies() == result


def test_currencies_with_empty_source_are_empty():
    source = _CountingSource([])
    retrieval, _, _ = _retrieval(source)
    assert retrieval.get_all_currencies() == []
    assert source.calls == 1


def test_currency_entry_expiry_refills_from_warm_exchange_entry():
    source = _CountingSource(EDGES)
    retrieval, _, _ = _retrieval(source)
    with patch("fx_platform.services.cache.memory_cache.time") as mock_time:
        mock_time.monotonic.return_value = 0.0
        retrieval.get_all_currencies()
        mock_time.monotonic.return_value = 45.0  # currency expired, exchanges still warm
        retrieval.get_all_currencies()
    assert source.calls == 1

# ── get_all_exchanges ─────────────────────────────────────────────────────────

def test_exchanges_from_cache_skip_source():
    source = _CountingSource([])
    retrieval, cache, _ = _retrieval(source)
    cache.set_exchanges(EDGES)

    assert retrieval.get_all_exchanges() == EDGES
    assert source.calls == 0


def test_exchanges_miss_reads_source_and_populates_cache():
    source = _CountingSource(EDGES)
    retrieval, cache, metrics = _retrieval(source)

    assert retrieval.get_all_exchanges() == EDGES
    assert retrieval.get_all_exchanges() == EDGES
    assert source.calls == 1
    assert metrics.counters["rate_source_fetch"] == 1
    assert metrics.counters["rate_cache_miss{entry=currencyExchange}"] == 1
    assert metrics.counters["rate_cache_hit{entry=currencyExchange}"] == 1


def test_empty_source_result_is_cached_but_still_refetched():
    source = _CountingSource([])
    retrieval, cache, _ = _retrieval(source)

    assert retrieval.get_all_exchanges() == []
    assert cache.get_exchanges() == []
    # an empty entry is not a hit
    retrieval.get_all_exchanges()
    assert source.calls == 2


def test_exchange_entry_refetched_after_ttl():
    source = _CountingSource(EDGES)
    retrieval, _, _ = _retrieval(source)
    with patch("fx_platform.services.cache.memory_cache.time") as mock_time:
        mock_time.monotonic.return_value = 0.0
        retrieval.get_all_exchanges()
        mock_time.monotonic.return_value = 59.0
        retrieval.get_all_exchanges()
        assert source.calls == 1
        mock_time.monotonic.return_value = 60.0
        retrieval.get_all_exchanges()
    assert source.calls == 2


def test_source_failure_propagates_and_caches_nothing():
    source = _CountingSource(error=RateSourceUnavailableError("rates service down"))
    retrieval, cache, _ = _retrieval(source)

    with pytest.raises(RateSourceUnavailableError, match="rates service down"):
        retrieval.get_all_currencies()
    assert cache.get_exchanges() is None
    assert cache.get_currencies() is None
