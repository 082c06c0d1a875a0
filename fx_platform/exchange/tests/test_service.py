"""Tests for CurrencyExchangeService, wired with MemoryCache and a memory-backed rates file."""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any

import pytest

from fx_platform.exchange.errors import (
    InvalidAmountError,
    InvalidCurrencyCodeError,
    NoExchangeDataAvailableError,
    NoPathFoundError,
    RateSourceUnavailableError,
)
from fx_platform.exchange.models import ConversionStep, ExchangeEdge
from fx_platform.exchange.rate_cache import RateCache
from fx_platform.exchange.rate_source import FileRateSource
from fx_platform.exchange.retrieval import RateRetrieval
from fx_platform.exchange.service import (
    CurrencyExchangeService,
    validate_amount,
    validate_currency_code,
)
from fx_platform.services.cache.memory_cache import MemoryCache
from fx_platform.services.filesystem.memory_filesystem import MemoryFileSystem
from fx_platform.services.logger.memory_logger import MemoryLogger
from fx_platform.services.metrics.memory_metrics import MemoryMetrics

# ── Stubs ─────────────────────────────────────────────────────────────────────

class _CountingFileSystem(MemoryFileSystem):
    """MemoryFileSystem that counts reads, i.e. rate source fetches."""

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        super().__init__(files)
        self.reads = 0

    def read(self, path: str) -> bytes:
        self.reads += 1
        return super().read(path)


class _CountingCache(MemoryCache):
    def __init__(self) -> None:
        super().__init__()
        self.accesses = 0

    def get(self, key: str) -> Any | None:
        self.accesses += 1
        return super().get(key)

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        self.accesses += 1
        super().set(key, value, ttl)


class _Harness:
    def __init__(self, rates: list[dict] | None) -> None:
        files = {} if rates is None else {"rates.json": json.dumps(rates).encode()}
        self.fs = _CountingFileSystem(files)
        self.cache = _CountingCache()
        self.log = MemoryLogger()
        self.metrics = MemoryMetrics()
        retrieval = RateRetrieval(
            RateCache(self.cache), FileRateSource(self.fs, "rates.json"), self.log, self.metrics
        )
        self.service = CurrencyExchangeService(retrieval, self.log, self.metrics)


def _rate(a: str, b: str, rate: str) -> dict:
    return {"from": a, "to": b, "rate": rate}


USD_EUR = _rate("USD", "EUR", "0.85")
EUR_GBP = _rate("EUR", "GBP", "0.9")

# ── Conversion scenarios ──────────────────────────────────────────────────────

def test_direct_conversion():
    steps = _Harness([USD_EUR]).service.convert("USD", "EUR", 100)
    assert steps == [ConversionStep("USD", "EUR", Decimal("85"))]


def test_indirect_conversion():
    steps = _Harness([USD_EUR, EUR_GBP]).service.convert("USD", "GBP", 100)
    assert steps == [
        ConversionStep("USD", "EUR", Decimal("85")),
        ConversionStep("EUR", "GBP", Decimal("76.5")),
    ]


def test_codes_are_case_insensitive():
    steps = _Harness([USD_EUR, EUR_GBP]).service.convert("usd", " gbp ", Decimal("100"))
    assert [(s.from_code, s.to_code) for s in steps] == [("USD", "EUR"), ("EUR", "GBP")]


def test_no_path_found():
    h = _Harness([USD_EUR])
    with pytest.raises(NoPathFoundError):
        h.service.convert("USD", "GBP", 100)
    assert h.metrics.counters["conversion_failure{code=NO_PATH_FOUND}"] == 1


def test_no_exchange_data_available():
    h = _Harness([])
    with pytest.raises(NoExchangeDataAvailableError):
        h.service.convert("USD", "EUR", 100)
    assert h.fs.reads == 1


def test_rate_source_unavailable_propagates():
    h = _Harness(None)
    with pytest.raises(RateSourceUnavailableError):
        h.service.convert("USD", "EUR", 100)


def test_negative_amount_fails_before_any_io():
    h = _Harness([USD_EUR])
    with pytest.raises(InvalidAmountError):
        h.service.convert("USD", "EUR", -5)
    assert h.cache.accesses == 0
    assert h.fs.reads == 0


@pytest.mark.parametrize("code", ["", "   ", "U$D", "12", None, "ÜSD"])
def test_invalid_currency_code_fails_before_any_io(code):
    h = _Harness([USD_EUR])
    with pytest.raises(InvalidCurrencyCodeError):
        h.service.convert(code, "EUR", 100)
    assert h.cache.accesses == 0
    assert h.fs.reads == 0


def test_convert_is_idempotent():
    h = _Harness([USD_EUR, EUR_GBP, _rate("USD", "CHF", "0.9"), _rate("CHF", "GBP", "0.88")])
    first = h.service.convert("USD", "GBP", "250.75")
    second = h.service.convert("USD", "GBP", "250.75")
    assert first == second
    assert h.fs.reads == 1


def test_same_currency_is_a_single_identity_step():
    h = _Harness([USD_EUR])
    assert h.service.convert("eur", "EUR", "42.5") == [
        ConversionStep("EUR", "EUR", Decimal("42.5"))
    ]


def test_same_currency_still_requires_exchange_data():
    with pytest.raises(NoExchangeDataAvailableError):
        _Harness([]).service.convert("USD", "USD", 1)


def test_same_currency_unknown_to_rates_has_no_path():
    h = _Harness([USD_EUR])
    with pytest.raises(NoPathFoundError):
        h.service.convert("zzz", "ZZZ", 5)
    assert h.metrics.counters["conversion_failure{code=NO_PATH_FOUND}"] == 1


def test_same_currency_only_on_rejected_edge_has_no_path():
    h = _Harness([USD_EUR, _rate("GBP", "CHF", "-1")])
    with pytest.raises(NoPathFoundError):
        h.service.convert("GBP", "GBP", 5)


def test_same_currency_known_only_as_destination():
    h = _Harness([USD_EUR])
    assert h.service.convert("EUR", "EUR", 1) == [ConversionStep("EUR", "EUR", Decimal("1"))]


def test_invalid_edges_are_skipped_and_logged():
    h = _Harness([_rate("USD", "GBP", "0"), USD_EUR, EUR_GBP])
    steps = h.service.convert("USD", "GBP", 100)

    assert [s.to_code for s in steps] == ["EUR", "GBP"]
    warnings = h.log.at_level("WARN")
    assert len(warnings) == 1
    assert warnings[0].ctx == {"from_currency": "USD", "to_currency": "GBP", "rate": "0"}
    assert h.metrics.counters["invalid_edge_rejected"] == 1


def test_success_metrics():
    h = _Harness([USD_EUR, EUR_GBP])
    h.service.convert("USD", "GBP", 1)
    assert h.metrics.counters["conversion_success"] == 1
    assert h.metrics.histograms["conversion_hops"] == [2]


def test_get_all_exchanges_and_currencies():
    h = _Harness([USD_EUR, EUR_GBP])
    assert h.service.get_all_exchanges() == [
        ExchangeEdge("USD", "EUR", Decimal("0.85")),
        ExchangeEdge("EUR", "GBP", Decimal("0.9")),
    ]
    assert [c.code for c in h.service.get_all_currencies()] == ["USD", "EUR", "GBP"]
    assert h.fs.reads == 1

# ── Validation helpers ────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "raw, expected",
    [(100, Decimal("100")), ("0.01", Decimal("0.01")), (Decimal("5"), Decimal("5")), (2.5, Decimal("2.5"))],
)
def test_validate_amount_accepts_positive_numbers(raw, expected):
    assert validate_amount(raw) == expected


@pytest.mark.parametrize("raw", [0, -5, "0", "-0.01", "abc", "", None, True, "NaN", "Infinity", [1]])
def test_validate_amount_rejects(raw):
    with pytest.raises(InvalidAmountError):
        validate_amount(raw)


def test_validate_currency_code_normalizes():
    assert validate_currency_code(" jpy ") == "JPY"
