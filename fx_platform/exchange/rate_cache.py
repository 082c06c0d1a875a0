"""Typed view over the two rate cache entries.

``currency`` holds the known currency codes, ``currencyExchange`` the known
exchange edges. Each expires on its own TTL. Values are stored in their JSON
shape (codes as strings, rates as decimal strings) so that any
``CacheInterface`` backend round-trips them without losing precision.
"""

from __future__ import annotations

from fx_platform.exchange.models import Currency, ExchangeEdge
from fx_platform.services.cache.interface import CacheInterface

CURRENCY_KEY = "currency"
EXCHANGE_KEY = "currencyExchange"

DEFAULT_CURRENCY_TTL = 30  # seconds
DEFAULT_EXCHANGE_TTL = 60  # seconds


class RateCache:
    """Two named, independently-expiring entries over a shared cache backend."""

    def __init__(
        self,
        cache: CacheInterface,
        currency_ttl: float = DEFAULT_CURRENCY_TTL,
        exchange_ttl: float = DEFAULT_EXCHANGE_TTL,
    ) -> None:
        self._cache = cache
        self.currency_ttl = currency_ttl
        self.exchange_ttl = exchange_ttl

    def get_currencies(self) -> list[Currency] | None:
        raw = self._cache.get(CURRENCY_KEY)
        if raw is None:
            return None
        return [Currency(code) for code in raw]

    def set_currencies(self, currencies: list[Currency]) -> None:
        self._cache.set(CURRENCY_KEY, [c.code for c in currencies], ttl=self.currency_ttl)

    def get_exchanges(self) -> list[ExchangeEdge] | None:
        raw = self._cache.get(EXCHANGE_KEY)
        if raw is None:
            return None
        return [ExchangeEdge.from_dict(item) for item in raw]

    def set_exchanges(self, edges: list[ExchangeEdge]) -> None:
        self._cache.set(EXCHANGE_KEY, [e.to_dict() for e in edges], ttl=self.exchange_ttl)
