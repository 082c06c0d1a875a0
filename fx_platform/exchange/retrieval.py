"""Cache-first retrieval of currencies and exchange edges.

Lookup order for currencies:

1. ``currency`` cache entry
2. ``currencyExchange`` cache entry, projected onto its endpoint codes
3. the rate source (through ``get_all_exchanges``), projected the same way

Currencies are always a projection of edges; the rate source is never asked
for them directly. A warm edge entry therefore saves a source fetch when only
the currency entry has expired.

No cache lock is held while the rate source is called. Two requests missing
at once may both fetch; the later write wins.
"""

from __future__ import annotations

from fx_platform.exchange.models import Currency, ExchangeEdge, currencies_from_edges
from fx_platform.exchange.rate_cache import CURRENCY_KEY, EXCHANGE_KEY, RateCache
from fx_platform.exchange.rate_source import RateSourceInterface
from fx_platform.services.logger.interface import LoggingInterface
from fx_platform.services.metrics.interface import MetricsInterface


class RateRetrieval:
    def __init__(
        self,
        cache: RateCache,
        source: RateSourceInterface,
        log: LoggingInterface,
        metrics: MetricsInterface,
    ) -> None:
        self.cache = cache
        self.source = source
        self.log = log
        self.metrics = metrics

    def get_all_currencies(self) -> list[Currency]:
        currencies = self.cache.get_currencies()
        if currencies:
            self._hit(CURRENCY_KEY)
            return currencies
        self._miss(CURRENCY_KEY)

        edges = self.cache.get_exchanges()
        if edges:
            self._hit(EXCHANGE_KEY)
        else:
            edges = self.get_all_exchanges()

        currencies = currencies_from_edges(edges)
        self.cache.set_currencies(currencies)
        return currencies

    def get_all_exchanges(self) -> list[ExchangeEdge]:
        edges = self.cache.get_exchanges()
        if edges:
            self._hit(EXCHANGE_KEY)
            return edges
        self._miss(EXCHANGE_KEY)

        edges = self.source.fetch_all_exchanges()
        self.metrics.counter("rate_source_fetch")
        self.log.info("Fetched exchange rates from source", edges=len(edges))
        self.cache.set_exchanges(edges)
        return edges

    def _hit(self, entry: str) -> None:
        self.metrics.counter("rate_cache_hit", tags={"entry": entry})
        self.log.debug("Rate cache hit", entry=entry)

    def _miss(self, entry: str) -> None:
        self.metrics.counter("rate_cache_miss", tags={"entry": entry})
        self.log.debug("Rate cache miss", entry=entry)
