"""Wires a ``CurrencyExchangeService`` from platform services.

Settings come from module args first, then secrets/env:

    rates-file    / FX_RATES_FILE    rates JSON path on the file system (rates.json)
    currency-ttl  / FX_CURRENCY_TTL  seconds for the ``currency`` entry (30)
    exchange-ttl  / FX_EXCHANGE_TTL  seconds for the ``currencyExchange`` entry (60)
"""

from __future__ import annotations

from fx_platform.config.context import ModuleConfig
from fx_platform.exchange.rate_cache import DEFAULT_CURRENCY_TTL, DEFAULT_EXCHANGE_TTL, RateCache
from fx_platform.exchange.rate_source import FileRateSource
from fx_platform.exchange.retrieval import RateRetrieval
from fx_platform.exchange.service import CurrencyExchangeService
from fx_platform.services.cache.interface import CacheInterface
from fx_platform.services.filesystem.interface import FileSystemInterface
from fx_platform.services.logger.interface import LoggingInterface
from fx_platform.services.metrics.interface import MetricsInterface
from fx_platform.services.secrets.interface import SecretsInterface

DEFAULT_RATES_FILE = "rates.json"


def _ttl(config: ModuleConfig, secrets: SecretsInterface, arg: str, env: str, default: float) -> float:
    value = config.get(arg)
    ttl = float(value) if value is not None else secrets.get_float(env, default)
    if ttl <= 0:
        raise ValueError(f"{arg} must be positive, got {ttl}")
    return ttl


def create_exchange_service(
    config: ModuleConfig,
    secrets: SecretsInterface,
    cache: CacheInterface,
    fs: FileSystemInterface,
    log: LoggingInterface,
    metrics: MetricsInterface,
) -> CurrencyExchangeService:
    rates_file = config.get("rates-file") or secrets.get_or_default("FX_RATES_FILE", DEFAULT_RATES_FILE)
    rate_cache = RateCache(
        cache,
        currency_ttl=_ttl(config, secrets, "currency-ttl", "FX_CURRENCY_TTL", DEFAULT_CURRENCY_TTL),
        exchange_ttl=_ttl(config, secrets, "exchange-ttl", "FX_EXCHANGE_TTL", DEFAULT_EXCHANGE_TTL),
    )
    source = FileRateSource(fs, rates_file)
    retrieval = RateRetrieval(rate_cache, source, log, metrics)
    log.debug(
        "Exchange service configured",
        rates_file=rates_file,
        currency_ttl=rate_cache.currency_ttl,
        exchange_ttl=rate_cache.exchange_ttl,
    )
    return CurrencyExchangeService(retrieval, log, metrics)
