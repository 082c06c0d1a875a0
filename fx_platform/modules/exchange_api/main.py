"""Exchange API service.

Serves the currency list, the exchange edge list and multi-hop conversions
over HTTP. Each request runs the (synchronous) exchange service in a worker
thread, so concurrent requests only meet at the rate cache.

Endpoints::

    GET  /api/v1/currencies   -> {"currencies": ["USD", "EUR", ...]}
    GET  /api/v1/exchanges    -> {"exchanges": [{"from", "to", "rate"}, ...]}
    POST /api/v1/convert      {"from": "usd", "to": "gbp", "amount": "100"}
                              -> {"steps": [{"from", "to", "amount"}, ...]}
    GET  /api/v1/health       -> {"status": "ok"}

Decimals are returned as strings. Failures return
``{"error": {"code": ..., "message": ...}}`` with a status chosen by code.
"""

from __future__ import annotations

import asyncio
import json
from decimal import Decimal
from typing import Any, Callable

from aiohttp import web

from fx_platform.config.context import ModuleConfig
from fx_platform.exchange.errors import (
    ExchangeError,
    InvalidAmountError,
    InvalidCurrencyCodeError,
    NoExchangeDataAvailableError,
    NoPathFoundError,
    RateSourceUnavailableError,
)
from fx_platform.exchange.factory import create_exchange_service
from fx_platform.exchange.service import CurrencyExchangeService
from fx_platform.modules.base import Module
from fx_platform.services.cache.interface import CacheInterface
from fx_platform.services.filesystem.interface import FileSystemInterface
from fx_platform.services.lifecycle.lifecycle_manager import LifecycleManager
from fx_platform.services.logger.factory import LoggerFactory
from fx_platform.services.logger.interface import LoggingInterface
from fx_platform.services.metrics.interface import MetricsInterface
from fx_platform.services.secrets.interface import SecretsInterface

STATUS_BY_CODE: dict[str, int] = {
    InvalidAmountError.code: 400,
    InvalidCurrencyCodeError.code: 400,
    NoPathFoundError.code: 404,
    NoExchangeDataAvailableError.code: 503,
    RateSourceUnavailableError.code: 503,
}


def _error(status: int, code: str, message: str) -> web.Response:
    return web.json_response({"error": {"code": code, "message": message}}, status=status)


def create_app(service: CurrencyExchangeService, log: LoggingInterface) -> web.Application:
    """Build the aiohttp application around *service*."""

    async def call(fn: Callable[..., Any], *args: Any) -> Any:
        return await asyncio.to_thread(fn, *args)

    def failure(exc: Exception, route: str) -> web.Response:
        if isinstance(exc, ExchangeError) and exc.code in STATUS_BY_CODE:
            return _error(STATUS_BY_CODE[exc.code], exc.code, str(exc))
        log.error("Request failed", route=route, error=str(exc), type=type(exc).__name__)
        code = exc.code if isinstance(exc, ExchangeError) else "INTERNAL_ERROR"
        return _error(500, code, "Internal server error")

    async def currencies(request: web.Request) -> web.Response:
        try:
            result = await call(service.get_all_currencies)
        except Exception as exc:
            return failure(exc, "currencies")
        return web.json_response({"currencies": [c.code for c in result]})

    async def exchanges(request: web.Request) -> web.Response:
        try:
            result = await call(service.get_all_exchanges)
        except Exception as exc:
            return failure(exc, "exchanges")
        return web.json_response({"exchanges": [e.to_dict() for e in result]})

    async def convert(request: web.Request) -> web.Response:
        try:
            body = json.loads(await request.text(), parse_float=Decimal)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return _error(400, "INVALID_REQUEST", "Invalid JSON body")
        if not isinstance(body, dict):
            return _error(400, "INVALID_REQUEST", "Request body must be a JSON object")

        try:
            steps = await call(service.convert, body.get("from"), body.get("to"), body.get("amount"))
        except Exception as exc:
            return failure(exc, "convert")
        return web.json_response({"steps": [s.to_dict() for s in steps]})

    async def health(request: web.Request) -> web.Response:
        return web.json_response({"status": "ok"})

    app = web.Application()
    app.router.add_get("/api/v1/currencies", currencies)
    app.router.add_get("/api/v1/exchanges", exchanges)
    app.router.add_post("/api/v1/convert", convert)
    app.router.add_get("/api/v1/health", health)
    return app


class ExchangeApiModule(Module):
    log: LoggingInterface

    def __init__(
        self,
        config: ModuleConfig,
        logger: LoggerFactory,
        secrets: SecretsInterface,
        cache: CacheInterface,
        fs: FileSystemInterface,
        metrics: MetricsInterface,
        lifecycle: LifecycleManager,
    ) -> None:
        self.config = config
        self.logger = logger
        self.secrets = secrets
        self.cache = cache
        self.fs = fs
        self.metrics = metrics
        self.lifecycle = lifecycle
        self._runner: web.AppRunner | None = None

    async def initialize(self) -> None:
        self.log = self.logger.create()
        self.host: str = self.config.get("host", "0.0.0.0")
        self.port = int(self.config.get("port", 8003))
        self.service = create_exchange_service(
            self.config, self.secrets, self.cache, self.fs, self.log, self.metrics
        )
        self.lifecycle.on_shutdown(self._stop_server)

    async def validate(self) -> None:
        if not 0 < self.port < 65536:
            raise ValueError(f"port must be between 1 and 65535, got {self.port}")

    async def execute(self) -> int:
        self._runner = web.AppRunner(create_app(self.service, self.log))
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        self.log.info("Exchange API listening", host=self.host, port=self.port)

        await self.lifecycle.wait_for_shutdown()
        self.log.info("Exchange API stopping")
        return 0

    async def teardown(self) -> None:
        await self._stop_server()

    async def _stop_server(self) -> None:
        if self._runner:
            await self._runner.cleanup()
            self._runner = None


module_class = ExchangeApiModule
