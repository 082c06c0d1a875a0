"""One-shot conversion job.

Runs a single conversion against the configured rates file and prints one
line per hop (or a JSON document with ``--format json``). Exits 1 when the
conversion fails; the failure is logged with its error code.
"""

from __future__ import annotations

import json
import sys

from fx_platform.config.context import ModuleConfig
from fx_platform.exchange.errors import ExchangeError
from fx_platform.exchange.factory import create_exchange_service
from fx_platform.modules.base import Module
from fx_platform.services.cache.interface import CacheInterface
from fx_platform.services.filesystem.interface import FileSystemInterface
from fx_platform.services.logger.factory import LoggerFactory
from fx_platform.services.logger.interface import LoggingInterface
from fx_platform.services.metrics.interface import MetricsInterface
from fx_platform.services.secrets.interface import SecretsInterface


class ConvertModule(Module):
    log: LoggingInterface

    def __init__(
        self,
        config: ModuleConfig,
        logger: LoggerFactory,
        secrets: SecretsInterface,
        cache: CacheInterface,
        fs: FileSystemInterface,
        metrics: MetricsInterface,
    ) -> None:
        self.config = config
        self.logger = logger
        self.secrets = secrets
        self.cache = cache
        self.fs = fs
        self.metrics = metrics

    async def initialize(self) -> None:
        self.log = self.logger.create()
        self.service = create_exchange_service(
            self.config, self.secrets, self.cache, self.fs, self.log, self.metrics
        )

    async def execute(self) -> int:
        try:
            steps = self.service.convert(
                self.config.get("from", ""),
                self.config.get("to", ""),
                self.config.get("amount", ""),
            )
        except ExchangeError as exc:
            self.log.error("Conversion failed", code=exc.code, error=str(exc))
            return 1

        if self.config.get("format", "text") == "json":
            print(json.dumps({"steps": [s.to_dict() for s in steps]}), file=sys.stdout)
        else:
            for step in steps:
                print(f"{step.from_code} -> {step.to_code}: {step.amount}", file=sys.stdout)
        return 0


module_class = ConvertModule
