"""Authoritative providers of exchange edges.

``FileRateSource`` reads a JSON array of rate records through the platform
``FileSystemInterface`` (local disk in production, memory in tests)::

    [
        {"from": "USD", "to": "EUR", "rate": "0.85"},
        {"from": "EUR", "to": "GBP", "rate": "0.9"},
        ...
    ]

Rates may be JSON numbers or strings; both are parsed straight into
``Decimal``. Non-positive rates are passed through untouched; rejecting them
is the graph builder's job.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any

from fx_platform.exchange.errors import RateSourceUnavailableError
from fx_platform.exchange.models import ExchangeEdge, normalize_code
from fx_platform.services.filesystem.interface import FileSystemInterface

_REQUIRED_FIELDS = {"from", "to", "rate"}


class RateSourceInterface(ABC):
    """Supplies the full list of known exchange edges on demand."""

    @abstractmethod
    def fetch_all_exchanges(self) -> list[ExchangeEdge]:
        """Return every known edge. Raises ``RateSourceUnavailableError``."""
        ...

    def health_check(self) -> bool:
        return True


class FileRateSource(RateSourceInterface):
    def __init__(self, fs: FileSystemInterface, path: str) -> None:
        self.fs = fs
        self.path = path

    def fetch_all_exchanges(self) -> list[ExchangeEdge]:
        try:
            raw = self.fs.read(self.path)
        except OSError as exc:
            raise RateSourceUnavailableError(f"Cannot read rates file {self.path}: {exc}") from exc

        try:
            records = json.loads(raw.decode("utf-8"), parse_float=Decimal)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise RateSourceUnavailableError(f"Rates file {self.path} is not valid JSON: {exc}") from exc

        if not isinstance(records, list):
            raise RateSourceUnavailableError(f"Rates file {self.path} must contain a JSON array")

        return [_parse_record(record, i, self.path) for i, record in enumerate(records)]

    def health_check(self) -> bool:
        return self.fs.exists(self.path)


def _parse_record(record: Any, index: int, path: str) -> ExchangeEdge:
    if not isinstance(record, dict):
        raise RateSourceUnavailableError(f"{path}[{index}]: rate record must be an object")
    missing = _REQUIRED_FIELDS - set(record)
    if missing:
        raise RateSourceUnavailableError(
            f"{path}[{index}]: missing fields {', '.join(sorted(missing))}"
        )

    from_code, to_code = record["from"], record["to"]
    if not isinstance(from_code, str) or not isinstance(to_code, str):
        raise RateSourceUnavailableError(f"{path}[{index}]: currency codes must be strings")

    rate = record["rate"]
    if isinstance(rate, bool):
        raise RateSourceUnavailableError(f"{path}[{index}]: rate must be a number")
    try:
        value = Decimal(str(rate))
    except InvalidOperation as exc:
        raise RateSourceUnavailableError(f"{path}[{index}]: rate {rate!r} is not a number") from exc
    if not value.is_finite():
        raise RateSourceUnavailableError(f"{path}[{index}]: rate {rate!r} is not finite")

    return ExchangeEdge(normalize_code(from_code), normalize_code(to_code), value)
