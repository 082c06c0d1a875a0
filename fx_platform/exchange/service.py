"""Currency conversion over a chain of exchange rates.

``CurrencyExchangeService`` is the single entry point used by the modules::

    service = CurrencyExchangeService(retrieval, log, metrics)
    steps = service.convert("usd", "gbp", Decimal("100"))
    # [ConversionStep("USD", "EUR", 85.00), ConversionStep("EUR", "GBP", 76.500)]

A request moves through validation, retrieval, graph building, path finding
and calculation. Any stage may fail with an ``ExchangeError``; nothing is
retried and no partial result is returned.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from fx_platform.exchange.calculator import calculate_conversion
from fx_platform.exchange.errors import (
    ExchangeError,
    InvalidAmountError,
    InvalidCurrencyCodeError,
    NoExchangeDataAvailableError,
    NoPathFoundError,
)
from fx_platform.exchange.graph import build_graph, find_path, partition_edges
from fx_platform.exchange.models import (
    ConversionStep,
    Currency,
    ExchangeEdge,
    Graph,
    normalize_code,
)
from fx_platform.exchange.retrieval import RateRetrieval
from fx_platform.services.logger.interface import LoggingInterface
from fx_platform.services.metrics.interface import MetricsInterface


class CurrencyExchangeService:
    def __init__(
        self,
        retrieval: RateRetrieval,
        log: LoggingInterface,
        metrics: MetricsInterface,
    ) -> None:
        self.retrieval = retrieval
        self.log = log
        self.metrics = metrics

    def get_all_currencies(self) -> list[Currency]:
        return self.retrieval.get_all_currencies()

    def get_all_exchanges(self) -> list[ExchangeEdge]:
        return self.retrieval.get_all_exchanges()

    def convert(self, from_code: str, to_code: str, amount: object) -> list[ConversionStep]:
        """Convert *amount* of *from_code* into *to_code*, one step per hop.

        Codes are case-insensitive. When both codes name the same known
        currency the result is a single identity step carrying the unchanged
        amount; an unknown currency fails with ``NoPathFoundError``.
        """
        try:
            steps = self._convert(from_code, to_code, amount)
        except ExchangeError as exc:
            self.metrics.counter("conversion_failure", tags={"code": exc.code})
            self.log.info(
                "Conversion failed",
                from_currency=from_code,
                to_currency=to_code,
                code=exc.code,
                error=str(exc),
            )
            raise

        self.metrics.counter("conversion_success")
        self.metrics.histogram("conversion_hops", len(steps))
        return steps

    def _convert(self, from_code: str, to_code: str, amount: object) -> list[ConversionStep]:
        source = validate_currency_code(from_code)
        target = validate_currency_code(to_code)
        value = validate_amount(amount)

        edges = self.retrieval.get_all_exchanges()
        if not edges:
            raise NoExchangeDataAvailableError()

        usable, rejected = partition_edges(edges)
        for error in rejected:
            self.metrics.counter("invalid_edge_rejected")
            self.log.warn(
                "Skipping invalid exchange edge",
                from_currency=error.from_code,
                to_currency=error.to_code,
                rate=str(error.rate),
            )

        graph = build_graph(usable)
        if source == target:
            if not _in_graph(graph, source):
                raise NoPathFoundError(source, target)
            return [ConversionStep(source, target, value)]

        path = find_path(graph, source, target)
        steps = calculate_conversion(path, value, usable)
        self.log.debug("Converted", path="->".join(path), amount=str(steps[-1].amount))
        return steps


def _in_graph(graph: Graph, code: str) -> bool:
    return code in graph or any(code == to for targets in graph.values() for to, _ in targets)


def validate_currency_code(code: object) -> str:
    """Return the normalized code or raise ``InvalidCurrencyCodeError``."""
    if not isinstance(code, str):
        raise InvalidCurrencyCodeError(code)
    normalized = normalize_code(code)
    if not normalized or not normalized.isalpha() or not normalized.isascii():
        raise InvalidCurrencyCodeError(code)
    return normalized


def validate_amount(amount: object) -> Decimal:
    """Return *amount* as a positive finite ``Decimal`` or raise ``InvalidAmountError``."""
    if isinstance(amount, bool):
        raise InvalidAmountError(amount)
    if isinstance(amount, Decimal):
        value = amount
    elif isinstance(amount, (int, float, str)):
        try:
            value = Decimal(str(amount).strip())
        except InvalidOperation as exc:
            raise InvalidAmountError(amount) from exc
    else:
        raise InvalidAmountError(amount)
    if not value.is_finite() or value <= 0:
        raise InvalidAmountError(amount)
    return value
