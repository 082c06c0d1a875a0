"""Error taxonomy for currency conversion.

Every failure a caller can see is an ``ExchangeError`` subclass carrying a
stable ``code``. Presentation layers map the code to a status and never need
to parse the message.
"""

from __future__ import annotations

from decimal import Decimal


class ExchangeError(Exception):
    """Base class for all conversion failures."""

    code = "EXCHANGE_ERROR"


class InvalidAmountError(ExchangeError):
    code = "INVALID_AMOUNT"

    def __init__(self, amount: object) -> None:
        super().__init__(f"Amount must be a positive decimal, got {amount!r}")
        self.amount = amount


class InvalidCurrencyCodeError(ExchangeError):
    code = "INVALID_CURRENCY_CODE"

    def __init__(self, currency_code: object) -> None:
        super().__init__(
            f"Currency code must be a non-empty alphabetic string, got {currency_code!r}"
        )
        self.currency_code = currency_code


class NoExchangeDataAvailableError(ExchangeError):
    code = "NO_EXCHANGE_DATA_AVAILABLE"

    def __init__(self) -> None:
        super().__init__("No exchange rates are available")


class NoPathFoundError(ExchangeError):
    code = "NO_PATH_FOUND"

    def __init__(self, source: str, target: str) -> None:
        super().__init__(f"No conversion path from {source} to {target}")
        self.source = source
        self.target = target


class RateSourceUnavailableError(ExchangeError):
    code = "RATE_SOURCE_UNAVAILABLE"


class InvalidEdgeDataError(ExchangeError):
    code = "INVALID_EDGE_DATA"

    def __init__(self, from_code: str, to_code: str, rate: Decimal) -> None:
        super().__init__(f"Rejected edge {from_code} -> {to_code}: rate {rate} is not positive")
        self.from_code = from_code
        self.to_code = to_code
        self.rate = rate


class InconsistentPathError(ExchangeError):
    """A path hop has no matching edge. Graph and edge list disagree."""

    code = "INCONSISTENT_PATH"

    def __init__(self, from_code: str, to_code: str) -> None:
        super().__init__(f"Path hop {from_code} -> {to_code} has no matching edge")
        self.from_code = from_code
        self.to_code = to_code
