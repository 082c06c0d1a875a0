"""Value objects for the exchange graph.

All models are frozen dataclasses: equality is by field values and instances
are recreated per request from cached or source data. ``to_dict()`` /
``from_dict()`` helpers give the JSON-compatible shape used by the cache and
the REST layer (rates and amounts travel as decimal strings).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

# code -> outgoing (destination code, rate) pairs, in input order
Graph = dict[str, list[tuple[str, Decimal]]]


def normalize_code(code: str) -> str:
    """Uppercase and strip a currency code. Does not validate it."""
    return code.strip().upper()


@dataclass(frozen=True)
class Currency:
    """A currency identified by its normalized code (e.g. ``USD``)."""

    code: str

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True)
class ExchangeEdge:
    """One unit of ``from_code`` converts to ``rate`` units of ``to_code``.

    Directed: no reverse edge is implied. A non-positive rate is representable
    so that bad source data can be reported, but it is never put in a graph.
    """

    from_code: str
    to_code: str
    rate: Decimal

    @property
    def is_valid(self) -> bool:
        return self.rate > 0

    def to_dict(self) -> dict[str, Any]:
        return {"from": self.from_code, "to": self.to_code, "rate": str(self.rate)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExchangeEdge":
        return cls(
            from_code=normalize_code(data["from"]),
            to_code=normalize_code(data["to"]),
            rate=Decimal(str(data["rate"])),
        )


@dataclass(frozen=True)
class ConversionStep:
    """Running converted amount after traversing one hop."""

    from_code: str
    to_code: str
    amount: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {"from": self.from_code, "to": self.to_code, "amount": str(self.amount)}


def currencies_from_edges(edges: list[ExchangeEdge]) -> list[Currency]:
    """Union of every edge's endpoints, deduplicated in first-seen order."""
    seen: dict[str, None] = {}
    for edge in edges:
        seen.setdefault(edge.from_code)
        seen.setdefault(edge.to_code)
    return [Currency(code) for code in seen]
