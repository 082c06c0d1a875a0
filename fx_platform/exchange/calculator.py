from __future__ import annotations

from decimal import Decimal, localcontext

from fx_platform.exchange.errors import InconsistentPathError
from fx_platform.exchange.models import ConversionStep, ExchangeEdge

# significant digits kept while walking a path
CONVERSION_PRECISION = 60


def calculate_conversion(
    path: list[str], start_amount: Decimal, edges: list[ExchangeEdge]
) -> list[ConversionStep]:
    """Walk *path* and return the running amount after every hop.

    Each hop uses the first edge in *edges* matching it, which is the same
    edge the graph builder put first in the adjacency list. Products are
    computed with ``CONVERSION_PRECISION`` significant digits, which is the
    only rounding applied; amounts are never quantized between hops.
    """
    lookup: dict[tuple[str, str], Decimal] = {}
    for edge in edges:
        lookup.setdefault((edge.from_code, edge.to_code), edge.rate)

    steps: list[ConversionStep] = []
    amount = start_amount
    with localcontext() as ctx:
        ctx.prec = CONVERSION_PRECISION
        for from_code, to_code in zip(path, path[1:]):
            rate = lookup.get((from_code, to_code))
            if rate is None:
                raise InconsistentPathError(from_code, to_code)
            amount = amount * rate
            steps.append(ConversionStep(from_code, to_code, amount))
    return steps
