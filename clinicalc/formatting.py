# formatting.py
"""
Fixed-precision rendering of numeric results.

Results are displayed as text, so the rounding rule is part of the output
contract: half-up on the shortest decimal form of the value. 65.05 is shown
as "65.1" at one decimal even though the binary double sits slightly below it.

Overflowed results (a dose divided by a vanishing concentration, say) are
still rendered: "Infinity", "-Infinity" or "NaN".
"""

import math
from decimal import Decimal, ROUND_HALF_UP, localcontext


def _non_finite(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    return "Infinity" if value > 0 else "-Infinity"


def fmt(value: float, decimals: int) -> str:
    """fmt(93.333, 1) -> '93.3'; fmt(2.5, 0) -> '3'."""
    value = float(value)
    if not math.isfinite(value):
        return _non_finite(value)

    exact = Decimal(repr(value))
    quantum = Decimal(1).scaleb(-decimals)
    with localcontext() as ctx:
        # Every integer digit plus the requested decimals must fit
        ctx.prec = max(ctx.prec, exact.adjusted() + decimals + 2)
        rounded = exact.quantize(quantum, rounding=ROUND_HALF_UP)
    if rounded == 0:
        rounded = abs(rounded)  # no "-0.0"
    return f"{rounded:.{decimals}f}"


def plain(value: float) -> str:
    """
    Unrounded display of a double, e.g. plain(100.0) -> '100.0'.
    Very large or tiny magnitudes switch to the 'E' exponent form.
    """
    value = float(value)
    if not math.isfinite(value):
        return _non_finite(value)
    magnitude = abs(value)
    if magnitude == 0 or 1e-3 <= magnitude < 1e7:
        return repr(value)

    # Shortest round-trip digits, re-expressed with a single leading digit
    shortest = Decimal(repr(value)).normalize()
    sign, coeffs, exp = shortest.as_tuple()
    head = str(coeffs[0])
    tail = "".join(str(d) for d in coeffs[1:]) or "0"
    power = len(coeffs) - 1 + exp
    return f"{'-' if sign else ''}{head}.{tail}E{power}"
