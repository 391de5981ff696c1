from __future__ import annotations

import math
from decimal import Context, Decimal, ROUND_HALF_UP, localcontext

# No traps: invalid operations, division by zero and overflow yield
# NaN/Infinity instead of raising.
ENGINE_CONTEXT = Context(prec=28, traps=[])


def engine_context():
    return localcontext(ENGINE_CONTEXT)


def _d(x) -> Decimal:
    if isinstance(x, Decimal):
        return x
    return Decimal(str(x))


def all_finite(*values) -> bool:
    return all(math.isfinite(float(v)) for v in values)


def to_float(x: Decimal) -> float:
    return float(x)


def round_to_step(x: Decimal, step) -> Decimal:
    """Nearest multiple of `step`, halves away from zero. Non-finite values pass through."""
    if not x.is_finite():
        return x
    step_d = _d(step)
    if step_d <= 0:
        return x
    # Already coarser than a unit at this precision; quantize would signal.
    if (x / step_d).adjusted() >= ENGINE_CONTEXT.prec:
        return x
    return (x / step_d).quantize(Decimal(1), rounding=ROUND_HALF_UP) * step_d


def round_currency(x: Decimal) -> Decimal:
    return round_to_step(x, 1)
