"""Fixed-point money helpers.

Cash and prices are held as integer micro-dollars (6 decimal places) so
that comparisons like ``price * quantity <= balance`` are exact. Floats are
only used at the edges.
"""

from decimal import Decimal, ROUND_HALF_EVEN

# Precision constant for currency conversion
MICRO_DOLLARS = 1_000_000  # 6 decimal places for subpenny precision


def to_micros(amount: float | int | Decimal) -> int:
    """Convert a dollar amount to integer micro-dollars.

    Floats go through their shortest repr so 0.1 becomes exactly 100000.
    Amounts finer than a micro-dollar are rounded half-even.
    """
    if isinstance(amount, float):
        amount = Decimal(repr(amount))
    else:
        amount = Decimal(amount)
    return int((amount * MICRO_DOLLARS).to_integral_value(rounding=ROUND_HALF_EVEN))


def from_micros(micros: int) -> float:
    return float(Decimal(micros) / MICRO_DOLLARS)
