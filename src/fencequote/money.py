"""Integer-cent currency helpers.

Amounts are carried as whole cents everywhere inside the engine so that
summing line items is exact and independent of order. Conversions to and from
dollars go through :class:`~decimal.Decimal` with half-up rounding.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

_CENT = Decimal("1")


def _decimal(value: float | int | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # repr() keeps the shortest round-tripping text so 0.1 stays 0.1
    return Decimal(repr(float(value))) if isinstance(value, float) else Decimal(value)


def to_cents(dollars: float | int | Decimal) -> int:
    """Convert a dollar amount to whole cents, rounding half away from zero."""

    return int((_decimal(dollars) * 100).quantize(_CENT, rounding=ROUND_HALF_UP))


def to_dollars(cents: int) -> float:
    return float(Decimal(int(cents)) / 100)


def multiply_cents(quantity: float | int, unit_cents: int) -> int:
    """Extend ``quantity`` units at ``unit_cents`` each, rounded to a cent."""

    product = _decimal(quantity) * Decimal(int(unit_cents))
    return int(product.quantize(_CENT, rounding=ROUND_HALF_UP))


def percent_of(cents: int, percent: float | int) -> int:
    """Return ``percent`` % of ``cents``, rounded to a cent."""

    product = Decimal(int(cents)) * _decimal(percent) / 100
    return int(product.quantize(_CENT, rounding=ROUND_HALF_UP))


__all__ = ["to_cents", "to_dollars", "multiply_cents", "percent_of"]
