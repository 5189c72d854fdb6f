"""Blind split-the-difference mechanism for a ceiling/floor pair."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
import math
from numbers import Rational, Real
from typing import Any

from closingtable.backend.models import Outcome


class InvalidInput(ValueError):
    """A ceiling or floor the mechanism refuses to evaluate."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


@dataclass(frozen=True)
class MechanismConfig:
    """Bounds and tuning for the mechanism.

    The defaults are the reference values; callers normally build this from
    ``BackendSettings.mechanism_config()``.
    """

    total_min: float = 50_000
    total_max: float = 500_000
    bridge_zone_pct: float = 0.10
    rounding_granularity: int = 1000


def validate_amount(value: Any, field: str, config: MechanismConfig) -> float:
    """Return ``value`` if it is a finite number inside the configured bounds."""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidInput(field, f"Invalid or missing {field!r}")
    if not math.isfinite(value):
        raise InvalidInput(field, f"{field!r} must be a finite number")
    if value < config.total_min or value > config.total_max:
        raise InvalidInput(
            field,
            f"{field!r} must be between {config.total_min:g} and {config.total_max:g}",
        )
    return value


def to_decimal(value: Real) -> Decimal:
    """Exact decimal for integers and fractions, shortest repr for floats."""
    if isinstance(value, Rational):
        return Decimal(value.numerator) / Decimal(value.denominator)
    return Decimal(str(float(value)))


def round_to_granularity(value: Decimal, granularity: int) -> int:
    step = Decimal(granularity)
    return int((value / step).quantize(Decimal(1), rounding=ROUND_HALF_UP) * step)


def compute_outcome(ceiling: Any, floor: Any, config: MechanismConfig) -> Outcome:
    """Compute the outcome for a company ceiling and a candidate floor.

    Overlapping ranges split the surplus evenly and round the final to the
    configured granularity. A floor above the ceiling by no more than the
    bridge zone yields a ``close`` outcome with a suggested starting point;
    anything further apart fails.
    """
    validate_amount(ceiling, "ceiling", config)
    validate_amount(floor, "floor", config)

    top = to_decimal(ceiling)
    bottom = to_decimal(floor)
    granularity = config.rounding_granularity

    if bottom <= top:
        surplus = top - bottom
        final = round_to_granularity(bottom + surplus / 2, granularity)
        return Outcome(status="success", final=final, surplus=float(surplus))

    gap = bottom - top
    if gap / top <= Decimal(str(config.bridge_zone_pct)):
        suggested = round_to_granularity((top + bottom) / 2, granularity)
        return Outcome(status="close", suggested=suggested, gap=float(gap))

    return Outcome(status="fail", gap=float(gap))
