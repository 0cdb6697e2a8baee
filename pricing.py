"""
Promotion profit calculator.

Everything in here is pure: the same inputs always give the same result and
nothing raises on bad user input. Non-numeric values count as 0.
"""

import math
import re
from dataclasses import asdict, dataclass

import numpy as np
import pandas as pd

# Projections longer than this are sampled instead of one row per day
MAX_PROJECTION_POINTS = 366

_NON_NUMERIC = re.compile(r"[^0-9.]")


def parse_amount(raw) -> float:
    """
    Parse text typed into a numeric field.

    Every character that is not a digit or a decimal point is dropped, so
    "£15.00" reads as 15.0 and "-5" as 5.0. Anything left that still is not a
    number ("", ".", "1.2.3") becomes 0.
    """
    if raw is None:
        return 0.0
    cleaned = _NON_NUMERIC.sub("", str(raw))
    try:
        value = float(cleaned)
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def to_number(value) -> float:
    """Coerce a field value to a float, 0 for anything non-numeric"""
    if isinstance(value, str):
        return parse_amount(value)
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def clamp(value) -> float:
    return max(0.0, to_number(value))


def finite(x: float) -> float:
    # Products of huge inputs overflow to inf; they count as 0 like any other non-number
    return x if math.isfinite(x) else 0.0


def round2(x: float) -> float:
    """Round to 2 decimal places, halves away from zero"""
    if not math.isfinite(x):
        return 0.0
    scaled = abs(x) * 100
    if not math.isfinite(scaled):
        # Floats this large have no fractional part left to round
        return x
    rounded = math.floor(scaled + 0.5) / 100
    return -rounded if x < 0 else rounded


def margin_percent(unit_profit: float, price: float) -> float:
    # Margin is on the selling price; no price means no margin
    return finite((unit_profit / price) * 100) if price > 0 else 0.0


@dataclass(frozen=True)
class PromotionInputs:
    cost: float = 0.0
    price: float = 0.0
    days: float = 0.0
    stylists: float = 0.0
    units_per_stylist_per_day: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "PromotionInputs":
        return cls(**{k: to_number(data.get(k, 0)) for k in cls.__dataclass_fields__})

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PromotionResult:
    per_day_units: float
    total_units: float
    total_cost: float
    total_revenue: float
    unit_profit: float
    total_profit: float
    salon_units_per_day: float = 0.0
    day_cost: float = 0.0
    day_revenue: float = 0.0
    day_profit: float = 0.0
    margin_percent: float = 0.0

    @property
    def price_below_cost(self) -> bool:
        return self.unit_profit < 0

    def to_dict(self) -> dict:
        return asdict(self)


def compute_totals(cost, price, days, stylists, units_per_stylist_per_day) -> PromotionResult:
    """
    Work out what a promotion sells, costs and earns.

    Volumes, cost and price are clamped at 0 before any multiplication, so the
    totals can never go negative. Unit profit and margin use the unclamped
    cost and price: a negative cost shows up as extra profit per unit.
    Rounding to pennies happens only on the reported money figures, and total
    profit is taken from the rounded revenue and cost.
    """
    raw_cost = to_number(cost)
    raw_price = to_number(price)

    cost_c = max(0.0, raw_cost)
    price_c = max(0.0, raw_price)
    days_c = clamp(days)
    stylists_c = clamp(stylists)
    per_stylist_c = clamp(units_per_stylist_per_day)

    total_units = finite(days_c * stylists_c * per_stylist_c)
    total_cost = round2(total_units * cost_c)
    total_revenue = round2(total_units * price_c)
    total_profit = round2(total_revenue - total_cost)

    salon_units_per_day = finite(stylists_c * per_stylist_c)
    day_cost = round2(salon_units_per_day * cost_c)
    day_revenue = round2(salon_units_per_day * price_c)

    unit_profit = round2(raw_price - raw_cost)

    return PromotionResult(
        per_day_units=per_stylist_c,
        total_units=total_units,
        total_cost=total_cost,
        total_revenue=total_revenue,
        unit_profit=unit_profit,
        total_profit=total_profit,
        salon_units_per_day=salon_units_per_day,
        day_cost=day_cost,
        day_revenue=day_revenue,
        day_profit=round2(day_revenue - day_cost),
        margin_percent=margin_percent(unit_profit, raw_price),
    )


def compute_promotion(inputs: PromotionInputs) -> PromotionResult:
    return compute_totals(
        inputs.cost,
        inputs.price,
        inputs.days,
        inputs.stylists,
        inputs.units_per_stylist_per_day,
    )


def _finite_array(values: np.ndarray) -> np.ndarray:
    return np.where(np.isfinite(values), values, 0.0)


def _round2_array(values: np.ndarray) -> np.ndarray:
    """Vectorised round2: non-finite values become 0, values too large to scale pass through"""
    values = _finite_array(values)
    scaled = np.abs(values) * 100
    rounded = np.sign(values) * np.floor(scaled + 0.5) / 100
    return np.where(np.isfinite(scaled), rounded, values)


def daily_projection(inputs: PromotionInputs) -> pd.DataFrame:
    """
    Cumulative units, cost, revenue and profit at the end of each promotion day.

    The last row matches compute_promotion(inputs). A part day (e.g. 2.5 days)
    ends the projection at the exact day count.
    """
    columns = ['Day', 'Units', 'Cost', 'Revenue', 'Profit']
    days = clamp(inputs.days)
    if days <= 0:
        return pd.DataFrame(columns=columns)

    points = int(math.ceil(days))
    if points > MAX_PROJECTION_POINTS:
        day = np.linspace(days / MAX_PROJECTION_POINTS, days, MAX_PROJECTION_POINTS)
    else:
        day = np.minimum(np.arange(1, points + 1, dtype=float), days)

    with np.errstate(over='ignore', invalid='ignore'):
        units = _finite_array(day * clamp(inputs.stylists) * clamp(inputs.units_per_stylist_per_day))
        cost = _round2_array(units * clamp(inputs.cost))
        revenue = _round2_array(units * clamp(inputs.price))
        profit = _round2_array(revenue - cost)

    return pd.DataFrame({
        'Day': day,
        'Units': units,
        'Cost': cost,
        'Revenue': revenue,
        'Profit': profit,
    }, columns=columns)
