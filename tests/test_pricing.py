import itertools
import math

import numpy as np
import pytest

from pricing import (
    PromotionInputs,
    compute_promotion,
    compute_totals,
    daily_projection,
    parse_amount,
    round2,
    to_number,
    MAX_PROJECTION_POINTS,
)


def test_reference_promotion():
    r = compute_totals(27.10, 49.99, 5, 1, 1)
    assert r.total_units == 5
    assert r.total_revenue == 249.95
    assert r.total_cost == 135.50
    assert r.total_profit == 114.45
    assert r.unit_profit == 22.89


def test_no_stylists_sells_nothing():
    r = compute_totals(10, 20, 5, 0, 3)
    assert r.total_units == 0
    assert r.total_revenue == 0
    assert r.total_cost == 0
    assert r.total_profit == 0
    assert r.unit_profit == 10


def test_negatives_clamped_for_totals_only():
    r = compute_totals(-5, 15, -2, 2, 2)
    assert r.total_units == 0
    assert r.total_revenue == 0
    assert r.total_cost == 0
    assert r.total_profit == 0
    # unit profit uses the unclamped cost
    assert r.unit_profit == 20


def test_price_below_cost_is_a_loss():
    r = compute_totals(12, 10, 1, 1, 1)
    assert r.total_units == 1
    assert r.total_revenue == 10.00
    assert r.total_cost == 12.00
    assert r.total_profit == -2.00
    assert r.unit_profit == -2.00
    assert r.price_below_cost


def test_pennies():
    r = compute_totals(0, 0.1, 1, 1, 1)
    assert r.total_revenue == 0.10
    assert r.total_cost == 0.00
    assert r.total_profit == 0.10
    assert r.unit_profit == 0.10
    assert not r.price_below_cost


def test_same_inputs_same_result():
    assert compute_totals(10.45, 20.99, 7, 3, 2) == compute_totals(10.45, 20.99, 7, 3, 2)


def test_totals_never_negative():
    values = [-10, -0.5, 0, 0.01, 3, 12.99]
    for cost, price, days, stylists, upd in itertools.product(values, repeat=5):
        r = compute_totals(cost, price, days, stylists, upd)
        assert r.total_units >= 0
        assert r.total_cost >= 0
        assert r.total_revenue >= 0


def test_money_fields_have_at_most_two_decimals():
    prices = [0.01, 0.1, 1.99, 10.45, 20.99, 27.10, 49.99]
    for cost, price in itertools.product(prices, repeat=2):
        r = compute_totals(cost, price, 7, 3, 2)
        for value in (r.total_cost, r.total_revenue, r.total_profit, r.unit_profit,
                      r.day_cost, r.day_revenue, r.day_profit):
            assert round(value, 2) == value


def test_total_profit_is_revenue_minus_cost():
    r = compute_totals(0.333, 0.667, 3, 1, 1)
    assert r.total_cost == 1.00
    assert r.total_revenue == 2.00
    assert r.total_profit == 1.00


def test_daily_figures():
    r = compute_totals(10.45, 20.99, 7, 3, 2)
    assert r.per_day_units == 2
    assert r.salon_units_per_day == 6
    assert r.total_units == 42
    assert r.day_revenue == 125.94
    assert r.day_cost == 62.70
    assert r.day_profit == 63.24
    assert r.margin_percent == pytest.approx(10.54 / 20.99 * 100)


def test_margin_zero_without_price():
    assert compute_totals(5, 0, 1, 1, 1).margin_percent == 0
    assert compute_totals(5, -3, 1, 1, 1).margin_percent == 0


def test_garbage_inputs_count_as_zero():
    r = compute_totals("abc", None, "", object(), float("nan"))
    assert r.total_units == 0
    assert r.unit_profit == 0
    assert r.margin_percent == 0


@pytest.mark.parametrize("raw, expected", [
    ("15.00", 15.0),
    ("£20.99", 20.99),
    ("1,250", 1250.0),
    ("-5", 5.0),
    ("abc", 0.0),
    ("", 0.0),
    ("-", 0.0),
    (".", 0.0),
    ("1.2.3", 0.0),
    (None, 0.0),
])
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


def test_to_number():
    assert to_number(3) == 3.0
    assert to_number("7") == 7.0
    assert to_number(float("inf")) == 0.0
    assert to_number([1]) == 0.0


def test_round2_halves_away_from_zero():
    assert round2(0.125) == 0.13
    assert round2(-0.125) == -0.13
    assert round2(2.675000001) == 2.68
    assert round2(0) == 0


def test_projection_ends_at_totals():
    inputs = PromotionInputs(cost=27.10, price=49.99, days=5, stylists=1, units_per_stylist_per_day=1)
    projection = daily_projection(inputs)
    result = compute_promotion(inputs)

    assert list(projection['Day']) == [1, 2, 3, 4, 5]
    last = projection.iloc[-1]
    assert last['Units'] == result.total_units
    assert last['Revenue'] == pytest.approx(result.total_revenue)
    assert last['Cost'] == pytest.approx(result.total_cost)
    assert last['Profit'] == pytest.approx(result.total_profit)


def test_projection_part_day():
    projection = daily_projection(PromotionInputs(cost=1, price=2, days=2.5, stylists=1, units_per_stylist_per_day=2))
    assert list(projection['Day']) == [1, 2, 2.5]
    assert projection.iloc[-1]['Units'] == 5


def test_projection_empty_without_days():
    projection = daily_projection(PromotionInputs(cost=1, price=2, days=0, stylists=1, units_per_stylist_per_day=2))
    assert projection.empty
    assert list(projection.columns) == ['Day', 'Units', 'Cost', 'Revenue', 'Profit']


def test_long_projection_is_sampled():
    projection = daily_projection(PromotionInputs(cost=1, price=2, days=10000, stylists=1, units_per_stylist_per_day=1))
    assert len(projection) == MAX_PROJECTION_POINTS
    assert projection.iloc[-1]['Day'] == pytest.approx(10000)


def test_inputs_from_dict():
    inputs = PromotionInputs.from_dict({'cost': '10.45', 'price': 20.99, 'days': 7})
    assert inputs == PromotionInputs(cost=10.45, price=20.99, days=7, stylists=0, units_per_stylist_per_day=0)


HUGE_TYPED = "1" + "0" * 307

EXTREME_INPUTS = [
    (HUGE_TYPED, 1, 1, 1, 1),
    (1, 1, "1" + "0" * 200, "1" + "0" * 200, 1),
    (10**400, 1, 1, 1, 1),
    (1, 10**400, 10**400, 10**400, 10**400),
    ("9" * 400, 1, 1, 1, 1),
    (1.7e308, 1.7e308, 1e308, 1e308, 1e308),
    (-1.7e308, 1.7e308, 2, 2, 2),
    (1e10, 1e-300, 1, 1, 1),
]


@pytest.mark.parametrize("args", EXTREME_INPUTS)
def test_extreme_magnitudes_never_raise(args):
    r = compute_totals(*args)
    assert r.total_units >= 0
    assert r.total_cost >= 0
    assert r.total_revenue >= 0
    for value in r.to_dict().values():
        assert math.isfinite(value)


@pytest.mark.parametrize("args", EXTREME_INPUTS)
def test_extreme_magnitudes_in_projection(args):
    projection = daily_projection(PromotionInputs(*args))
    values = projection.to_numpy(dtype=float)
    assert np.isfinite(values).all()
    assert (projection[['Units', 'Cost', 'Revenue']].to_numpy(dtype=float) >= 0).all()


def test_huge_typed_cost_kept_as_is():
    r = compute_totals(parse_amount(HUGE_TYPED), 1, 1, 1, 1)
    assert r.total_units == 1
    assert r.total_cost == 1e307
    assert r.total_revenue == 1
    assert r.total_profit == -1e307


def test_int_too_large_for_float_counts_as_zero():
    assert to_number(10**400) == 0.0
    r = compute_totals(10**400, 5, 1, 1, 1)
    assert r.total_cost == 0
    assert r.unit_profit == 5


def test_overflowing_volume_counts_as_zero():
    r = compute_totals(1, 1, "1" + "0" * 200, "1" + "0" * 200, 1)
    assert r.total_units == 0
    assert r.total_profit == 0


def test_round2_at_float_limits():
    assert round2(1e307) == 1e307
    assert round2(-1e307) == -1e307
    assert round2(float("inf")) == 0.0
    assert round2(float("nan")) == 0.0
