from dataclasses import replace

import pytest

from crane_crm.cost_utils import (
    CostBreakdown,
    QuotationInputs,
    RateTables,
    calc_breakdown_for_quotation,
    calc_extra_charges,
    calc_food_accom_cost,
    calc_mob_demob_cost,
    calculate_breakdown,
    classify_order_type,
    resolve_base_rate,
)


def _inputs(**overrides):
    values = {"number_of_days": 5, "working_hours": 8, "include_gst": False}
    values.update(overrides)
    return QuotationInputs(**values)


@pytest.mark.parametrize("days, expected", [
    (1, "micro"),
    (10, "micro"),
    (11, "small"),
    (25, "small"),
    (26, "monthly"),
    (100, "monthly"),
    (1000, "monthly"),
])
def test_classify_order_type(days, expected):
    assert classify_order_type(days) == expected


def test_hourly_working_cost():
    b = calculate_breakdown(_inputs(), 1000)
    assert b.working_cost == pytest.approx(40000)


def test_double_shift_doubles_working_cost():
    b = calculate_breakdown(_inputs(shift="double"), 1000)
    assert b.working_cost == pytest.approx(80000)


def test_monthly_working_cost_bills_one_month():
    b = calculate_breakdown(_inputs(order_type="monthly", number_of_days=30), 26000)
    assert b.working_cost == pytest.approx(26000)


def test_zero_working_hours_fall_back_to_eight():
    b = calculate_breakdown(_inputs(working_hours=0), 1000)
    assert b.working_cost == pytest.approx(40000)


@pytest.mark.parametrize("level, expected", [("low", 500), ("medium", 1000), ("high", 1500)])
def test_risk_adjustment(level, expected):
    b = calculate_breakdown(_inputs(risk_factor=level), 10000)
    assert b.risk_adjustment == pytest.approx(expected)


@pytest.mark.parametrize("usage, expected", [("normal", 500), ("heavy", 1000)])
def test_usage_load_factor(usage, expected):
    b = calculate_breakdown(_inputs(usage=usage), 10000)
    assert b.usage_load_factor == pytest.approx(expected)


def test_mob_demob_cost():
    assert calc_mob_demob_cost(100, 50, 10, 2000) == pytest.approx(11000)


def test_mob_demob_in_breakdown_uses_running_cost():
    b = calculate_breakdown(
        _inputs(site_distance=100, running_cost_per_km=50, mob_relaxation=10, mob_demob=2000), 1000
    )
    assert b.mob_demob_cost == pytest.approx(11000)


def test_gst_on_subtotal():
    # 80000 working + 50 usage + 50 risk + 19900 extra = 100000
    inputs = _inputs(number_of_days=10, extra_charge=19900)
    with_gst = calculate_breakdown(replace(inputs, include_gst=True), 1000)
    without_gst = calculate_breakdown(inputs, 1000)

    assert without_gst.subtotal == pytest.approx(100000)
    assert without_gst.gst_amount == 0
    assert without_gst.total_amount == pytest.approx(100000)
    assert with_gst.gst_amount == pytest.approx(18000)
    assert with_gst.total_amount == pytest.approx(118000)


def test_food_and_accommodation_daily():
    cost = calc_food_accom_cost(2, 1, 13, RateTables())
    assert cost == pytest.approx(4500)


def test_food_and_accommodation_monthly():
    cost = calc_food_accom_cost(2, 1, 30, RateTables())
    assert cost == pytest.approx(9000)


def test_extra_charges_price_only_rigger_and_helper():
    rates = RateTables()
    total = calc_extra_charges(
        1000, ("incident1", "incident3"), ("rigger", "helper", "area", "customerReputation"), rates
    )
    assert total == pytest.approx(1000 + 5000 + 15000 + 40000 + 12000)


def test_elongation_only_when_enabled():
    off = calculate_breakdown(_inputs(), 1000)
    on = calculate_breakdown(_inputs(), 1000, include_elongation=True)
    assert off.elongation_cost == 0
    assert on.elongation_cost == pytest.approx(6000)
    assert on.subtotal - off.subtotal == pytest.approx(6000)


def test_same_inputs_give_same_breakdown():
    inputs = _inputs(food_resources=3, site_distance=12.5, running_cost_per_km=40, other_factors=("rigger",))
    assert calculate_breakdown(inputs, 1234.5) == calculate_breakdown(inputs, 1234.5)


@pytest.mark.parametrize("days, base_rate", [(0, 1000), (5, 0), (None, 1000), (5, None)])
def test_missing_days_or_rate_gives_zero_breakdown(days, base_rate):
    b = calculate_breakdown(_inputs(number_of_days=days, extra_charge=500), base_rate)
    assert b == CostBreakdown()


def test_configured_rates_change_the_price():
    rates = RateTables.from_config({}, {"riskFactors": {"low": 20}})
    b = calculate_breakdown(_inputs(), 10000, rates)
    assert b.risk_adjustment == pytest.approx(2000)


def test_legacy_light_usage_rate_is_read_as_normal():
    rates = RateTables.from_config({}, {"usageRates": {"light": 7, "heavy": 12}})
    assert rates.usage_rates == {"normal": 7.0, "heavy": 12.0}


def test_resolve_base_rate():
    rates = {"micro": 1000, "small": 900, "monthly": 26000, "yearly": 24000}
    assert resolve_base_rate(rates, "yearly") == 24000
    assert resolve_base_rate(rates, "weekly") == 0.0
    assert resolve_base_rate({}, "micro") == 0.0


def test_breakdown_for_saved_row_matches_direct_calculation():
    class Row:
        order_type = "small"
        number_of_days = 12
        working_hours = 10
        shift = "single"
        day_night = "night"
        usage = "heavy"
        risk_factor = "medium"
        food_resources = 2
        accom_resources = 2
        site_distance = 40
        running_cost_per_km = 60
        mob_demob = 1500
        mob_relaxation = 0
        extra_charge = 0
        incidental_charges = ["incident2"]
        other_factors = ["helper"]
        include_gst = True
        include_elongation = False
        base_rate = 900

    direct = calculate_breakdown(
        QuotationInputs(
            order_type="small", number_of_days=12, working_hours=10, day_night="night", usage="heavy",
            risk_factor="medium", food_resources=2, accom_resources=2, site_distance=40,
            running_cost_per_km=60, mob_demob=1500, incidental_charges=("incident2",),
            other_factors=("helper",), include_gst=True,
        ),
        900,
    )
    assert calc_breakdown_for_quotation(Row()) == direct
