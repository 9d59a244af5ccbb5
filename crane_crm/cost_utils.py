# --- レンタル見積 料金計算 ---
from dataclasses import dataclass, field, asdict, fields
from typing import Dict, Tuple

ORDER_TYPES = ("micro", "small", "monthly", "yearly")
HOURLY_ORDER_TYPES = ("micro", "small")

MONTHLY_BILLING_DAYS = 26
MICRO_MAX_DAYS = 10
SMALL_MAX_DAYS = 25
DEFAULT_WORKING_HOURS = 8.0

GST_RATE = 0.18
ELONGATION_RATE = 0.15

SHIFTS = ("single", "double")
DAY_NIGHT = ("day", "night")
USAGE_TYPES = ("normal", "heavy")
RISK_LEVELS = ("low", "medium", "high")
INCIDENTAL_KEYS = ("incident1", "incident2", "incident3")
OTHER_FACTOR_KEYS = ("rigger", "helper", "area", "condition", "customerReputation")
# area / condition / customerReputation are tags only
PRICED_OTHER_FACTORS = ("rigger", "helper")


def _safe_float(value, default=0.0):
    try:
        return float(value) if value not in (None, "") else default
    except (TypeError, ValueError):
        return default


def classify_order_type(number_of_days):
    """
    Billing bucket for a rental length. First match wins:
    >25 days monthly, 11-25 small, otherwise micro.
    yearly is never derived here.
    """
    days = _safe_float(number_of_days)
    if days > SMALL_MAX_DAYS:
        return "monthly"
    if days > MICRO_MAX_DAYS:
        return "small"
    return "micro"


def is_monthly_billing(number_of_days):
    return _safe_float(number_of_days) > SMALL_MAX_DAYS


def resolve_base_rate(base_rates, order_type):
    if not base_rates or order_type not in ORDER_TYPES:
        return 0.0
    return _safe_float(base_rates.get(order_type))


@dataclass
class RateTables:
    food_rate_per_month: float = 2500.0
    accommodation_rate_per_month: float = 4000.0
    usage_rates: Dict[str, float] = field(default_factory=lambda: {"normal": 5.0, "heavy": 10.0})
    risk_factors: Dict[str, float] = field(default_factory=lambda: {"low": 5.0, "medium": 10.0, "high": 15.0})
    incidental_charges: Dict[str, float] = field(
        default_factory=lambda: {"incident1": 5000.0, "incident2": 10000.0, "incident3": 15000.0}
    )
    other_factors: Dict[str, float] = field(
        default_factory=lambda: {
            "rigger": 40000.0,
            "helper": 12000.0,
            "area": 5000.0,
            "condition": 7000.0,
            "customerReputation": 8000.0,
        }
    )

    @classmethod
    def from_config(cls, resource_rates, additional_params):
        """Build rate tables from the two configuration documents."""
        defaults = cls()
        resource_rates = resource_rates or {}
        additional_params = additional_params or {}

        usage = dict(additional_params.get("usageRates") or {})
        # 旧データは normal を light で保存している
        if "normal" not in usage and "light" in usage:
            usage["normal"] = usage["light"]

        return cls(
            food_rate_per_month=_safe_float(
                resource_rates.get("foodRatePerMonth"), defaults.food_rate_per_month
            ),
            accommodation_rate_per_month=_safe_float(
                resource_rates.get("accommodationRatePerMonth"), defaults.accommodation_rate_per_month
            ),
            usage_rates={k: _safe_float(usage.get(k), v) for k, v in defaults.usage_rates.items()},
            risk_factors={
                k: _safe_float((additional_params.get("riskFactors") or {}).get(k), v)
                for k, v in defaults.risk_factors.items()
            },
            incidental_charges={
                k: _safe_float((additional_params.get("incidentalCharges") or {}).get(k), v)
                for k, v in defaults.incidental_charges.items()
            },
            other_factors={
                k: _safe_float((additional_params.get("otherFactors") or {}).get(k), v)
                for k, v in defaults.other_factors.items()
            },
        )


@dataclass(frozen=True)
class QuotationInputs:
    order_type: str = "micro"
    number_of_days: int = 0
    working_hours: float = DEFAULT_WORKING_HOURS
    shift: str = "single"
    day_night: str = "day"
    usage: str = "normal"
    risk_factor: str = "low"
    food_resources: int = 0
    accom_resources: int = 0
    site_distance: float = 0.0
    running_cost_per_km: float = 0.0
    mob_demob: float = 0.0
    mob_relaxation: float = 0.0
    extra_charge: float = 0.0
    incidental_charges: Tuple[str, ...] = ()
    other_factors: Tuple[str, ...] = ()
    include_gst: bool = True


@dataclass(frozen=True)
class CostBreakdown:
    working_cost: float = 0.0
    elongation_cost: float = 0.0
    food_accom_cost: float = 0.0
    mob_demob_cost: float = 0.0
    risk_adjustment: float = 0.0
    usage_load_factor: float = 0.0
    extra_charges: float = 0.0
    subtotal: float = 0.0
    gst_amount: float = 0.0
    total_amount: float = 0.0

    def as_dict(self):
        return asdict(self)

    @classmethod
    def field_names(cls):
        return [f.name for f in fields(cls)]


def calc_working_cost(base_rate, working_hours, number_of_days, shift):
    effective_days = MONTHLY_BILLING_DAYS if is_monthly_billing(number_of_days) else number_of_days
    shift_multiplier = 2 if shift == "double" else 1
    if is_monthly_billing(number_of_days):
        # 月額 → 日額 → 時間単価に割ってから積み直す（浮動小数の経路を保つ）
        hourly_rate = (base_rate / MONTHLY_BILLING_DAYS) / working_hours
        return hourly_rate * working_hours * effective_days * shift_multiplier
    return base_rate * working_hours * effective_days * shift_multiplier


def calc_food_accom_cost(food_resources, accom_resources, number_of_days, rates):
    if is_monthly_billing(number_of_days):
        return (
            food_resources * rates.food_rate_per_month
            + accom_resources * rates.accommodation_rate_per_month
        )
    food_daily_rate = rates.food_rate_per_month / MONTHLY_BILLING_DAYS
    accom_daily_rate = rates.accommodation_rate_per_month / MONTHLY_BILLING_DAYS
    return (food_resources * food_daily_rate + accom_resources * accom_daily_rate) * number_of_days


def calc_mob_demob_cost(site_distance, running_cost_per_km, mob_relaxation, trailer_cost):
    # 往復
    dist_to_site_cost = site_distance * running_cost_per_km * 2
    relaxation_amount = dist_to_site_cost * mob_relaxation / 100
    return (dist_to_site_cost - relaxation_amount) + trailer_cost


def calc_extra_charges(extra_charge, incidental_charges, other_factors, rates):
    total = extra_charge
    for key in incidental_charges:
        total += rates.incidental_charges.get(key, 0.0)
    for key in PRICED_OTHER_FACTORS:
        if key in other_factors:
            total += rates.other_factors.get(key, 0.0)
    return total


def calculate_breakdown(inputs, base_rate, rates=None, include_elongation=False):
    """
    Price a rental request.

    Args:
        inputs: QuotationInputs
        base_rate: equipment rate for the active order type
            (per hour for micro/small, per month for monthly/yearly)
        rates: RateTables built from the resource-rate and
            additional-parameter configuration
        include_elongation: add the 15% elongation line item
    Returns:
        CostBreakdown. All zero while days or base rate are missing.
    """
    rates = rates or RateTables()
    base_rate = _safe_float(base_rate)
    days = int(_safe_float(inputs.number_of_days))
    if not days or not base_rate:
        return CostBreakdown()

    working_hours = _safe_float(inputs.working_hours) or DEFAULT_WORKING_HOURS

    working_cost = calc_working_cost(base_rate, working_hours, days, inputs.shift)
    usage_load_factor = base_rate * (rates.usage_rates.get(inputs.usage, 0.0) / 100)
    food_accom_cost = calc_food_accom_cost(
        _safe_float(inputs.food_resources),
        _safe_float(inputs.accom_resources),
        days,
        rates,
    )
    mob_demob_cost = calc_mob_demob_cost(
        _safe_float(inputs.site_distance),
        _safe_float(inputs.running_cost_per_km),
        _safe_float(inputs.mob_relaxation),
        _safe_float(inputs.mob_demob),
    )
    risk_adjustment = base_rate * (rates.risk_factors.get(inputs.risk_factor, 0.0) / 100)
    extra_charges = calc_extra_charges(
        _safe_float(inputs.extra_charge),
        inputs.incidental_charges,
        inputs.other_factors,
        rates,
    )
    elongation_cost = working_cost * ELONGATION_RATE if include_elongation else 0.0

    subtotal = (
        working_cost
        + elongation_cost
        + food_accom_cost
        + mob_demob_cost
        + risk_adjustment
        + usage_load_factor
        + extra_charges
    )
    gst_amount = subtotal * GST_RATE if inputs.include_gst else 0.0

    return CostBreakdown(
        working_cost=working_cost,
        elongation_cost=elongation_cost,
        food_accom_cost=food_accom_cost,
        mob_demob_cost=mob_demob_cost,
        risk_adjustment=risk_adjustment,
        usage_load_factor=usage_load_factor,
        extra_charges=extra_charges,
        subtotal=subtotal,
        gst_amount=gst_amount,
        total_amount=subtotal + gst_amount,
    )


def inputs_from_quotation(quotation):
    """Rebuild QuotationInputs from a saved Quotation row."""
    return QuotationInputs(
        order_type=getattr(quotation, "order_type", "micro") or "micro",
        number_of_days=int(_safe_float(getattr(quotation, "number_of_days", 0))),
        working_hours=_safe_float(getattr(quotation, "working_hours", None), DEFAULT_WORKING_HOURS),
        shift=getattr(quotation, "shift", "single") or "single",
        day_night=getattr(quotation, "day_night", "day") or "day",
        usage=getattr(quotation, "usage", "normal") or "normal",
        risk_factor=getattr(quotation, "risk_factor", "low") or "low",
        food_resources=int(_safe_float(getattr(quotation, "food_resources", 0))),
        accom_resources=int(_safe_float(getattr(quotation, "accom_resources", 0))),
        site_distance=_safe_float(getattr(quotation, "site_distance", 0)),
        running_cost_per_km=_safe_float(getattr(quotation, "running_cost_per_km", 0)),
        mob_demob=_safe_float(getattr(quotation, "mob_demob", 0)),
        mob_relaxation=_safe_float(getattr(quotation, "mob_relaxation", 0)),
        extra_charge=_safe_float(getattr(quotation, "extra_charge", 0)),
        incidental_charges=tuple(getattr(quotation, "incidental_charges", None) or ()),
        other_factors=tuple(getattr(quotation, "other_factors", None) or ()),
        include_gst=bool(getattr(quotation, "include_gst", True)),
    )


def calc_breakdown_for_quotation(quotation, rates=None):
    """
    Quotation インスタンスから入力を読み取り、保存時と同じロジックで内訳を再計算する。
    """
    return calculate_breakdown(
        inputs_from_quotation(quotation),
        getattr(quotation, "base_rate", 0),
        rates,
        include_elongation=bool(getattr(quotation, "include_elongation", False)),
    )
