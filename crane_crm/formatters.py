import math
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP


def _group_indian(digits):
    # 1,23,45,678 形式（下3桁、以降2桁区切り）
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_currency(amount):
    """Whole-rupee INR display, e.g. 118000 -> '₹1,18,000'."""
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return "₹0"
    if math.isnan(value) or math.isinf(value):
        return "₹0"
    rounded = Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    return f"{sign}₹{_group_indian(str(abs(int(rounded))))}"


def format_date(value):
    """en-IN short date, e.g. 19/10/2026."""
    if not value:
        return ""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    if isinstance(value, (date, datetime)):
        return f"{value.day}/{value.month}/{value.year}"
    return str(value)


def format_time(value):
    if not value:
        return ""
    hour = value.hour % 12 or 12
    suffix = "am" if value.hour < 12 else "pm"
    return f"{hour}:{value.minute:02d}:{value.second:02d} {suffix}"


def title_label(value):
    """'pick_and_carry_crane' -> 'Pick And Carry Crane'"""
    if not value:
        return ""
    return " ".join(part.capitalize() for part in str(value).replace("-", "_").split("_") if part)
