from datetime import date, datetime

import pytest

from crane_crm.formatters import format_currency, format_date, format_time, title_label


@pytest.mark.parametrize("amount, expected", [
    (118000, "₹1,18,000"),
    (999, "₹999"),
    (1000, "₹1,000"),
    (1234567.5, "₹12,34,568"),
    (2.5, "₹3"),
    (0, "₹0"),
    (-500, "-₹500"),
    (None, "₹0"),
    ("abc", "₹0"),
    (float("nan"), "₹0"),
])
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_format_date():
    assert format_date(date(2026, 10, 5)) == "5/10/2026"
    assert format_date(datetime(2026, 1, 19, 14, 30)) == "19/1/2026"
    assert format_date("2026-03-01") == "1/3/2026"
    assert format_date(None) == ""


def test_format_time():
    assert format_time(datetime(2026, 1, 1, 14, 5, 9)) == "2:05:09 pm"
    assert format_time(datetime(2026, 1, 1, 0, 0, 0)) == "12:00:00 am"


def test_title_label():
    assert title_label("pick_and_carry_crane") == "Pick And Carry Crane"
    assert title_label("in_process") == "In Process"
    assert title_label("") == ""
