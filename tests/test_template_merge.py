import logging
from datetime import datetime
from types import SimpleNamespace

from markupsafe import escape

from crane_crm.template_merge import (
    FALLBACK_MARKER,
    PLACEHOLDER_KEYS,
    TemplateContext,
    merge_template,
    placeholders_by_category,
    quotation_to_context,
    validate_template,
)

COMPANY = {
    "name": "ASP Cranes",
    "address": "Mumbai",
    "phone": "+91 22 1234 5678",
    "email": "info@aspcranes.com",
    "gst": "27AABCS1429B1ZB",
    "pan": "AABCS1429B",
    "payment_terms": "50% advance",
    "terms_conditions": "Standard terms",
    "validity_days": 30,
}


def _quotation(**overrides):
    values = dict(
        id=7,
        quotation_number="QT0007",
        customer_name="Ravi Kumar",
        customer_contact={"name": "Ravi Kumar", "email": "ravi@example.com", "company": "Kumar Infra"},
        selected_equipment={"equipmentId": "EQ0001", "name": "Liebherr LTM 1100"},
        created_at=datetime(2026, 1, 10, 9, 0),
        order_type="small",
        number_of_days=12,
        working_hours=8.0,
        shift="double",
        day_night="day",
        usage="heavy",
        risk_factor="medium",
        site_distance=40.0,
        mob_demob_cost=5500.0,
        base_rate=900.0,
        working_cost=172800.0,
        elongation_cost=0.0,
        food_accom_cost=0.0,
        risk_adjustment=90.0,
        usage_load_factor=90.0,
        extra_charges=0.0,
        subtotal=100000.0,
        gst_amount=18000.0,
        total_rent=118000.0,
        include_gst=True,
        food_resources=2,
        accom_resources=1,
        notes=None,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_context_fields_match_catalogue():
    assert set(TemplateContext().as_dict()) == set(PLACEHOLDER_KEYS)
    assert "Customer" in placeholders_by_category()


def test_quotation_context_values():
    context = quotation_to_context(_quotation(), COMPANY, now=datetime(2026, 1, 12, 15, 0))
    assert context.customer_name == "Ravi Kumar"
    assert context.customer_phone == "N/A"
    assert context.total_amount == "₹1,18,000"
    assert context.base_rate == "₹900/hour"
    assert context.quotation_date == "10/1/2026"
    assert context.valid_until == "9/2/2026"
    assert context.shift_type == "Double Shift"
    assert context.gst_applicable == "Yes (18%)"
    assert context.notes == "Thank you for your business!"
    assert context.current_year == "2026"


def test_merge_replaces_known_placeholders():
    context = TemplateContext(customer_name="Ravi", total_amount="₹1,18,000")
    merged = merge_template("Dear {{customer_name}}, total {{ total_amount }}.", context)
    assert merged == "Dear Ravi, total ₹1,18,000."


def test_unknown_placeholder_uses_marker_and_logs(caplog):
    with caplog.at_level(logging.WARNING):
        merged = merge_template("Site: {{site_manager}}", TemplateContext())
    assert merged == f"Site: {FALLBACK_MARKER}"
    assert "site_manager" in caplog.text


def test_merge_escapes_values_for_html():
    context = TemplateContext(customer_name="<script>x</script>")
    merged = merge_template("<p>{{customer_name}}</p>", context, escape=escape)
    assert "<script>" not in merged
    assert "&lt;script&gt;" in merged


def test_validate_template():
    ok = validate_template("Hello {{customer_name}}")
    assert ok == {"is_valid": True, "errors": [], "warnings": []}

    unknown = validate_template("Hello {{nickname}}")
    assert unknown["is_valid"]
    assert unknown["warnings"] == ["Unknown placeholder: {{nickname}}"]

    broken = validate_template("Hello {{customer_name}")
    assert not broken["is_valid"]
    assert broken["errors"]
