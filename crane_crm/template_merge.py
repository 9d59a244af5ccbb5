"""
Placeholder substitution for quotation documents.

Templates are HTML/text with ``{{placeholder}}`` tokens. A quotation is first
converted into a TemplateContext holding one string per known placeholder;
merge_template then replaces each token. Tokens outside the catalogue are
logged and replaced with FALLBACK_MARKER.
"""
import logging
import re
from collections import namedtuple
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta

from crane_crm.formatters import format_currency, format_date, format_time

logger = logging.getLogger(__name__)

FALLBACK_MARKER = "[Data not available]"
PLACEHOLDER_RE = re.compile(r"\{\{\s*([^{}]+?)\s*\}\}")

Placeholder = namedtuple("Placeholder", ["key", "description", "category"])

PLACEHOLDERS = (
    Placeholder("customer_name", "Customer full name", "Customer"),
    Placeholder("customer_email", "Customer email address", "Customer"),
    Placeholder("customer_phone", "Customer phone number", "Customer"),
    Placeholder("customer_company", "Customer company name", "Customer"),
    Placeholder("customer_address", "Customer address", "Customer"),
    Placeholder("customer_designation", "Customer designation/title", "Customer"),
    Placeholder("quotation_id", "Quotation ID (short)", "Quotation"),
    Placeholder("quotation_number", "Full quotation number", "Quotation"),
    Placeholder("quotation_date", "Quotation creation date", "Quotation"),
    Placeholder("valid_until", "Quotation validity end date", "Quotation"),
    Placeholder("created_date", "Quotation creation date", "Quotation"),
    Placeholder("equipment_name", "Equipment full name", "Equipment"),
    Placeholder("equipment_id", "Equipment ID", "Equipment"),
    Placeholder("equipment_capacity", "Equipment capacity/specifications", "Equipment"),
    Placeholder("equipment_type", "Equipment type", "Equipment"),
    Placeholder("project_duration", "Project duration in days", "Project"),
    Placeholder("working_hours", "Working hours per day", "Project"),
    Placeholder("shift_type", "Single or double shift", "Project"),
    Placeholder("day_night", "Day or night shift", "Project"),
    Placeholder("order_type", "Order type (micro/small/monthly/yearly)", "Project"),
    Placeholder("usage_type", "Usage type (normal/heavy)", "Project"),
    Placeholder("risk_factor", "Risk factor level", "Project"),
    Placeholder("site_location", "Project site location", "Location"),
    Placeholder("site_distance", "Distance to site", "Location"),
    Placeholder("mob_demob_cost", "Mobilization/demobilization cost", "Location"),
    Placeholder("base_rate", "Base equipment rate", "Pricing"),
    Placeholder("working_cost", "Working cost", "Pricing"),
    Placeholder("elongation_cost", "Elongation cost", "Pricing"),
    Placeholder("food_accom_cost", "Food and accommodation cost", "Pricing"),
    Placeholder("risk_adjustment", "Risk adjustment", "Pricing"),
    Placeholder("usage_load_factor", "Usage load factor", "Pricing"),
    Placeholder("total_amount", "Total quotation amount", "Pricing"),
    Placeholder("subtotal", "Subtotal before GST", "Pricing"),
    Placeholder("gst_amount", "GST amount", "Pricing"),
    Placeholder("gst_applicable", "Whether GST is applicable", "Pricing"),
    Placeholder("extra_charges", "Additional charges", "Pricing"),
    Placeholder("food_resources", "Number of food resources", "Resources"),
    Placeholder("accommodation_resources", "Number of accommodation resources", "Resources"),
    Placeholder("company_name", "Company name", "Company"),
    Placeholder("company_address", "Company address", "Company"),
    Placeholder("company_phone", "Company phone number", "Company"),
    Placeholder("company_email", "Company email", "Company"),
    Placeholder("company_gst", "Company GST number", "Company"),
    Placeholder("company_pan", "Company PAN number", "Company"),
    Placeholder("terms_conditions", "Terms and conditions", "Additional"),
    Placeholder("payment_terms", "Payment terms", "Additional"),
    Placeholder("validity_period", "Quotation validity period", "Additional"),
    Placeholder("notes", "Additional notes", "Additional"),
    Placeholder("current_date", "Current date", "Dates"),
    Placeholder("current_time", "Current time", "Dates"),
    Placeholder("current_year", "Current year", "Dates"),
)

PLACEHOLDER_KEYS = tuple(p.key for p in PLACEHOLDERS)


@dataclass(frozen=True)
class TemplateContext:
    customer_name: str = "N/A"
    customer_email: str = "N/A"
    customer_phone: str = "N/A"
    customer_company: str = "N/A"
    customer_address: str = "N/A"
    customer_designation: str = "N/A"
    quotation_id: str = "N/A"
    quotation_number: str = "N/A"
    quotation_date: str = ""
    valid_until: str = ""
    created_date: str = ""
    equipment_name: str = "N/A"
    equipment_id: str = "N/A"
    equipment_capacity: str = "N/A"
    equipment_type: str = "N/A"
    project_duration: str = ""
    working_hours: str = ""
    shift_type: str = ""
    day_night: str = ""
    order_type: str = ""
    usage_type: str = ""
    risk_factor: str = ""
    site_location: str = "N/A"
    site_distance: str = ""
    mob_demob_cost: str = ""
    base_rate: str = ""
    working_cost: str = ""
    elongation_cost: str = ""
    food_accom_cost: str = ""
    risk_adjustment: str = ""
    usage_load_factor: str = ""
    total_amount: str = ""
    subtotal: str = ""
    gst_amount: str = ""
    gst_applicable: str = ""
    extra_charges: str = ""
    food_resources: str = "0"
    accommodation_resources: str = "0"
    company_name: str = ""
    company_address: str = ""
    company_phone: str = ""
    company_email: str = ""
    company_gst: str = ""
    company_pan: str = ""
    terms_conditions: str = ""
    payment_terms: str = ""
    validity_period: str = ""
    notes: str = ""
    current_date: str = ""
    current_time: str = ""
    current_year: str = ""

    def as_dict(self):
        return asdict(self)


def company_from_config(config):
    return {
        "name": config.get("COMPANY_NAME", ""),
        "address": config.get("COMPANY_ADDRESS", ""),
        "phone": config.get("COMPANY_PHONE", ""),
        "email": config.get("COMPANY_EMAIL", ""),
        "gst": config.get("COMPANY_GST", ""),
        "pan": config.get("COMPANY_PAN", ""),
        "payment_terms": config.get("PAYMENT_TERMS", ""),
        "terms_conditions": config.get("TERMS_CONDITIONS", ""),
        "validity_days": int(config.get("QUOTATION_VALIDITY_DAYS", 30)),
    }


def quotation_to_context(quotation, company, now=None):
    """Build the template context for a saved quotation."""
    now = now or datetime.now()
    contact = quotation.customer_contact or {}
    equipment = quotation.selected_equipment or {}
    created = quotation.created_at or now
    validity_days = company.get("validity_days", 30)
    equipment_name = equipment.get("name") or "N/A"
    per = "/month" if quotation.order_type in ("monthly", "yearly") else "/hour"

    return TemplateContext(
        customer_name=contact.get("name") or quotation.customer_name or "N/A",
        customer_email=contact.get("email") or "N/A",
        customer_phone=contact.get("phone") or "N/A",
        customer_company=contact.get("company") or "N/A",
        customer_address=contact.get("address") or "N/A",
        customer_designation=contact.get("designation") or "N/A",
        quotation_id=str(quotation.id),
        quotation_number=quotation.quotation_number,
        quotation_date=format_date(created),
        valid_until=format_date(created + timedelta(days=validity_days)),
        created_date=format_date(created),
        equipment_name=equipment_name,
        equipment_id=equipment.get("equipmentId") or "N/A",
        equipment_capacity=equipment_name,
        equipment_type=equipment_name.split(" ")[0] if equipment_name != "N/A" else "N/A",
        project_duration=f"{quotation.number_of_days} days",
        working_hours=f"{quotation.working_hours:g} hours/day",
        shift_type="Double Shift" if quotation.shift == "double" else "Single Shift",
        day_night="Day Shift" if quotation.day_night == "day" else "Night Shift",
        order_type=quotation.order_type.capitalize(),
        usage_type="Heavy Usage" if quotation.usage == "heavy" else "Normal Usage",
        risk_factor=f"{quotation.risk_factor.capitalize()} Risk",
        site_location=contact.get("address") or "N/A",
        site_distance=f"{quotation.site_distance:g} km",
        mob_demob_cost=format_currency(quotation.mob_demob_cost),
        base_rate=f"{format_currency(quotation.base_rate)}{per}",
        working_cost=format_currency(quotation.working_cost),
        elongation_cost=format_currency(quotation.elongation_cost),
        food_accom_cost=format_currency(quotation.food_accom_cost),
        risk_adjustment=format_currency(quotation.risk_adjustment),
        usage_load_factor=format_currency(quotation.usage_load_factor),
        total_amount=format_currency(quotation.total_rent),
        subtotal=format_currency(quotation.subtotal),
        gst_amount=format_currency(quotation.gst_amount),
        gst_applicable="Yes (18%)" if quotation.include_gst else "No",
        extra_charges=format_currency(quotation.extra_charges),
        food_resources=str(quotation.food_resources),
        accommodation_resources=str(quotation.accom_resources),
        company_name=company.get("name", ""),
        company_address=company.get("address", ""),
        company_phone=company.get("phone", ""),
        company_email=company.get("email", ""),
        company_gst=company.get("gst", ""),
        company_pan=company.get("pan", ""),
        terms_conditions=company.get("terms_conditions", ""),
        payment_terms=company.get("payment_terms", ""),
        validity_period=f"{validity_days} days from quotation date",
        notes=quotation.notes or "Thank you for your business!",
        current_date=format_date(now),
        current_time=format_time(now),
        current_year=str(now.year),
    )


def merge_template(content, context, escape=None):
    """
    Replace every {{placeholder}} in content with its context value.
    escape, when given, is applied to each value (HTML documents).
    """
    values = context.as_dict()
    if escape is not None:
        values = {k: str(escape(v)) for k, v in values.items()}
    unknown = []

    def _replace(match):
        key = match.group(1)
        if key in values:
            return values[key]
        unknown.append(key)
        return FALLBACK_MARKER

    merged = PLACEHOLDER_RE.sub(_replace, content or "")
    if unknown:
        logger.warning("[TEMPLATE] unknown placeholders replaced: %s", sorted(set(unknown)))
    return merged


def validate_template(content):
    """
    Returns:
        {"is_valid": bool, "errors": [...], "warnings": [...]}
        Unknown placeholders are warnings; unbalanced braces are errors.
    """
    content = content or ""
    errors = []
    warnings = []
    for key in PLACEHOLDER_RE.findall(content):
        if key not in PLACEHOLDER_KEYS:
            warnings.append(f"Unknown placeholder: {{{{{key}}}}}")
    if content.count("{{") != content.count("}}"):
        errors.append("Template contains unbalanced placeholder brackets")
    return {"is_valid": not errors, "errors": errors, "warnings": warnings}


def placeholders_by_category():
    grouped = {}
    for p in PLACEHOLDERS:
        grouped.setdefault(p.category, []).append(p)
    return grouped
