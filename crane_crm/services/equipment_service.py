import logging
import re
from crane_crm import db
from crane_crm.cost_utils import ORDER_TYPES
from crane_crm.errors import NotFoundError, ValidationError
from crane_crm.models.equipment import CraneCategory, Equipment, EquipmentStatus
from crane_crm.services import commit_or_raise
from crane_crm.services import sequences

logger = logging.getLogger(__name__)

MONTH_RE = re.compile(r"^\d{4}-\d{2}$")
CATEGORIES = [c.value for c in CraneCategory]
STATUSES = [s.value for s in EquipmentStatus]

_REQUIRED = (
    "name",
    "manufacturing_date",
    "registration_date",
    "max_lifting_capacity",
    "unladen_weight",
    "running_cost_per_km",
)
_NUMERIC = ("max_lifting_capacity", "unladen_weight", "running_cost_per_km")


def _blank(value):
    return value is None or str(value).strip() == ""


def _to_number(value, name):
    try:
        number = float(str(value).replace(",", "").strip())
    except (TypeError, ValueError):
        raise ValidationError("Please enter valid numbers for numeric fields", field=name)
    if number < 0:
        raise ValidationError("Numeric fields cannot be negative", field=name)
    return number


def validate_equipment_data(data):
    """
    Check and normalize an equipment payload.

    data keys: name, category, manufacturing_date, registration_date,
    max_lifting_capacity, unladen_weight, running_cost_per_km,
    base_rates {micro, small, monthly, yearly}, description, status
    """
    base_rates = data.get("base_rates") or {}
    missing = [k for k in _REQUIRED if _blank(data.get(k))]
    missing += [f"base_rates.{k}" for k in ORDER_TYPES if _blank(base_rates.get(k))]
    if missing:
        raise ValidationError("Please fill in all required fields", field=missing[0])

    if not MONTH_RE.match(data["manufacturing_date"].strip()) or not MONTH_RE.match(
        data["registration_date"].strip()
    ):
        raise ValidationError("Please enter valid dates in YYYY-MM format", field="manufacturing_date")

    category = data.get("category") or CraneCategory.MOBILE_CRANE.value
    if category not in CATEGORIES:
        raise ValidationError(f"Unknown crane category: {category}", field="category")
    status = data.get("status") or EquipmentStatus.AVAILABLE.value
    if status not in STATUSES:
        raise ValidationError(f"Unknown equipment status: {status}", field="status")

    cleaned = {
        "name": data["name"].strip(),
        "category": category,
        "manufacturing_date": data["manufacturing_date"].strip(),
        "registration_date": data["registration_date"].strip(),
        "description": (data.get("description") or "").strip() or None,
        "status": status,
    }
    for key in _NUMERIC:
        cleaned[key] = _to_number(data[key], key)
    for order_type in ORDER_TYPES:
        cleaned[f"base_rate_{order_type}"] = _to_number(base_rates[order_type], f"base_rates.{order_type}")
    return cleaned


def get_equipment():
    return Equipment.query.order_by(Equipment.equipment_code).all()


def get_equipment_by_category(category, available_only=False):
    query = Equipment.query.filter(Equipment.category == category)
    if available_only:
        query = query.filter(Equipment.status == EquipmentStatus.AVAILABLE.value)
    return query.order_by(Equipment.equipment_code).all()


def get_equipment_by_id(equipment_id):
    equipment = db.session.get(Equipment, equipment_id)
    if equipment is None:
        raise NotFoundError("Equipment not found")
    return equipment


def get_equipment_by_code(equipment_code):
    return Equipment.query.filter_by(equipment_code=equipment_code).first()


def create_equipment(data):
    cleaned = validate_equipment_data(data)
    equipment = Equipment(equipment_code=sequences.next_code(sequences.EQUIPMENT), **cleaned)
    db.session.add(equipment)
    commit_or_raise("creating equipment")
    logger.info("[EQUIPMENT] created %s name=%s", equipment.equipment_code, equipment.name)
    return equipment


def update_equipment(equipment_id, data):
    equipment = get_equipment_by_id(equipment_id)
    cleaned = validate_equipment_data(data)
    # equipment_code は変更不可
    for key, value in cleaned.items():
        setattr(equipment, key, value)
    commit_or_raise("updating equipment")
    logger.info("[EQUIPMENT] updated %s", equipment.equipment_code)
    return equipment


def delete_equipment(equipment_id):
    equipment = get_equipment_by_id(equipment_id)
    code = equipment.equipment_code
    db.session.delete(equipment)
    commit_or_raise("deleting equipment")
    logger.info("[EQUIPMENT] deleted %s", code)
