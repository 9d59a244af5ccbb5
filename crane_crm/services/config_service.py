"""
Configuration documents.

Each configuration entity is stored as one ConfigDocument row keyed by name.
Reading a document that does not exist yet writes the built-in defaults back
and returns them. Updates are read-modify-write of the top-level keys; the
last writer wins.
"""
import copy
import logging
from sqlalchemy.exc import SQLAlchemyError
from crane_crm import db
from crane_crm.cost_utils import ORDER_TYPES, RateTables, _safe_float
from crane_crm.errors import RemoteError, ValidationError
from crane_crm.models.config_document import ConfigDocument
from crane_crm.services import commit_or_raise

logger = logging.getLogger(__name__)

QUOTATION_CONFIG_KEY = "quotation"
RESOURCE_RATES_KEY = "resourceRates"
ADDITIONAL_PARAMS_KEY = "additionalParams"
DEFAULT_TEMPLATE_KEY = "defaultTemplate"

DEFAULT_QUOTATION_CONFIG = {
    "orderTypeLimits": {
        "micro": {"minDays": 1, "maxDays": 10},
        "small": {"minDays": 11, "maxDays": 25},
        "monthly": {"minDays": 26, "maxDays": 365},
        "yearly": {"minDays": 366, "maxDays": 3650},
    }
}

DEFAULT_RESOURCE_RATES = {
    "foodRatePerMonth": 2500,
    "accommodationRatePerMonth": 4000,
}

DEFAULT_ADDITIONAL_PARAMS = {
    "usageRates": {"normal": 5, "heavy": 10},
    "riskFactors": {"low": 5, "medium": 10, "high": 15},
    "incidentalCharges": {"incident1": 5000, "incident2": 10000, "incident3": 15000},
    "otherFactors": {
        "rigger": 40000,
        "helper": 12000,
        "area": 5000,
        "condition": 7000,
        "customerReputation": 8000,
    },
}

DEFAULT_TEMPLATE_CONFIG = {"defaultTemplateId": None}

DEFAULTS = {
    QUOTATION_CONFIG_KEY: DEFAULT_QUOTATION_CONFIG,
    RESOURCE_RATES_KEY: DEFAULT_RESOURCE_RATES,
    ADDITIONAL_PARAMS_KEY: DEFAULT_ADDITIONAL_PARAMS,
    DEFAULT_TEMPLATE_KEY: DEFAULT_TEMPLATE_CONFIG,
}


def _find(key):
    try:
        return ConfigDocument.query.filter_by(key=key).first()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("[CONFIG] read %s failed: %s", key, e)
        raise RemoteError(f"Error loading {key} configuration", original=e)


def load_or_initialize(key, defaults=None):
    """Return the stored document, writing the defaults first if it is absent."""
    if defaults is None:
        defaults = DEFAULTS[key]
    doc = _find(key)
    if doc is None:
        logger.info("[CONFIG] %s not found; writing defaults", key)
        db.session.add(ConfigDocument(key=key, data=copy.deepcopy(defaults)))
        commit_or_raise(f"initializing {key} configuration")
        return copy.deepcopy(defaults)
    return copy.deepcopy(doc.data)


def save_document(key, updates):
    current = load_or_initialize(key)
    merged = {**current, **copy.deepcopy(updates)}
    doc = _find(key)
    # JSON 列は再代入しないと変更検知されない
    doc.data = merged
    commit_or_raise(f"saving {key} configuration")
    logger.info("[CONFIG] %s updated keys=%s", key, sorted(updates.keys()))
    return copy.deepcopy(merged)


# --- order type limits ---
def validate_order_type_limits(limits):
    """
    Order types must cover increasing, non-overlapping day ranges in the
    order micro, small, monthly, yearly.
    """
    previous_max = 0
    for order_type in ORDER_TYPES:
        entry = (limits or {}).get(order_type)
        if not entry:
            raise ValidationError(f"{order_type.capitalize()} limits are missing", field=order_type)
        min_days = _safe_float(entry.get("minDays"))
        max_days = _safe_float(entry.get("maxDays"))
        if min_days <= previous_max:
            raise ValidationError(
                f"{order_type.capitalize()} minimum days must be greater than previous maximum",
                field=order_type,
            )
        if max_days <= min_days:
            raise ValidationError(
                f"{order_type.capitalize()} maximum days must be greater than minimum days",
                field=order_type,
            )
        previous_max = max_days


def get_quotation_config():
    return load_or_initialize(QUOTATION_CONFIG_KEY)


def update_quotation_config(updates):
    if "orderTypeLimits" in updates:
        validate_order_type_limits(updates["orderTypeLimits"])
    return save_document(QUOTATION_CONFIG_KEY, updates)


# --- resource rates ---
def get_resource_rates_config():
    return load_or_initialize(RESOURCE_RATES_KEY)


def update_resource_rates_config(updates):
    for name, value in updates.items():
        if _safe_float(value, -1) < 0:
            raise ValidationError(f"{name} must be a non-negative number", field=name)
    return save_document(RESOURCE_RATES_KEY, updates)


# --- additional params ---
def get_additional_params_config():
    data = load_or_initialize(ADDITIONAL_PARAMS_KEY)
    usage = data.get("usageRates") or {}
    if "normal" not in usage and "light" in usage:
        usage["normal"] = usage.pop("light")
        data["usageRates"] = usage
    return data


def update_additional_params_config(updates):
    for section, values in updates.items():
        if not isinstance(values, dict):
            raise ValidationError(f"{section} must be a mapping", field=section)
        for name, value in values.items():
            if _safe_float(value, -1) < 0:
                raise ValidationError(f"{section}.{name} must be a non-negative number", field=name)
    # セクション内は送信されたキーのみ上書き
    current = get_additional_params_config()
    merged = {section: {**(current.get(section) or {}), **values} for section, values in updates.items()}
    return save_document(ADDITIONAL_PARAMS_KEY, merged)


# --- default template ---
def get_default_template_config():
    return load_or_initialize(DEFAULT_TEMPLATE_KEY)


def update_default_template_config(template_id):
    return save_document(DEFAULT_TEMPLATE_KEY, {"defaultTemplateId": template_id})


def get_rate_tables():
    """Rate tables for the pricing engine from the current configuration."""
    return RateTables.from_config(get_resource_rates_config(), get_additional_params_config())
