import logging
from crane_crm import db
from crane_crm.errors import NotFoundError, ValidationError
from crane_crm.models.lead import Lead, LeadStatus
from crane_crm.services import commit_or_raise

logger = logging.getLogger(__name__)

LEAD_STATUSES = [s.value for s in LeadStatus]
_TEXT_FIELDS = (
    "customer_name",
    "company_name",
    "email",
    "phone",
    "designation",
    "service_needed",
    "site_location",
    "start_date",
    "shift_timing",
    "notes",
)


def get_leads(status=None):
    query = Lead.query
    if status:
        query = query.filter(Lead.status == status)
    return query.order_by(Lead.created_at.desc()).all()


def get_lead_by_id(lead_id):
    lead = db.session.get(Lead, lead_id)
    if lead is None:
        raise NotFoundError("Lead not found")
    return lead


def create_lead(data, assigned_to_user_id=None):
    cleaned = {k: (data.get(k) or "").strip() for k in _TEXT_FIELDS}
    if not cleaned["customer_name"]:
        raise ValidationError("Customer name is required", field="customer_name")
    if cleaned["email"] and "@" not in cleaned["email"]:
        raise ValidationError("Please enter a valid email address", field="email")
    try:
        rental_days = int(data.get("rental_days") or 0)
    except (TypeError, ValueError):
        raise ValidationError("Rental days must be a whole number", field="rental_days")
    if rental_days < 0:
        raise ValidationError("Rental days cannot be negative", field="rental_days")

    try:
        customer_id = int(data["customer_id"]) if data.get("customer_id") else None
    except (TypeError, ValueError):
        raise ValidationError("Invalid customer", field="customer_id")

    lead = Lead(
        rental_days=rental_days,
        customer_id=customer_id,
        assigned_to_user_id=assigned_to_user_id,
        status=LeadStatus.NEW.value,
        **cleaned,
    )
    db.session.add(lead)
    commit_or_raise("creating lead")
    logger.info("[LEAD] created id=%s customer_name=%s", lead.id, lead.customer_name)
    return lead


def update_lead_status(lead_id, status):
    if status not in LEAD_STATUSES:
        raise ValidationError(f"Unknown lead status: {status}", field="status")
    lead = get_lead_by_id(lead_id)
    lead.status = status
    commit_or_raise("updating lead status")
    logger.info("[LEAD] id=%s status=%s", lead.id, status)
    return lead
