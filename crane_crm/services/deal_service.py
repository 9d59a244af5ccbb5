import logging
from datetime import datetime
from crane_crm import db
from crane_crm.errors import NotFoundError, ValidationError
from crane_crm.models.deal import Deal, DealStage
from crane_crm.models.lead import LeadStatus
from crane_crm.services import commit_or_raise
from crane_crm.services.customer_service import get_customer_by_id
from crane_crm.services.lead_service import get_lead_by_id

logger = logging.getLogger(__name__)

DEAL_STAGES = [s.value for s in DealStage]


def _parse_date(value):
    if not value:
        return None
    if hasattr(value, "year"):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Expected close date must be YYYY-MM-DD", field="expected_close_date")


def _parse_id(value, name):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {name.replace('_', ' ')}", field=name)


def _parse_number(value, name, default=0.0):
    if value in (None, ""):
        return default
    try:
        return float(str(value).replace(",", "").strip())
    except ValueError:
        raise ValidationError(f"{name.replace('_', ' ').capitalize()} must be a number", field=name)


def get_deals(stage=None):
    query = Deal.query
    if stage:
        query = query.filter(Deal.stage == stage)
    return query.order_by(Deal.created_at.desc()).all()


def get_deal_by_id(deal_id):
    deal = db.session.get(Deal, deal_id)
    if deal is None:
        raise NotFoundError("Deal not found")
    return deal


def create_deal(data, created_by=None):
    """
    Open a deal for a customer. When a lead is given the lead is marked
    qualified and its customer is used if none was chosen.
    """
    title = (data.get("title") or "").strip()
    if not title:
        raise ValidationError("Deal title is required", field="title")

    lead = get_lead_by_id(_parse_id(data["lead_id"], "lead_id")) if data.get("lead_id") else None
    customer_id = data.get("customer_id") or (lead.customer_id if lead else None)
    if not customer_id:
        raise ValidationError("Please select a customer", field="customer_id")
    customer = get_customer_by_id(_parse_id(customer_id, "customer_id"))

    stage = data.get("stage") or DealStage.QUALIFICATION.value
    if stage not in DEAL_STAGES:
        raise ValidationError(f"Unknown deal stage: {stage}", field="stage")
    probability = int(_parse_number(data.get("probability"), "probability"))
    if not 0 <= probability <= 100:
        raise ValidationError("Probability must be between 0 and 100", field="probability")

    deal = Deal(
        title=title,
        description=(data.get("description") or "").strip(),
        value=_parse_number(data.get("value"), "value"),
        stage=stage,
        probability=probability,
        expected_close_date=_parse_date(data.get("expected_close_date")),
        notes=(data.get("notes") or "").strip() or None,
        customer_id=customer.id,
        lead_id=lead.id if lead else None,
        created_by=created_by,
        assigned_to=_parse_id(data["assigned_to"], "assigned_to") if data.get("assigned_to") else created_by,
    )
    db.session.add(deal)
    if lead is not None:
        lead.status = LeadStatus.QUALIFIED.value
        if lead.customer_id is None:
            lead.customer_id = customer.id
    commit_or_raise("creating deal")
    logger.info("[DEAL] created id=%s customer=%s lead=%s", deal.id, customer.customer_code, deal.lead_id)
    return deal


def update_deal_stage(deal_id, stage):
    if stage not in DEAL_STAGES:
        raise ValidationError(f"Unknown deal stage: {stage}", field="stage")
    deal = get_deal_by_id(deal_id)
    deal.stage = stage
    commit_or_raise("updating deal stage")
    logger.info("[DEAL] id=%s stage=%s", deal.id, stage)
    return deal
