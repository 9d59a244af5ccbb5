import logging
from crane_crm import db
from crane_crm.cost_utils import CostBreakdown
from crane_crm.errors import NotFoundError, ValidationError
from crane_crm.models.quotation import Quotation, QuotationStatus
from crane_crm.services import commit_or_raise
from crane_crm.services import sequences
from crane_crm.services.config_service import get_rate_tables
from crane_crm.services.deal_service import get_deal_by_id
from crane_crm.services.notifications import notify_quotation_status_changed

logger = logging.getLogger(__name__)

QUOTATION_STATUSES = [s.value for s in QuotationStatus]

# 許可される状態遷移（accepted / rejected は終端）
STATUS_TRANSITIONS = {
    QuotationStatus.DRAFT.value: (
        QuotationStatus.SENT.value,
        QuotationStatus.ACCEPTED.value,
        QuotationStatus.REJECTED.value,
    ),
    QuotationStatus.SENT.value: (
        QuotationStatus.ACCEPTED.value,
        QuotationStatus.REJECTED.value,
    ),
    QuotationStatus.ACCEPTED.value: (),
    QuotationStatus.REJECTED.value: (),
}


def validate_form_state(state):
    """Checks run before a quotation is priced and saved."""
    inputs = state.inputs
    if not state.selected_equipment.id:
        raise ValidationError("Please select equipment", field="selected_equipment")
    if inputs.number_of_days <= 0:
        raise ValidationError("Please enter valid number of days", field="number_of_days")
    if not 1 <= inputs.working_hours <= 24:
        raise ValidationError("Working hours must be between 1 and 24", field="working_hours")
    for name in ("food_resources", "accom_resources", "site_distance", "running_cost_per_km", "mob_demob", "extra_charge"):
        if getattr(inputs, name) < 0:
            raise ValidationError(f"{name.replace('_', ' ').capitalize()} cannot be negative", field=name)
    if not 0 <= inputs.mob_relaxation <= 100:
        raise ValidationError("Mob relaxation must be between 0 and 100 percent", field="mob_relaxation")
    if state.base_rate <= 0:
        raise ValidationError(
            f"Selected equipment has no {inputs.order_type} rate", field="selected_equipment"
        )


def _apply_state(quotation, state, breakdown):
    inputs = state.inputs
    quotation.order_type = inputs.order_type
    quotation.number_of_days = inputs.number_of_days
    quotation.working_hours = inputs.working_hours
    quotation.shift = inputs.shift
    quotation.day_night = inputs.day_night
    quotation.equipment_id = state.selected_equipment.id
    quotation.selected_equipment = state.selected_equipment.as_snapshot()
    quotation.base_rate = state.base_rate
    quotation.running_cost_per_km = inputs.running_cost_per_km
    quotation.usage = inputs.usage
    quotation.risk_factor = inputs.risk_factor
    quotation.food_resources = inputs.food_resources
    quotation.accom_resources = inputs.accom_resources
    quotation.site_distance = inputs.site_distance
    quotation.mob_demob = inputs.mob_demob
    quotation.mob_relaxation = inputs.mob_relaxation
    quotation.extra_charge = inputs.extra_charge
    quotation.incidental_charges = list(inputs.incidental_charges)
    quotation.other_factors = list(inputs.other_factors)
    quotation.include_gst = inputs.include_gst
    quotation.include_elongation = state.include_elongation
    quotation.notes = state.notes or None

    for name in CostBreakdown.field_names():
        if name != "total_amount":
            setattr(quotation, name, getattr(breakdown, name))
    quotation.total_rent = breakdown.total_amount


def price_form_state(state, rates=None):
    return state.breakdown(rates if rates is not None else get_rate_tables())


def get_quotations(status=None):
    query = Quotation.query
    if status:
        query = query.filter(Quotation.status == status)
    return query.order_by(Quotation.created_at.desc()).all()


def get_quotations_for_deal(deal_id):
    return Quotation.query.filter(Quotation.deal_id == deal_id).order_by(Quotation.created_at.desc()).all()


def get_quotations_for_customer(customer_id):
    return (
        Quotation.query.filter(Quotation.customer_id == customer_id)
        .order_by(Quotation.created_at.desc())
        .all()
    )


def get_quotation_by_id(quotation_id):
    quotation = db.session.get(Quotation, quotation_id)
    if quotation is None:
        raise NotFoundError("Quotation not found")
    return quotation


def create_quotation(deal_id, state, created_by=None):
    """
    Price the form state with the current configuration and save it as the
    draft quotation of the deal.
    """
    deal = get_deal_by_id(deal_id)
    if get_quotations_for_deal(deal.id):
        raise ValidationError("A quotation already exists for this deal")
    validate_form_state(state)
    breakdown = price_form_state(state)

    customer = deal.customer
    quotation = Quotation(
        quotation_number=sequences.next_code(sequences.QUOTATION),
        deal_id=deal.id,
        lead_id=deal.lead_id,
        customer_id=customer.id if customer else None,
        customer_name=customer.name if customer else "",
        customer_contact=customer.contact_snapshot() if customer else {},
        status=QuotationStatus.DRAFT.value,
        version=1,
        created_by=created_by,
    )
    _apply_state(quotation, state, breakdown)
    db.session.add(quotation)
    commit_or_raise("creating quotation")
    logger.info(
        "[QUOTATION] created %s deal=%s total=%.2f", quotation.quotation_number, deal.id, quotation.total_rent
    )
    return quotation


def update_quotation(quotation_id, state):
    """Recompute every amount from the edited form state and bump the version."""
    quotation = get_quotation_by_id(quotation_id)
    if not STATUS_TRANSITIONS[quotation.status]:
        raise ValidationError(f"{quotation.status.capitalize()} quotations cannot be edited")
    validate_form_state(state)
    breakdown = price_form_state(state)
    _apply_state(quotation, state, breakdown)
    quotation.version = (quotation.version or 1) + 1
    commit_or_raise("updating quotation")
    logger.info(
        "[QUOTATION] updated %s version=%s total=%.2f",
        quotation.quotation_number, quotation.version, quotation.total_rent,
    )
    return quotation


def update_quotation_status(quotation_id, status, actor_user=None, comment=None):
    if status not in QUOTATION_STATUSES:
        raise ValidationError(f"Unknown quotation status: {status}", field="status")
    quotation = get_quotation_by_id(quotation_id)
    from_status = quotation.status
    if status not in STATUS_TRANSITIONS[from_status]:
        raise ValidationError(f"Cannot change quotation from {from_status} to {status}", field="status")
    quotation.status = status
    commit_or_raise("updating quotation status")
    notify_quotation_status_changed(quotation, from_status, actor_user, comment)
    return quotation
