import logging
from sqlalchemy import or_
from crane_crm import db
from crane_crm.errors import NotFoundError, ValidationError
from crane_crm.models.customer import Customer
from crane_crm.models.deal import Deal
from crane_crm.models.quotation import Quotation
from crane_crm.services import commit_or_raise
from crane_crm.services import sequences

logger = logging.getLogger(__name__)

FIELDS = ("name", "company_name", "email", "phone", "address", "designation")


def _clean(data):
    cleaned = {k: (data.get(k) or "").strip() for k in FIELDS}
    if not cleaned["name"]:
        raise ValidationError("Customer name is required", field="name")
    if cleaned["email"] and "@" not in cleaned["email"]:
        raise ValidationError("Please enter a valid email address", field="email")
    cleaned["designation"] = cleaned["designation"] or "N/A"
    return cleaned


def get_customers(q=None):
    query = Customer.query
    if q:
        query = query.filter(or_(Customer.name.contains(q), Customer.company_name.contains(q)))
    return query.order_by(Customer.name).all()


def get_customer_by_id(customer_id):
    customer = db.session.get(Customer, customer_id)
    if customer is None:
        raise NotFoundError("Customer not found")
    return customer


def create_customer(data):
    cleaned = _clean(data)
    customer = Customer(customer_code=sequences.next_code(sequences.CUSTOMER), **cleaned)
    db.session.add(customer)
    commit_or_raise("creating customer")
    logger.info("[CUSTOMER] created %s name=%s", customer.customer_code, customer.name)
    return customer


def update_customer(customer_id, data):
    """
    Update a customer and refresh the contact snapshot held by each of the
    customer's quotations.
    """
    customer = get_customer_by_id(customer_id)
    cleaned = _clean(data)
    for key, value in cleaned.items():
        setattr(customer, key, value)

    snapshot = customer.contact_snapshot()
    quotations = Quotation.query.filter(Quotation.customer_id == customer.id).all()
    for quotation in quotations:
        quotation.customer_contact = dict(snapshot)
        quotation.customer_name = customer.name
    commit_or_raise("updating customer")
    logger.info("[CUSTOMER] updated %s quotations_refreshed=%s", customer.customer_code, len(quotations))
    return customer


def delete_customer(customer_id):
    customer = get_customer_by_id(customer_id)
    if Deal.query.filter(Deal.customer_id == customer.id).first():
        raise ValidationError("Customer has deals and cannot be deleted")
    db.session.delete(customer)
    commit_or_raise("deleting customer")
    logger.info("[CUSTOMER] deleted %s", customer.customer_code)
