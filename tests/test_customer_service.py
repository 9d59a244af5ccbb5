import pytest

from conftest import CUSTOMER_DATA, build_state
from crane_crm.errors import ValidationError
from crane_crm.services import customer_service, quotation_service


def test_create_customer(customer):
    assert customer.customer_code == "CRM0001"
    assert customer.contact_snapshot()["company"] == "Kumar Infra Pvt Ltd"


def test_designation_defaults_to_na(app):
    customer = customer_service.create_customer({**CUSTOMER_DATA, "designation": ""})
    assert customer.designation == "N/A"


@pytest.mark.parametrize("changes", [{"name": "  "}, {"email": "not-an-email"}])
def test_invalid_customer_rejected(app, changes):
    with pytest.raises(ValidationError):
        customer_service.create_customer({**CUSTOMER_DATA, **changes})


def test_search(customer):
    assert customer_service.get_customers("Kumar") == [customer]
    assert customer_service.get_customers("Nobody") == []


def test_update_refreshes_quotation_contact(customer, deal, equipment):
    quotation = quotation_service.create_quotation(deal.id, build_state(equipment))
    customer_service.update_customer(customer.id, {**CUSTOMER_DATA, "phone": "+91 90000 11111"})

    refreshed = quotation_service.get_quotation_by_id(quotation.id)
    assert refreshed.customer_contact["phone"] == "+91 90000 11111"


def test_customer_with_deals_cannot_be_deleted(customer, deal):
    with pytest.raises(ValidationError):
        customer_service.delete_customer(customer.id)


def test_delete_customer(customer):
    customer_service.delete_customer(customer.id)
    assert customer_service.get_customers() == []
