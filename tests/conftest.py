# tests/conftest.py
import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from crane_crm import create_app, db  # noqa: E402
from crane_crm.form_state import replay, select_equipment, set_field, set_number_of_days  # noqa: E402
from crane_crm.models.user import User  # noqa: E402
from crane_crm.services import customer_service, deal_service, equipment_service  # noqa: E402

ADMIN_PASSWORD = "admin-pass"
SALES_PASSWORD = "sales-pass"

EQUIPMENT_DATA = {
    "name": "Liebherr LTM 1100",
    "category": "mobile_crane",
    "manufacturing_date": "2019-05",
    "registration_date": "2019-08",
    "max_lifting_capacity": "100",
    "unladen_weight": "48",
    "running_cost_per_km": "50",
    "base_rates": {"micro": "1000", "small": "900", "monthly": "26000", "yearly": "24000"},
    "description": "All terrain crane",
    "status": "available",
}

CUSTOMER_DATA = {
    "name": "Ravi Kumar",
    "company_name": "Kumar Infra Pvt Ltd",
    "email": "ravi@kumarinfra.example",
    "phone": "+91 98200 00000",
    "address": "Plot 7, MIDC, Pune",
    "designation": "Project Manager",
}


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "SECRET_KEY": "test",
        "ADMIN_PASSWORD": ADMIN_PASSWORD,
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, login_id, password):
    return client.post("/login", data={"login_id": login_id, "password": password})


@pytest.fixture
def admin_client(client):
    login(client, "admin", ADMIN_PASSWORD)
    return client


@pytest.fixture
def sales_user(app):
    user = User(login_id="sales", display_name="Sales Agent", role="sales_agent", is_active=True)
    user.set_password(SALES_PASSWORD)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def sales_client(client, sales_user):
    login(client, "sales", SALES_PASSWORD)
    return client


@pytest.fixture
def equipment(app):
    return equipment_service.create_equipment(dict(EQUIPMENT_DATA))


@pytest.fixture
def customer(app):
    return customer_service.create_customer(dict(CUSTOMER_DATA))


@pytest.fixture
def deal(customer):
    return deal_service.create_deal({
        "title": "Bridge girder lifting",
        "customer_id": customer.id,
        "value": "250000",
        "probability": "40",
    })


def build_state(equipment, days=5, **fields):
    """Form state for an equipment selection plus field edits."""
    actions = [select_equipment(equipment), set_number_of_days(days)]
    actions += [set_field(name, value) for name, value in fields.items()]
    return replay(actions)
