"""
Seed a demo equipment fleet, customer, lead and deal through the service layer.
Usage: python scripts/seed_demo_data.py
"""
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from crane_crm import create_app  # noqa: E402
from crane_crm.errors import CraneCRMError  # noqa: E402
from crane_crm.services import customer_service, deal_service, equipment_service, lead_service  # noqa: E402

FLEET = [
    {
        "name": "Liebherr LTM 1100-5.2",
        "category": "mobile_crane",
        "manufacturing_date": "2019-05",
        "registration_date": "2019-08",
        "max_lifting_capacity": "100",
        "unladen_weight": "48",
        "running_cost_per_km": "120",
        "base_rates": {"micro": "4500", "small": "4000", "monthly": "950000", "yearly": "900000"},
        "status": "available",
    },
    {
        "name": "ACE FX150 Pick & Carry",
        "category": "pick_and_carry_crane",
        "manufacturing_date": "2021-01",
        "registration_date": "2021-03",
        "max_lifting_capacity": "15",
        "unladen_weight": "18",
        "running_cost_per_km": "45",
        "base_rates": {"micro": "1200", "small": "1000", "monthly": "220000", "yearly": "200000"},
        "status": "available",
    },
    {
        "name": "Kobelco CKE 900",
        "category": "crawler_crane",
        "manufacturing_date": "2017-11",
        "registration_date": "2018-02",
        "max_lifting_capacity": "90",
        "unladen_weight": "80",
        "running_cost_per_km": "200",
        "base_rates": {"micro": "5200", "small": "4800", "monthly": "1100000", "yearly": "1000000"},
        "status": "in_use",
    },
]

app = create_app()

with app.app_context():
    try:
        if equipment_service.get_equipment():
            print("[INFO] equipment already present; skipping fleet")
        else:
            for data in FLEET:
                item = equipment_service.create_equipment(data)
                print(f"[OK] equipment {item.equipment_code} {item.name}")

        customer = customer_service.create_customer({
            "name": "Ravi Kumar",
            "company_name": "Kumar Infra Pvt Ltd",
            "email": "ravi@kumarinfra.example",
            "phone": "+91 98200 00000",
            "address": "Plot 7, MIDC, Pune",
            "designation": "Project Manager",
        })
        print(f"[OK] customer {customer.customer_code} {customer.name}")

        lead = lead_service.create_lead({
            "customer_id": customer.id,
            "customer_name": customer.name,
            "email": customer.email,
            "phone": customer.phone,
            "service_needed": "Bridge girder lifting",
            "site_location": "Chakan, Pune",
            "rental_days": "18",
        })
        lead_service.update_lead_status(lead.id, "in_process")
        print(f"[OK] lead id={lead.id} status=in_process")

        deal = deal_service.create_deal({
            "title": "Bridge girder lifting - Chakan",
            "lead_id": lead.id,
            "value": "450000",
            "probability": "60",
        })
        print(f"[OK] deal id={deal.id} stage={deal.stage}")
    except CraneCRMError as e:
        print(f"[ERROR] seeding failed: {e}")
        sys.exit(1)
