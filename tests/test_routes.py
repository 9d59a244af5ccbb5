from conftest import ADMIN_PASSWORD, login
from crane_crm import db
from crane_crm.models.user import User
from crane_crm.services import config_service, quotation_service


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.data == b"OK"


def test_pages_require_login(client):
    resp = client.get("/customers")
    assert resp.status_code == 302
    assert "/login" in resp.headers["Location"]
    assert "next=%2Fcustomers" in resp.headers["Location"]


def test_login_success_and_failure(client):
    resp = login(client, "admin", "wrong")
    assert resp.status_code == 200
    assert b"Invalid login ID or password." in resp.data

    resp = login(client, "admin", ADMIN_PASSWORD)
    assert resp.status_code == 302
    assert resp.headers["Location"] == "/"
    assert client.get("/").status_code == 200


def test_login_ignores_external_next(client):
    resp = client.post("/login?next=//evil.com", data={"login_id": "admin", "password": ADMIN_PASSWORD})
    assert resp.headers["Location"] == "/"


def test_login_follows_local_next(client):
    resp = client.post("/login?next=/equipment", data={"login_id": "admin", "password": ADMIN_PASSWORD})
    assert resp.headers["Location"] == "/equipment"


def test_registered_user_is_inactive_until_approved(client, admin_client):
    client.get("/logout")
    resp = client.post("/register", data={
        "login_id": "newagent", "display_name": "New Agent", "password": "longpassword",
    })
    assert resp.status_code == 302
    user = User.query.filter_by(login_id="newagent").first()
    assert user.role == "sales_agent"
    assert not user.is_active

    resp = login(client, "newagent", "longpassword")
    assert b"This account is not active yet." in resp.data

    login(client, "admin", ADMIN_PASSWORD)
    client.post(f"/config/users/{user.id}", data={"role": "sales_agent", "is_active": "1"})
    client.get("/logout")
    db.session.expire_all()
    assert login(client, "newagent", "longpassword").status_code == 302


def test_register_rejects_short_password(client):
    resp = client.post("/register", data={"login_id": "x", "display_name": "X", "password": "short"})
    assert b"Password must be at least 8 characters." in resp.data
    assert User.query.filter_by(login_id="x").first() is None


def test_sales_agent_cannot_use_admin_pages(sales_client, equipment):
    assert sales_client.get("/config/").status_code == 403
    assert sales_client.post(f"/equipment/{equipment.id}/delete").status_code == 403
    assert sales_client.get("/equipment").status_code == 200


def test_equipment_by_category_json(admin_client, equipment):
    resp = admin_client.get("/equipment/by-category/mobile_crane")
    assert resp.status_code == 200
    assert [e["equipmentId"] for e in resp.get_json()] == ["EQ0001"]


def test_calculate_endpoint(admin_client, equipment):
    resp = admin_client.post("/quotations/calculate", json={
        "equipment_id": equipment.id, "number_of_days": 5, "include_gst": False,
    })
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["orderType"] == "micro"
    assert body["orderTypeLocked"] is True
    assert body["baseRate"] == 1000
    assert body["breakdown"]["total_amount"] == 40100
    assert body["formatted"]["total_amount"] == "₹40,100"


def test_calculate_rejects_unknown_shift(admin_client, equipment):
    resp = admin_client.post("/quotations/calculate", json={
        "equipment_id": equipment.id, "number_of_days": 5, "shift": "triple",
    })
    assert resp.status_code == 400
    assert resp.get_json()["field"] == "shift"


def test_quotation_flow(admin_client, deal, equipment):
    resp = admin_client.get(f"/quotations/new?deal_id={deal.id}")
    assert resp.status_code == 200

    resp = admin_client.post(f"/quotations/new?deal_id={deal.id}", data={
        "machine_type": "mobile_crane",
        "equipment_id": str(equipment.id),
        "number_of_days": "5",
        "include_gst": ["0", "1"],
        "risk_factor": "medium",
    })
    assert resp.status_code == 302
    quotation = quotation_service.get_quotations_for_deal(deal.id)[0]
    assert quotation.risk_factor == "medium"
    assert quotation.include_gst

    view = admin_client.get(f"/quotations/{quotation.id}")
    assert view.status_code == 200
    assert b"QT0001" in view.data

    printed = admin_client.get(f"/quotations/{quotation.id}/print")
    assert printed.status_code == 200
    assert b"Ravi Kumar" in printed.data

    admin_client.post(f"/quotations/{quotation.id}/status", data={"status": "sent"})
    db.session.expire_all()
    assert quotation_service.get_quotation_by_id(quotation.id).status == "sent"

    # 既存見積があれば新規作成画面から詳細へ
    resp = admin_client.get(f"/quotations/new?deal_id={deal.id}")
    assert resp.status_code == 302


def test_quotation_form_keeps_input_on_error(admin_client, deal, equipment):
    resp = admin_client.post(f"/quotations/new?deal_id={deal.id}", data={
        "equipment_id": str(equipment.id), "number_of_days": "5", "working_hours": "30",
    })
    assert resp.status_code == 200
    assert b"Working hours must be between 1 and 24" in resp.data
    assert quotation_service.get_quotations() == []


def test_missing_quotation_is_404(admin_client):
    assert admin_client.get("/quotations/999").status_code == 404
    assert admin_client.get("/quotations/999/print").status_code == 404


def test_invalid_order_type_limits_are_not_saved(admin_client):
    before = config_service.get_quotation_config()
    data = {
        "micro.minDays": "1", "micro.maxDays": "10",
        "small.minDays": "5", "small.maxDays": "25",
        "monthly.minDays": "26", "monthly.maxDays": "365",
        "yearly.minDays": "366", "yearly.maxDays": "3650",
    }
    resp = admin_client.post("/config/quotation", data=data, follow_redirects=True)
    assert b"Small minimum days must be greater than previous maximum" in resp.data
    db.session.expire_all()
    assert config_service.get_quotation_config() == before


def test_config_page_renders_for_admin(admin_client):
    resp = admin_client.get("/config/")
    assert resp.status_code == 200
    assert b"micro.minDays" in resp.data


def test_additional_params_form_updates_only_submitted_keys(admin_client):
    admin_client.post("/config/additional-params", data={"riskFactors.low": "7"})
    db.session.expire_all()
    params = config_service.get_additional_params_config()
    assert params["riskFactors"] == {"low": 7.0, "medium": 10, "high": 15}
    assert params["otherFactors"]["rigger"] == 40000


def test_calculator_script_recalculates_on_every_input(client):
    resp = client.get("/static/quotation_form.js")
    script = resp.get_data(as_text=True)
    resp.close()
    assert "addEventListener('input', recalc)" in script
    assert "setTimeout" not in script
