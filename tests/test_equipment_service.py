import pytest

from conftest import EQUIPMENT_DATA
from crane_crm.errors import NotFoundError, ValidationError
from crane_crm.services import equipment_service


def _data(**changes):
    data = dict(EQUIPMENT_DATA)
    data["base_rates"] = dict(EQUIPMENT_DATA["base_rates"])
    data.update(changes)
    return data


def test_create_assigns_sequential_codes(app):
    first = equipment_service.create_equipment(_data())
    second = equipment_service.create_equipment(_data(name="Tadano GR-1000"))
    assert first.equipment_code == "EQ0001"
    assert second.equipment_code == "EQ0002"
    assert first.base_rates == {"micro": 1000.0, "small": 900.0, "monthly": 26000.0, "yearly": 24000.0}


@pytest.mark.parametrize("changes", [
    {"name": ""},
    {"manufacturing_date": "05/2019"},
    {"registration_date": "2019-8"},
    {"max_lifting_capacity": "heavy"},
    {"category": "gantry_crane"},
    {"status": "lost"},
    {"base_rates": {"micro": "1000", "small": "900", "monthly": "26000"}},
])
def test_invalid_equipment_rejected(app, changes):
    with pytest.raises(ValidationError):
        equipment_service.create_equipment(_data(**changes))
    assert equipment_service.get_equipment() == []


@pytest.mark.parametrize("changes, field_name", [
    ({"base_rates": {"micro": "-1000", "small": "900", "monthly": "26000", "yearly": "24000"}}, "base_rates.micro"),
    ({"running_cost_per_km": "-50"}, "running_cost_per_km"),
    ({"unladen_weight": -1}, "unladen_weight"),
])
def test_negative_numbers_rejected(app, changes, field_name):
    with pytest.raises(ValidationError) as exc:
        equipment_service.create_equipment(_data(**changes))
    assert exc.value.field == field_name
    assert equipment_service.get_equipment() == []


def test_numeric_zero_is_not_missing(app):
    equipment = equipment_service.create_equipment(_data(
        running_cost_per_km=0,
        base_rates={"micro": 1000, "small": 900, "monthly": 26000, "yearly": 0},
    ))
    assert equipment.running_cost_per_km == 0.0
    assert equipment.base_rate_yearly == 0.0


def test_numbers_accept_thousand_separators(app):
    equipment = equipment_service.create_equipment(_data(base_rates={
        "micro": "1,000", "small": "900", "monthly": "26,000", "yearly": "24,000",
    }))
    assert equipment.base_rate_monthly == 26000.0


def test_by_category_filters_availability(app):
    equipment_service.create_equipment(_data())
    equipment_service.create_equipment(_data(name="Busy crane", status="in_use"))
    equipment_service.create_equipment(_data(name="Tower", category="tower_crane"))

    assert len(equipment_service.get_equipment_by_category("mobile_crane")) == 2
    available = equipment_service.get_equipment_by_category("mobile_crane", available_only=True)
    assert [e.name for e in available] == [EQUIPMENT_DATA["name"]]


def test_update_keeps_code(equipment):
    updated = equipment_service.update_equipment(equipment.id, _data(name="LTM 1100-5.2"))
    assert updated.equipment_code == "EQ0001"
    assert updated.name == "LTM 1100-5.2"
    assert equipment_service.get_equipment_by_code("EQ0001").id == equipment.id


def test_delete(equipment):
    equipment_service.delete_equipment(equipment.id)
    with pytest.raises(NotFoundError):
        equipment_service.get_equipment_by_id(equipment.id)
