"""
Quotation form state.

The form is an immutable QuotationFormState. Every field edit is an Action
and reduce(state, action) returns the next state, so a submitted form can be
rebuilt by replaying its actions in order.
"""
import functools
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from crane_crm.cost_utils import (
    DAY_NIGHT,
    INCIDENTAL_KEYS,
    ORDER_TYPES,
    OTHER_FACTOR_KEYS,
    RISK_LEVELS,
    SHIFTS,
    USAGE_TYPES,
    QuotationInputs,
    _safe_float,
    calculate_breakdown,
    classify_order_type,
    resolve_base_rate,
)
from crane_crm.errors import ValidationError


@dataclass(frozen=True)
class SelectedEquipment:
    id: Optional[int] = None
    equipment_code: str = ""
    name: str = ""
    category: str = ""
    base_rates: Dict[str, float] = field(default_factory=lambda: {k: 0.0 for k in ORDER_TYPES})
    running_cost_per_km: float = 0.0

    @classmethod
    def from_model(cls, equipment):
        return cls(
            id=equipment.id,
            equipment_code=equipment.equipment_code or "",
            name=equipment.name or "",
            category=equipment.category or "",
            base_rates=equipment.base_rates,
            running_cost_per_km=_safe_float(equipment.running_cost_per_km),
        )

    def as_snapshot(self):
        return {
            "id": self.id,
            "equipmentId": self.equipment_code,
            "name": self.name,
            "category": self.category,
            "baseRates": dict(self.base_rates),
        }


@dataclass(frozen=True)
class QuotationFormState:
    machine_type: str = ""
    selected_equipment: SelectedEquipment = field(default_factory=SelectedEquipment)
    base_rate: float = 0.0
    order_type_locked: bool = False
    include_elongation: bool = False
    notes: str = ""
    inputs: QuotationInputs = field(default_factory=QuotationInputs)

    def breakdown(self, rates=None):
        return calculate_breakdown(
            self.inputs, self.base_rate, rates, include_elongation=self.include_elongation
        )


@dataclass(frozen=True)
class Action:
    type: str
    value: Any = None
    name: Optional[str] = None


# --- action helpers ---
def set_machine_type(value):
    return Action("set_machine_type", value)


def select_equipment(equipment):
    return Action("select_equipment", equipment)


def set_order_type(value):
    return Action("set_order_type", value)


def set_number_of_days(value):
    return Action("set_number_of_days", value)


def set_field(name, value):
    return Action("set_field", value, name)


def set_incidental_charges(keys):
    return Action("set_incidental_charges", tuple(keys))


def set_other_factors(keys):
    return Action("set_other_factors", tuple(keys))


def set_include_elongation(value):
    return Action("set_include_elongation", bool(value))


def set_notes(value):
    return Action("set_notes", value or "")


_CHOICE_FIELDS = {
    "shift": SHIFTS,
    "day_night": DAY_NIGHT,
    "usage": USAGE_TYPES,
    "risk_factor": RISK_LEVELS,
}
_INT_FIELDS = ("food_resources", "accom_resources")
_FLOAT_FIELDS = ("working_hours", "site_distance", "mob_demob", "mob_relaxation", "extra_charge")


def _coerce_field(name, value):
    if name in _CHOICE_FIELDS:
        if value not in _CHOICE_FIELDS[name]:
            raise ValidationError(f"Unknown {name.replace('_', ' ')}: {value}", field=name)
        return value
    if name in _INT_FIELDS:
        return int(_safe_float(value))
    if name in _FLOAT_FIELDS:
        return _safe_float(value)
    if name == "include_gst":
        return bool(value)
    raise ValidationError(f"Unknown quotation field: {name}", field=name)


def _with_base_rate(state, order_type):
    return replace(
        state,
        base_rate=resolve_base_rate(state.selected_equipment.base_rates, order_type),
    )


def reduce(state, action):
    """Return the state after applying one form edit."""
    kind = action.type

    if kind == "set_machine_type":
        # 機種変更で選択済み機材はクリア
        return replace(
            state,
            machine_type=action.value or "",
            selected_equipment=SelectedEquipment(),
            base_rate=0.0,
            inputs=replace(state.inputs, running_cost_per_km=0.0),
        )

    if kind == "select_equipment":
        selected = action.value or SelectedEquipment()
        if not isinstance(selected, SelectedEquipment):
            selected = SelectedEquipment.from_model(selected)
        state = replace(
            state,
            selected_equipment=selected,
            machine_type=selected.category or state.machine_type,
            inputs=replace(state.inputs, running_cost_per_km=selected.running_cost_per_km),
        )
        return _with_base_rate(state, state.inputs.order_type)

    if kind == "set_order_type":
        if action.value not in ORDER_TYPES:
            raise ValidationError(f"Unknown order type: {action.value}", field="order_type")
        if state.order_type_locked:
            return state
        state = replace(state, inputs=replace(state.inputs, order_type=action.value))
        return _with_base_rate(state, action.value)

    if kind == "set_number_of_days":
        days = int(_safe_float(action.value))
        if days < 0:
            raise ValidationError("Number of days cannot be negative", field="number_of_days")
        if not days:
            return replace(state, order_type_locked=False, inputs=replace(state.inputs, number_of_days=0))
        order_type = classify_order_type(days)
        state = replace(
            state,
            order_type_locked=True,
            inputs=replace(state.inputs, number_of_days=days, order_type=order_type),
        )
        return _with_base_rate(state, order_type)

    if kind == "set_field":
        value = _coerce_field(action.name, action.value)
        return replace(state, inputs=replace(state.inputs, **{action.name: value}))

    if kind == "set_incidental_charges":
        keys = tuple(k for k in INCIDENTAL_KEYS if k in action.value)
        return replace(state, inputs=replace(state.inputs, incidental_charges=keys))

    if kind == "set_other_factors":
        keys = tuple(k for k in OTHER_FACTOR_KEYS if k in action.value)
        return replace(state, inputs=replace(state.inputs, other_factors=keys))

    if kind == "set_include_elongation":
        return replace(state, include_elongation=action.value)

    if kind == "set_notes":
        return replace(state, notes=action.value)

    raise ValidationError(f"Unknown form action: {kind}")


def replay(actions, state=None):
    return functools.reduce(reduce, actions, state or QuotationFormState())


def actions_for_quotation(quotation):
    """Actions that rebuild the form state of a saved quotation (edit screen)."""
    snapshot = quotation.selected_equipment or {}
    selected = SelectedEquipment(
        id=snapshot.get("id"),
        equipment_code=snapshot.get("equipmentId", ""),
        name=snapshot.get("name", ""),
        category=snapshot.get("category", ""),
        base_rates={k: _safe_float((snapshot.get("baseRates") or {}).get(k)) for k in ORDER_TYPES},
        running_cost_per_km=_safe_float(quotation.running_cost_per_km),
    )
    actions = [
        set_order_type(quotation.order_type),
        select_equipment(selected),
        set_number_of_days(quotation.number_of_days),
    ]
    for name in ("working_hours", "shift", "day_night", "usage", "risk_factor",
                 "food_resources", "accom_resources", "site_distance",
                 "mob_demob", "mob_relaxation", "extra_charge", "include_gst"):
        actions.append(set_field(name, getattr(quotation, name)))
    actions.append(set_incidental_charges(quotation.incidental_charges or ()))
    actions.append(set_other_factors(quotation.other_factors or ()))
    actions.append(set_include_elongation(quotation.include_elongation))
    actions.append(set_notes(quotation.notes))
    return actions
