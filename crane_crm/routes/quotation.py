from flask import Blueprint, render_template, request, redirect, url_for, flash, g, jsonify, current_app
from crane_crm.cost_utils import (
    DAY_NIGHT,
    INCIDENTAL_KEYS,
    ORDER_TYPES,
    OTHER_FACTOR_KEYS,
    RISK_LEVELS,
    SHIFTS,
    USAGE_TYPES,
    CostBreakdown,
)
from crane_crm.decorators import login_required, roles_required
from crane_crm.errors import RemoteError, ValidationError
from crane_crm.form_state import (
    SelectedEquipment,
    actions_for_quotation,
    replay,
    select_equipment,
    set_field,
    set_incidental_charges,
    set_include_elongation,
    set_machine_type,
    set_notes,
    set_number_of_days,
    set_order_type,
    set_other_factors,
)
from crane_crm.formatters import format_currency
from crane_crm.routes import get_or_404
from crane_crm.services import quotation_service
from crane_crm.services.config_service import get_rate_tables
from crane_crm.services.deal_service import get_deal_by_id
from crane_crm.services.equipment_service import CATEGORIES, get_equipment_by_category, get_equipment_by_id
from crane_crm.services.template_service import get_templates, get_template_by_id, render_quotation
from crane_crm.template_merge import company_from_config

quotation_bp = Blueprint("quotation", __name__)

# 未入力時の既定値（フォーム文字列のまま reducer に渡す）
_FIELD_DEFAULTS = {
    "working_hours": "8",
    "shift": "single",
    "day_night": "day",
    "usage": "normal",
    "risk_factor": "low",
    "food_resources": "0",
    "accom_resources": "0",
    "site_distance": "0",
    "mob_demob": "0",
    "mob_relaxation": "0",
    "extra_charge": "0",
}


def _last(source, name, default=None):
    # hidden + checkbox の組み合わせでは最後の値が有効
    if hasattr(source, "getlist"):
        values = source.getlist(name)
        return values[-1] if values else default
    value = source.get(name, default)
    return default if value is None else value


def _list(source, name):
    if hasattr(source, "getlist"):
        return source.getlist(name)
    return list(source.get(name) or [])


def _truthy(value):
    return value is True or str(value).strip().lower() in ("1", "true", "on", "yes")


def form_actions(source):
    """
    Translate a submitted quotation form (or calculator JSON body) into the
    ordered list of form actions.
    """
    actions = []
    machine_type = _last(source, "machine_type", "")
    if machine_type:
        actions.append(set_machine_type(machine_type))

    equipment_id = _last(source, "equipment_id")
    if equipment_id not in (None, ""):
        try:
            equipment_id = int(equipment_id)
        except (TypeError, ValueError):
            raise ValidationError("Please select equipment", field="selected_equipment")
        equipment = get_equipment_by_id(equipment_id)
        actions.append(select_equipment(SelectedEquipment.from_model(equipment)))

    order_type = _last(source, "order_type")
    if order_type:
        actions.append(set_order_type(order_type))
    actions.append(set_number_of_days(_last(source, "number_of_days", 0) or 0))

    for name, default in _FIELD_DEFAULTS.items():
        value = _last(source, name, default)
        actions.append(set_field(name, default if value in (None, "") else value))
    actions.append(set_field("include_gst", _truthy(_last(source, "include_gst", True))))
    actions.append(set_incidental_charges(_list(source, "incidental_charges")))
    actions.append(set_other_factors(_list(source, "other_factors")))
    actions.append(set_include_elongation(_truthy(_last(source, "include_elongation", False))))
    actions.append(set_notes(_last(source, "notes", "")))
    return actions


def _values_from_state(state):
    inputs = state.inputs
    values = {name: getattr(inputs, name) for name in _FIELD_DEFAULTS}
    values.update(
        machine_type=state.machine_type,
        equipment_id=state.selected_equipment.id or "",
        order_type=inputs.order_type,
        number_of_days=inputs.number_of_days or "",
        include_gst=inputs.include_gst,
        include_elongation=state.include_elongation,
        notes=state.notes,
        incidental_charges=list(inputs.incidental_charges),
        other_factors=list(inputs.other_factors),
    )
    return values


def _render_form(deal, quotation, source):
    form = {name: _last(source, name, default) for name, default in _FIELD_DEFAULTS.items()}
    form.update(
        machine_type=_last(source, "machine_type", ""),
        equipment_id=str(_last(source, "equipment_id", "") or ""),
        order_type=_last(source, "order_type", "micro"),
        number_of_days=_last(source, "number_of_days", ""),
        include_gst=_truthy(_last(source, "include_gst", True)),
        include_elongation=_truthy(_last(source, "include_elongation", False)),
        notes=_last(source, "notes", "") or "",
        incidental_charges=_list(source, "incidental_charges"),
        other_factors=_list(source, "other_factors"),
    )

    equipment_choices = []
    if form["machine_type"]:
        equipment_choices = get_equipment_by_category(form["machine_type"], available_only=True)
    if form["equipment_id"] and form["equipment_id"] not in {str(e.id) for e in equipment_choices}:
        # 稼働中などで一覧に出ない選択済み機材も表示する
        try:
            equipment_choices.append(get_equipment_by_id(int(form["equipment_id"])))
        except (ValidationError, ValueError):
            form["equipment_id"] = ""

    rates = get_rate_tables()
    try:
        state = replay(form_actions(source))
        breakdown = quotation_service.price_form_state(state, rates)
        order_type_locked = state.order_type_locked
    except ValidationError:
        breakdown = None
        order_type_locked = False

    return render_template(
        "quotation_form.html",
        deal=deal,
        quotation=quotation,
        form=form,
        breakdown=breakdown,
        order_type_locked=order_type_locked,
        rates=rates,
        categories=CATEGORIES,
        equipment_choices=equipment_choices,
        order_types=ORDER_TYPES,
        shifts=SHIFTS,
        day_night_options=DAY_NIGHT,
        usage_types=USAGE_TYPES,
        risk_levels=RISK_LEVELS,
        incidental_keys=INCIDENTAL_KEYS,
        other_factor_keys=OTHER_FACTOR_KEYS,
    )


@quotation_bp.route("/quotations")
@login_required
def quotation_list():
    status = request.args.get("status", "").strip() or None
    quotations = quotation_service.get_quotations(status)
    return render_template(
        "quotation_list.html", quotations=quotations, status=status, statuses=quotation_service.QUOTATION_STATUSES
    )


@quotation_bp.route("/quotations/calculate", methods=["POST"])
@login_required
def quotation_calculate():
    """Live calculator: price the posted form without saving anything."""
    source = request.get_json(silent=True) or request.form
    try:
        state = replay(form_actions(source))
        breakdown = quotation_service.price_form_state(state)
    except ValidationError as e:
        return jsonify({"error": e.message, "field": e.field}), 400
    except RemoteError as e:
        return jsonify({"error": e.message}), 503
    amounts = breakdown.as_dict()
    return jsonify({
        "orderType": state.inputs.order_type,
        "orderTypeLocked": state.order_type_locked,
        "baseRate": state.base_rate,
        "breakdown": amounts,
        "formatted": {k: format_currency(v) for k, v in amounts.items()},
    })


@quotation_bp.route("/quotations/new", methods=["GET", "POST"])
@login_required
@roles_required("admin", "sales_agent")
def quotation_new():
    deal_id = request.values.get("deal_id", type=int)
    if not deal_id:
        flash("Please choose a deal to quote.", "warning")
        return redirect(url_for("deal.deal_list"))
    deal = get_or_404(get_deal_by_id, deal_id)

    if request.method == "POST":
        try:
            state = replay(form_actions(request.form))
            quotation = quotation_service.create_quotation(deal.id, state, created_by=g.current_user.id)
        except (ValidationError, RemoteError) as e:
            flash(e.message, "danger")
            return _render_form(deal, None, request.form)
        flash(f"Quotation {quotation.quotation_number} created", "success")
        return redirect(url_for("quotation.quotation_view", quotation_id=quotation.id))

    if deal.quotations:
        flash("This deal already has a quotation.", "info")
        return redirect(url_for("quotation.quotation_view", quotation_id=deal.quotations[0].id))
    values = {}
    if deal.lead and deal.lead.rental_days:
        values["number_of_days"] = str(deal.lead.rental_days)
    return _render_form(deal, None, values)


@quotation_bp.route("/quotations/<int:quotation_id>")
@login_required
def quotation_view(quotation_id):
    quotation = get_or_404(quotation_service.get_quotation_by_id, quotation_id)
    breakdown = CostBreakdown(
        **{name: getattr(quotation, name) for name in CostBreakdown.field_names() if name != "total_amount"},
        total_amount=quotation.total_rent,
    )
    return render_template(
        "quotation_view.html",
        quotation=quotation,
        breakdown=breakdown,
        transitions=quotation_service.STATUS_TRANSITIONS[quotation.status],
        templates=get_templates(),
    )


@quotation_bp.route("/quotations/<int:quotation_id>/edit", methods=["GET", "POST"])
@login_required
@roles_required("admin", "sales_agent")
def quotation_edit(quotation_id):
    quotation = get_or_404(quotation_service.get_quotation_by_id, quotation_id)
    if request.method == "POST":
        try:
            state = replay(form_actions(request.form))
            quotation_service.update_quotation(quotation.id, state)
        except (ValidationError, RemoteError) as e:
            flash(e.message, "danger")
            return _render_form(quotation.deal, quotation, request.form)
        flash(f"Quotation {quotation.quotation_number} updated (v{quotation.version})", "success")
        return redirect(url_for("quotation.quotation_view", quotation_id=quotation.id))

    if not quotation_service.STATUS_TRANSITIONS[quotation.status]:
        flash(f"{quotation.status.capitalize()} quotations cannot be edited.", "warning")
        return redirect(url_for("quotation.quotation_view", quotation_id=quotation.id))
    state = replay(actions_for_quotation(quotation))
    return _render_form(quotation.deal, quotation, _values_from_state(state))


@quotation_bp.route("/quotations/<int:quotation_id>/status", methods=["POST"])
@login_required
def quotation_status(quotation_id):
    get_or_404(quotation_service.get_quotation_by_id, quotation_id)
    status = request.form.get("status", "")
    try:
        quotation_service.update_quotation_status(
            quotation_id, status, actor_user=g.current_user, comment=request.form.get("comment") or None
        )
        flash(f"Quotation marked as {status}", "success")
    except (ValidationError, RemoteError) as e:
        flash(e.message, "danger")
    return redirect(url_for("quotation.quotation_view", quotation_id=quotation_id))


@quotation_bp.route("/quotations/<int:quotation_id>/print")
@login_required
def quotation_print(quotation_id):
    quotation = get_or_404(quotation_service.get_quotation_by_id, quotation_id)
    template_id = request.args.get("template_id", type=int)
    template = get_or_404(get_template_by_id, template_id) if template_id else None
    document = render_quotation(quotation, company_from_config(current_app.config), template)
    current_app.logger.info(
        "[QUOTATION] print %s template=%s", quotation.quotation_number, template.id if template else "default"
    )
    return render_template("quotation_print.html", quotation=quotation, document=document)
