from flask import Blueprint, render_template, request, redirect, url_for, flash, jsonify
from crane_crm.cost_utils import ORDER_TYPES
from crane_crm.decorators import login_required, roles_required
from crane_crm.errors import RemoteError, ValidationError
from crane_crm.routes import get_or_404
from crane_crm.services import equipment_service

equipment_bp = Blueprint('equipment', __name__)

_FORM_FIELDS = (
    "name",
    "category",
    "manufacturing_date",
    "registration_date",
    "max_lifting_capacity",
    "unladen_weight",
    "running_cost_per_km",
    "description",
    "status",
)


def _equipment_payload(form):
    data = {k: form.get(k, '') for k in _FORM_FIELDS}
    data["base_rates"] = {t: form.get(f"base_rate_{t}", '') for t in ORDER_TYPES}
    return data


def _render_form(equipment, values):
    return render_template(
        'equipment_form.html',
        equipment=equipment,
        values=values,
        categories=equipment_service.CATEGORIES,
        statuses=equipment_service.STATUSES,
        order_types=ORDER_TYPES,
    )


@equipment_bp.route('/equipment')
@login_required
def equipment_list():
    category = request.args.get('category', '').strip()
    if category:
        items = equipment_service.get_equipment_by_category(category)
    else:
        items = equipment_service.get_equipment()
    return render_template(
        'equipment_list.html', equipment=items, category=category, categories=equipment_service.CATEGORIES
    )


@equipment_bp.route('/equipment/by-category/<category>')
@login_required
def equipment_by_category(category):
    """JSON list used by the quotation form's equipment picker."""
    items = equipment_service.get_equipment_by_category(category, available_only=True)
    return jsonify([e.to_dict() for e in items])


@equipment_bp.route('/equipment/new', methods=['GET', 'POST'])
@login_required
def equipment_new():
    if request.method == 'POST':
        try:
            equipment = equipment_service.create_equipment(_equipment_payload(request.form))
        except (ValidationError, RemoteError) as e:
            flash(e.message, 'danger')
            return _render_form(None, request.form)
        flash(f'Equipment {equipment.equipment_code} added', 'success')
        return redirect(url_for('equipment.equipment_list'))
    return _render_form(None, {})


@equipment_bp.route('/equipment/<int:equipment_id>/edit', methods=['GET', 'POST'])
@login_required
def equipment_edit(equipment_id):
    equipment = get_or_404(equipment_service.get_equipment_by_id, equipment_id)
    if request.method == 'POST':
        try:
            equipment_service.update_equipment(equipment.id, _equipment_payload(request.form))
        except (ValidationError, RemoteError) as e:
            flash(e.message, 'danger')
            return _render_form(equipment, request.form)
        flash('Equipment updated', 'success')
        return redirect(url_for('equipment.equipment_list'))
    values = {k: '' if getattr(equipment, k) is None else getattr(equipment, k) for k in _FORM_FIELDS}
    for t in ORDER_TYPES:
        values[f"base_rate_{t}"] = equipment.base_rates[t]
    return _render_form(equipment, values)


@equipment_bp.route('/equipment/<int:equipment_id>/delete', methods=['POST'])
@login_required
@roles_required('admin')
def equipment_delete(equipment_id):
    get_or_404(equipment_service.get_equipment_by_id, equipment_id)
    try:
        equipment_service.delete_equipment(equipment_id)
        flash('Equipment deleted', 'success')
    except RemoteError as e:
        flash(e.message, 'danger')
    return redirect(url_for('equipment.equipment_list'))
