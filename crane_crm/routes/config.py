from flask import Blueprint, render_template, request, redirect, url_for, flash
from crane_crm import db
from crane_crm.cost_utils import ORDER_TYPES
from crane_crm.decorators import roles_required
from crane_crm.errors import RemoteError, ValidationError
from crane_crm.models.user import ROLES, User
from crane_crm.services import commit_or_raise, config_service
from crane_crm.services.template_service import get_templates, set_default_template

config_bp = Blueprint('config', __name__, url_prefix='/config')


def _number(form, name):
    raw = form.get(name, '').replace(',', '').strip()
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number", field=name)


@config_bp.route('/')
@roles_required('admin')
def config_index():
    try:
        context = {
            "quotation_config": config_service.get_quotation_config(),
            "resource_rates": config_service.get_resource_rates_config(),
            "additional_params": config_service.get_additional_params_config(),
            "default_template": config_service.get_default_template_config(),
        }
    except RemoteError as e:
        flash(e.message, 'danger')
        return redirect(url_for('main.index'))
    return render_template('config.html', order_types=ORDER_TYPES, templates=get_templates(), **context)


@config_bp.route('/quotation', methods=['POST'])
@roles_required('admin')
def config_quotation():
    try:
        limits = {
            t: {"minDays": _number(request.form, f"{t}.minDays"), "maxDays": _number(request.form, f"{t}.maxDays")}
            for t in ORDER_TYPES
        }
        config_service.update_quotation_config({"orderTypeLimits": limits})
        flash('Order type limits saved', 'success')
    except (ValidationError, RemoteError) as e:
        flash(e.message, 'danger')
    return redirect(url_for('config.config_index'))


@config_bp.route('/resource-rates', methods=['POST'])
@roles_required('admin')
def config_resource_rates():
    try:
        config_service.update_resource_rates_config({
            "foodRatePerMonth": _number(request.form, "foodRatePerMonth"),
            "accommodationRatePerMonth": _number(request.form, "accommodationRatePerMonth"),
        })
        flash('Resource rates saved', 'success')
    except (ValidationError, RemoteError) as e:
        flash(e.message, 'danger')
    return redirect(url_for('config.config_index'))


@config_bp.route('/additional-params', methods=['POST'])
@roles_required('admin')
def config_additional_params():
    try:
        updates = {}
        for section, defaults in config_service.DEFAULT_ADDITIONAL_PARAMS.items():
            # 送信されたキーのみ更新（section.key 形式）
            values = {key: _number(request.form, f"{section}.{key}") for key in defaults if f"{section}.{key}" in request.form}
            if values:
                updates[section] = values
        config_service.update_additional_params_config(updates)
        flash('Additional parameters saved', 'success')
    except (ValidationError, RemoteError) as e:
        flash(e.message, 'danger')
    return redirect(url_for('config.config_index'))


@config_bp.route('/default-template', methods=['POST'])
@roles_required('admin')
def config_default_template():
    template_id = request.form.get('template_id', type=int)
    try:
        if template_id:
            set_default_template(template_id)
        else:
            config_service.update_default_template_config(None)
        flash('Default template saved', 'success')
    except (ValidationError, RemoteError) as e:
        flash(e.message, 'danger')
    return redirect(url_for('config.config_index'))


@config_bp.route('/users')
@roles_required('admin')
def user_list():
    users = User.query.order_by(User.login_id).all()
    return render_template('users.html', users=users, roles=ROLES)


@config_bp.route('/users/<int:user_id>', methods=['POST'])
@roles_required('admin')
def user_update(user_id):
    user = db.get_or_404(User, user_id)
    role = request.form.get('role', user.role)
    if role not in ROLES:
        flash(f'Unknown role: {role}', 'danger')
        return redirect(url_for('config.user_list'))
    user.role = role
    user.is_active = request.form.get('is_active') == '1'
    try:
        commit_or_raise("updating user")
        flash(f'User {user.login_id} updated', 'success')
    except RemoteError as e:
        flash(e.message, 'danger')
    return redirect(url_for('config.user_list'))
