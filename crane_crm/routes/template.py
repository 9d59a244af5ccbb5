from flask import Blueprint, render_template, request, redirect, url_for, flash, current_app
from crane_crm import db
from crane_crm.decorators import login_required, roles_required
from crane_crm.errors import RemoteError, ValidationError
from crane_crm.models.quotation import Quotation
from crane_crm.routes import get_or_404
from crane_crm.services import template_service
from crane_crm.services.config_service import get_default_template_config
from crane_crm.template_merge import company_from_config, placeholders_by_category, validate_template

template_bp = Blueprint('template', __name__)


def _render_form(template, values):
    return render_template(
        'template_form.html',
        template=template,
        values=values,
        placeholders=placeholders_by_category(),
        validation=validate_template(values.get('content', '')) if values.get('content') else None,
    )


@template_bp.route('/templates')
@login_required
def template_list():
    templates = template_service.get_templates()
    default_id = get_default_template_config().get("defaultTemplateId")
    return render_template('template_list.html', templates=templates, default_id=default_id)


@template_bp.route('/templates/new', methods=['GET', 'POST'])
@login_required
@roles_required('admin')
def template_new():
    if request.method == 'POST':
        try:
            template = template_service.create_template(request.form)
        except (ValidationError, RemoteError) as e:
            flash(e.message, 'danger')
            return _render_form(None, request.form)
        flash(f'Template "{template.name}" created', 'success')
        return redirect(url_for('template.template_list'))
    return _render_form(None, {"content": template_service.BUILTIN_TEMPLATE_CONTENT})


@template_bp.route('/templates/<int:template_id>/edit', methods=['GET', 'POST'])
@login_required
@roles_required('admin')
def template_edit(template_id):
    template = get_or_404(template_service.get_template_by_id, template_id)
    if request.method == 'POST':
        try:
            template_service.update_template(template.id, request.form)
        except (ValidationError, RemoteError) as e:
            flash(e.message, 'danger')
            return _render_form(template, request.form)
        flash('Template updated', 'success')
        return redirect(url_for('template.template_list'))
    values = {"name": template.name, "description": template.description or "", "content": template.content}
    return _render_form(template, values)


@template_bp.route('/templates/<int:template_id>/delete', methods=['POST'])
@login_required
@roles_required('admin')
def template_delete(template_id):
    get_or_404(template_service.get_template_by_id, template_id)
    try:
        template_service.delete_template(template_id)
        flash('Template deleted', 'success')
    except RemoteError as e:
        flash(e.message, 'danger')
    return redirect(url_for('template.template_list'))


@template_bp.route('/templates/<int:template_id>/default', methods=['POST'])
@login_required
@roles_required('admin')
def template_set_default(template_id):
    get_or_404(template_service.get_template_by_id, template_id)
    try:
        template = template_service.set_default_template(template_id)
        flash(f'"{template.name}" is now the default template', 'success')
    except RemoteError as e:
        flash(e.message, 'danger')
    return redirect(url_for('template.template_list'))


@template_bp.route('/templates/<int:template_id>/preview')
@login_required
def template_preview(template_id):
    """Render the template against a quotation (latest one unless ?quotation_id= is given)."""
    template = get_or_404(template_service.get_template_by_id, template_id)
    quotation_id = request.args.get('quotation_id', type=int)
    if quotation_id:
        quotation = db.get_or_404(Quotation, quotation_id)
    else:
        quotation = Quotation.query.order_by(Quotation.created_at.desc()).first()
    document = None
    if quotation is not None:
        document = template_service.render_quotation(quotation, company_from_config(current_app.config), template)
    return render_template('template_preview.html', template=template, quotation=quotation, document=document)
