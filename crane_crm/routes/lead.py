from flask import Blueprint, render_template, request, redirect, url_for, flash, g
from crane_crm.decorators import login_required
from crane_crm.errors import RemoteError, ValidationError
from crane_crm.routes import get_or_404
from crane_crm.services import lead_service
from crane_crm.services.customer_service import get_customers

lead_bp = Blueprint('lead', __name__)


@lead_bp.route('/leads')
@login_required
def lead_list():
    status = request.args.get('status', '').strip() or None
    leads = lead_service.get_leads(status)
    return render_template('lead_list.html', leads=leads, status=status, statuses=lead_service.LEAD_STATUSES)


@lead_bp.route('/leads/new', methods=['GET', 'POST'])
@login_required
def lead_new():
    if request.method == 'POST':
        try:
            lead = lead_service.create_lead(request.form, assigned_to_user_id=g.current_user.id)
        except (ValidationError, RemoteError) as e:
            flash(e.message, 'danger')
            return render_template('lead_form.html', values=request.form, customers=get_customers())
        flash(f'Lead for {lead.customer_name} created', 'success')
        return redirect(url_for('lead.lead_list'))
    return render_template('lead_form.html', values={}, customers=get_customers())


@lead_bp.route('/leads/<int:lead_id>/status', methods=['POST'])
@login_required
def lead_status(lead_id):
    get_or_404(lead_service.get_lead_by_id, lead_id)
    try:
        lead_service.update_lead_status(lead_id, request.form.get('status', ''))
        flash('Lead status updated', 'success')
    except (ValidationError, RemoteError) as e:
        flash(e.message, 'danger')
    return redirect(url_for('lead.lead_list'))
