from flask import Blueprint, render_template, request, redirect, url_for, flash, g
from crane_crm.decorators import login_required
from crane_crm.errors import NotFoundError, RemoteError, ValidationError
from crane_crm.routes import get_or_404
from crane_crm.services import deal_service
from crane_crm.services.customer_service import get_customers
from crane_crm.services.lead_service import get_lead_by_id, get_leads

deal_bp = Blueprint('deal', __name__)


def _form_context(values):
    return {
        "values": values,
        "customers": get_customers(),
        "leads": get_leads(),
        "stages": deal_service.DEAL_STAGES,
    }


@deal_bp.route('/deals')
@login_required
def deal_list():
    stage = request.args.get('stage', '').strip() or None
    deals = deal_service.get_deals(stage)
    return render_template('deal_list.html', deals=deals, stage=stage, stages=deal_service.DEAL_STAGES)


@deal_bp.route('/deals/new', methods=['GET', 'POST'])
@login_required
def deal_new():
    if request.method == 'POST':
        try:
            deal = deal_service.create_deal(request.form, created_by=g.current_user.id)
        except (ValidationError, RemoteError) as e:
            flash(e.message, 'danger')
            return render_template('deal_form.html', **_form_context(request.form))
        flash('Deal created', 'success')
        return redirect(url_for('deal.deal_detail', deal_id=deal.id))

    values = {}
    lead_id = request.args.get('lead_id', type=int)
    if lead_id:
        # リードから商談化する場合は顧客とタイトルを引き継ぐ
        try:
            lead = get_lead_by_id(lead_id)
            values = {
                "lead_id": lead.id,
                "customer_id": lead.customer_id or "",
                "title": f"{lead.service_needed or 'Crane rental'} - {lead.company_name or lead.customer_name}",
            }
        except NotFoundError:
            flash('Lead not found', 'warning')
    return render_template('deal_form.html', **_form_context(values))


@deal_bp.route('/deals/<int:deal_id>')
@login_required
def deal_detail(deal_id):
    deal = get_or_404(deal_service.get_deal_by_id, deal_id)
    return render_template('deal_detail.html', deal=deal, stages=deal_service.DEAL_STAGES)


@deal_bp.route('/deals/<int:deal_id>/stage', methods=['POST'])
@login_required
def deal_stage(deal_id):
    get_or_404(deal_service.get_deal_by_id, deal_id)
    try:
        deal_service.update_deal_stage(deal_id, request.form.get('stage', ''))
        flash('Deal stage updated', 'success')
    except (ValidationError, RemoteError) as e:
        flash(e.message, 'danger')
    return redirect(url_for('deal.deal_detail', deal_id=deal_id))
