from flask import Blueprint, render_template
from sqlalchemy import func
from crane_crm import db
from crane_crm.decorators import login_required
from crane_crm.models import Deal, DealStage, Equipment, EquipmentStatus, Lead, LeadStatus, Quotation


main_bp = Blueprint('main', __name__)


@main_bp.route("/")
@login_required
def index():
    status_counts = dict(
        db.session.query(Quotation.status, func.count(Quotation.id)).group_by(Quotation.status).all()
    )
    open_stages = (DealStage.QUALIFICATION.value, DealStage.PROPOSAL.value, DealStage.NEGOTIATION.value)
    summary = {
        "new_leads": Lead.query.filter(Lead.status == LeadStatus.NEW.value).count(),
        "open_deals": Deal.query.filter(Deal.stage.in_(open_stages)).count(),
        "available_equipment": Equipment.query.filter(Equipment.status == EquipmentStatus.AVAILABLE.value).count(),
        "quotations": status_counts,
        "accepted_value": db.session.query(func.coalesce(func.sum(Quotation.total_rent), 0))
        .filter(Quotation.status == "accepted")
        .scalar(),
    }
    recent = Quotation.query.order_by(Quotation.created_at.desc()).limit(5).all()
    return render_template("dashboard.html", summary=summary, recent_quotations=recent)
