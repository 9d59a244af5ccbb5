from crane_crm import db
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum


class QuotationStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Quotation(db.Model):
    __tablename__ = "quotations"

    id = db.Column(db.Integer, primary_key=True)
    quotation_number = db.Column(db.String(20), unique=True, nullable=False)  # 表示用 QT0001
    deal_id = db.Column(db.Integer, db.ForeignKey("deals.id"), nullable=False, index=True)
    lead_id = db.Column(db.Integer, db.ForeignKey("leads.id"), nullable=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=True, index=True)
    customer_name = db.Column(db.String(255), nullable=True)
    customer_contact = db.Column(db.JSON, nullable=False, default=dict)

    # 入力条件
    order_type = db.Column(db.String(10), nullable=False, default="micro")
    number_of_days = db.Column(db.Integer, nullable=False)
    working_hours = db.Column(db.Float, nullable=False, default=8)
    shift = db.Column(db.String(10), nullable=False, default="single")
    day_night = db.Column(db.String(10), nullable=False, default="day")
    equipment_id = db.Column(db.Integer, db.ForeignKey("equipment.id", ondelete="SET NULL"), nullable=True)
    selected_equipment = db.Column(db.JSON, nullable=False, default=dict)
    base_rate = db.Column(db.Float, nullable=False, default=0)
    running_cost_per_km = db.Column(db.Float, nullable=False, default=0)
    usage = db.Column(db.String(10), nullable=False, default="normal")
    risk_factor = db.Column(db.String(10), nullable=False, default="low")
    food_resources = db.Column(db.Integer, nullable=False, default=0)
    accom_resources = db.Column(db.Integer, nullable=False, default=0)
    site_distance = db.Column(db.Float, nullable=False, default=0)
    mob_demob = db.Column(db.Float, nullable=False, default=0)
    mob_relaxation = db.Column(db.Float, nullable=False, default=0)
    extra_charge = db.Column(db.Float, nullable=False, default=0)
    incidental_charges = db.Column(db.JSON, nullable=False, default=list)
    other_factors = db.Column(db.JSON, nullable=False, default=list)
    include_gst = db.Column(db.Boolean, nullable=False, default=True)
    include_elongation = db.Column(db.Boolean, nullable=False, default=False)

    # 計算結果（保存時に毎回再計算）
    working_cost = db.Column(db.Float, nullable=False, default=0)
    elongation_cost = db.Column(db.Float, nullable=False, default=0)
    food_accom_cost = db.Column(db.Float, nullable=False, default=0)
    mob_demob_cost = db.Column(db.Float, nullable=False, default=0)
    risk_adjustment = db.Column(db.Float, nullable=False, default=0)
    usage_load_factor = db.Column(db.Float, nullable=False, default=0)
    extra_charges = db.Column(db.Float, nullable=False, default=0)
    subtotal = db.Column(db.Float, nullable=False, default=0)
    gst_amount = db.Column(db.Float, nullable=False, default=0)
    total_rent = db.Column(db.Float, nullable=False, default=0)

    status = db.Column(db.String(20), nullable=False, default=QuotationStatus.DRAFT.value)
    version = db.Column(db.Integer, nullable=False, default=1)
    notes = db.Column(db.Text, nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    deal = relationship("Deal", back_populates="quotations")
    creator = relationship("User")

    def __repr__(self):
        return f"<Quotation {self.quotation_number} deal_id={self.deal_id} status={self.status} total={self.total_rent}>"
