from crane_crm import db
from datetime import datetime
from enum import Enum
from sqlalchemy.orm import relationship


class DealStage(str, Enum):
    QUALIFICATION = "qualification"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    WON = "won"
    LOST = "lost"


class Deal(db.Model):
    __tablename__ = "deals"

    id = db.Column(db.Integer, primary_key=True)
    lead_id = db.Column(db.Integer, db.ForeignKey("leads.id"), nullable=True, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    value = db.Column(db.Float, nullable=False, default=0.0)
    stage = db.Column(db.String(20), nullable=False, default=DealStage.QUALIFICATION.value)
    probability = db.Column(db.Integer, nullable=False, default=0)
    expected_close_date = db.Column(db.Date, nullable=True)
    notes = db.Column(db.Text)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    assigned_to = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer = relationship("Customer", back_populates="deals")
    lead = relationship("Lead", back_populates="deals")
    quotations = relationship("Quotation", back_populates="deal", order_by="Quotation.created_at.desc()")

    def __repr__(self):
        return f"<Deal id={self.id} title={self.title} stage={self.stage}>"
