from crane_crm import db
from datetime import datetime
from enum import Enum
from sqlalchemy.orm import relationship


class LeadStatus(str, Enum):
    NEW = "new"
    IN_PROCESS = "in_process"
    QUALIFIED = "qualified"
    UNQUALIFIED = "unqualified"
    LOST = "lost"


class Lead(db.Model):
    __tablename__ = "leads"

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=True, index=True)
    customer_name = db.Column(db.String(255), nullable=False)
    company_name = db.Column(db.String(255))
    email = db.Column(db.String(255))
    phone = db.Column(db.String(50))
    designation = db.Column(db.String(100))
    service_needed = db.Column(db.String(255))
    site_location = db.Column(db.String(255))
    start_date = db.Column(db.String(20))
    rental_days = db.Column(db.Integer, default=0)
    shift_timing = db.Column(db.String(50))
    status = db.Column(db.String(20), nullable=False, default=LeadStatus.NEW.value)
    assigned_to_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer = relationship("Customer", back_populates="leads")
    assigned_to = relationship("User")
    deals = relationship("Deal", back_populates="lead")

    def __repr__(self):
        return f"<Lead id={self.id} customer_name={self.customer_name} status={self.status}>"
