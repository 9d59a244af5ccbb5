from crane_crm import db
from datetime import datetime
from sqlalchemy.orm import relationship


class Customer(db.Model):
    __tablename__ = "customers"

    id = db.Column(db.Integer, primary_key=True)
    customer_code = db.Column(db.String(20), unique=True, nullable=False)  # CRM0001
    name = db.Column(db.String(255), nullable=False)
    company_name = db.Column(db.String(255))
    email = db.Column(db.String(255))
    phone = db.Column(db.String(50))
    address = db.Column(db.String(255))
    designation = db.Column(db.String(100), default="N/A")
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    deals = relationship("Deal", back_populates="customer")
    leads = relationship("Lead", back_populates="customer")

    def contact_snapshot(self):
        return {
            "name": self.name or "",
            "email": self.email or "",
            "phone": self.phone or "",
            "company": self.company_name or "",
            "address": self.address or "",
            "designation": self.designation or "N/A",
        }

    def __repr__(self):
        return f"<Customer {self.customer_code} {self.name}>"
