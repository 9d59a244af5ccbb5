from crane_crm import db
from datetime import datetime


class QuotationTemplate(db.Model):
    __tablename__ = "quotation_templates"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.String(255), nullable=True)
    content = db.Column(db.Text, nullable=False)  # {{placeholder}} 入り HTML
    is_default = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<QuotationTemplate id={self.id} name={self.name}>"
