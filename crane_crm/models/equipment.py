from crane_crm import db
from datetime import datetime
from enum import Enum


class CraneCategory(str, Enum):
    MOBILE_CRANE = "mobile_crane"
    TOWER_CRANE = "tower_crane"
    CRAWLER_CRANE = "crawler_crane"
    PICK_AND_CARRY_CRANE = "pick_and_carry_crane"


class EquipmentStatus(str, Enum):
    AVAILABLE = "available"
    IN_USE = "in_use"
    MAINTENANCE = "maintenance"


class Equipment(db.Model):
    __tablename__ = "equipment"

    id = db.Column(db.Integer, primary_key=True)
    equipment_code = db.Column(db.String(20), unique=True, nullable=False)  # EQ0001
    name = db.Column(db.String(200), nullable=False)
    category = db.Column(db.String(50), nullable=False, index=True)
    manufacturing_date = db.Column(db.String(7), nullable=False)  # YYYY-MM
    registration_date = db.Column(db.String(7), nullable=False)  # YYYY-MM
    max_lifting_capacity = db.Column(db.Float, nullable=False)  # t
    unladen_weight = db.Column(db.Float, nullable=False)  # t
    # micro/small は時間単価、monthly/yearly は月額
    base_rate_micro = db.Column(db.Float, nullable=False, default=0)
    base_rate_small = db.Column(db.Float, nullable=False, default=0)
    base_rate_monthly = db.Column(db.Float, nullable=False, default=0)
    base_rate_yearly = db.Column(db.Float, nullable=False, default=0)
    running_cost_per_km = db.Column(db.Float, nullable=False, default=0)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=EquipmentStatus.AVAILABLE.value)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def base_rates(self):
        return {
            "micro": self.base_rate_micro or 0.0,
            "small": self.base_rate_small or 0.0,
            "monthly": self.base_rate_monthly or 0.0,
            "yearly": self.base_rate_yearly or 0.0,
        }

    def to_dict(self):
        return {
            "id": self.id,
            "equipmentId": self.equipment_code,
            "name": self.name,
            "category": self.category,
            "baseRates": self.base_rates,
            "runningCostPerKm": self.running_cost_per_km or 0.0,
            "status": self.status,
        }

    def __repr__(self):
        return f"<Equipment {self.equipment_code} name={self.name} category={self.category}>"
