from crane_crm import db
from crane_crm.models.user import User
from crane_crm.models.sequence import Sequence
from crane_crm.models.config_document import ConfigDocument
from crane_crm.models.customer import Customer
from crane_crm.models.lead import Lead, LeadStatus
from crane_crm.models.deal import Deal, DealStage
from crane_crm.models.equipment import Equipment, EquipmentStatus, CraneCategory
from crane_crm.models.quotation import Quotation, QuotationStatus
from crane_crm.models.quotation_template import QuotationTemplate

__all__ = [
    "User",
    "Sequence",
    "ConfigDocument",
    "Customer",
    "Lead",
    "LeadStatus",
    "Deal",
    "DealStage",
    "Equipment",
    "EquipmentStatus",
    "CraneCategory",
    "Quotation",
    "QuotationStatus",
    "QuotationTemplate",
]
