import os

base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
db_path = os.environ.get("CRANE_DB_PATH") or os.path.join(base_dir, "crane_crm.db")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_DATABASE_URI = f"sqlite:///{db_path}"
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # 初期管理者
    ADMIN_LOGIN_ID = os.environ.get("CRANE_ADMIN_LOGIN", "admin")
    ADMIN_PASSWORD = os.environ.get("CRANE_ADMIN_PASSWORD", "admin1234")

    # 見積書レターヘッド
    COMPANY_NAME = os.environ.get("COMPANY_NAME", "ASP Cranes")
    COMPANY_ADDRESS = os.environ.get("COMPANY_ADDRESS", "123 Industrial Area, Mumbai, Maharashtra 400001")
    COMPANY_PHONE = os.environ.get("COMPANY_PHONE", "+91 22 1234 5678")
    COMPANY_EMAIL = os.environ.get("COMPANY_EMAIL", "info@aspcranes.com")
    COMPANY_GST = os.environ.get("COMPANY_GST", "27AABCS1429B1ZB")
    COMPANY_PAN = os.environ.get("COMPANY_PAN", "AABCS1429B")

    QUOTATION_VALIDITY_DAYS = int(os.environ.get("QUOTATION_VALIDITY_DAYS", "30"))
    PAYMENT_TERMS = "50% advance, balance against monthly bills"
    TERMS_CONDITIONS = "Standard terms and conditions apply"
