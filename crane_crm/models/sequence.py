from crane_crm import db


class Sequence(db.Model):
    """表示用コード（EQ0001 など）の採番カウンタ"""
    __tablename__ = "sequences"

    name = db.Column(db.String(50), primary_key=True)
    value = db.Column(db.Integer, nullable=False, default=0)
