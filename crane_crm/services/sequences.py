from sqlalchemy import update
from crane_crm import db
from crane_crm.models.sequence import Sequence

EQUIPMENT = ("equipment", "EQ")
CUSTOMER = ("customer", "CRM")
QUOTATION = ("quotation", "QT")


def next_value(name):
    """
    Increment the named counter inside the caller's transaction and return
    the new value. The row is created on first use.
    """
    result = db.session.execute(
        update(Sequence).where(Sequence.name == name).values(value=Sequence.value + 1)
    )
    if result.rowcount == 0:
        db.session.add(Sequence(name=name, value=1))
        db.session.flush()
        return 1
    return db.session.get(Sequence, name, populate_existing=True).value


def next_code(sequence, width=4):
    name, prefix = sequence
    return f"{prefix}{next_value(name):0{width}d}"
