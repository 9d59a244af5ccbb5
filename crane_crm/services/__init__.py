import logging
from sqlalchemy.exc import SQLAlchemyError
from crane_crm import db
from crane_crm.errors import RemoteError

logger = logging.getLogger(__name__)


def commit_or_raise(action):
    """
    Commit the current session. On a database error the session is rolled
    back and a RemoteError is raised for the route to turn into a message.
    """
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("[DB] %s failed: %s", action, e)
        raise RemoteError(f"Error {action}", original=e)
