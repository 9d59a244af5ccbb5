from flask import abort
from crane_crm.errors import NotFoundError


def get_or_404(getter, *args):
    """Call a service getter and turn NotFoundError into a 404 page."""
    try:
        return getter(*args)
    except NotFoundError:
        abort(404)
