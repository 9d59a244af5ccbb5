from functools import wraps
from flask import session, redirect, url_for, g, abort, request


def _login_redirect():
    next_url = request.full_path
    if next_url.endswith('?'):
        next_url = next_url[:-1]
    return redirect(url_for("auth.login", next=next_url))


def login_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not session.get("user_id") or not getattr(g, "current_user", None):
            return _login_redirect()
        return f(*args, **kwargs)
    return decorated_function


def roles_required(*roles):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not session.get("user_id"):
                return _login_redirect()
            user = getattr(g, "current_user", None)
            if not user or user.role not in roles:
                abort(403)
            return f(*args, **kwargs)
        return decorated_function
    return decorator
