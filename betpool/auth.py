"""
Bearer-token authentication for the JSON API.

Tokens are issued outside the pool (``manage.py user create``); this module
only resolves ``Authorization: Bearer <token>`` to a user for Flask-Login.
"""

from functools import wraps

from flask import jsonify, request
from flask_login import current_user

from betpool import login_manager
from betpool.models import User


def _extract_bearer_token(req):
    header = req.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


@login_manager.request_loader
def load_user_from_request(req):
    token = _extract_bearer_token(req)
    return User.get_by_token(token)


@login_manager.unauthorized_handler
def unauthorized():
    if not request.headers.get("Authorization"):
        message = "Access denied. No token provided."
    else:
        message = "Invalid token."
    return jsonify({"success": False, "message": message, "data": {}}), 401


def admin_required(f):
    """Restrict a view to authenticated administrators"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return login_manager.unauthorized()
        if not current_user.is_admin:
            return (
                jsonify({"success": False, "message": "Access forbidden", "data": {}}),
                403,
            )
        return f(*args, **kwargs)

    return decorated_function
