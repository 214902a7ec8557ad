from functools import wraps
from flask import abort, g
from flask_jwt_extended import verify_jwt_in_request, get_jwt_identity, get_jwt
from crm import get_db
from crm.models.user import User


def require_user(fn):
    """Require a bearer token whose subject is an existing, Active user.

    The user row is exposed as ``g.current_user`` for the handler.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        if get_jwt().get('purpose'):
            # activation tokens only work against /auth endpoints
            abort(401, description='Unauthorized')
        user = get_db().get(User, str(get_jwt_identity()))
        if not user or user.status != User.STATUS_ACTIVE:
            abort(401, description='Unauthorized')
        g.current_user = user
        return fn(*args, **kwargs)
    return wrapper


def current_user_id() -> str:
    return g.current_user.id
