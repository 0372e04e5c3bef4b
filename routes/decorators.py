# routes/decorators.py
from functools import wraps

from flask import g, request

from errors import AuthorizationError, ForbiddenError, ValidationError
from models.account import Role
from services import get_services


def bearer_token():
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return ""
    return token.strip()


def session_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        token = bearer_token()
        if not token:
            raise AuthorizationError("Access token required")
        g.session = get_services().tokens.validate(token)
        return f(*args, **kwargs)
    return decorated


def controller_required(f):
    @wraps(f)
    @session_required
    def decorated(*args, **kwargs):
        if g.session.role is not Role.CONTROLLER:
            raise ForbiddenError("Controller access required")
        return f(*args, **kwargs)
    return decorated


def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError({"body": "Expected a JSON object."}, "Invalid JSON payload")
    return data


def text_field(data, key):
    """A string field from a JSON body; missing or null reads as empty."""
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError({key: "Must be a string."})
    return value


def role_from(data, default=Role.STUDENT):
    role = Role.parse(text_field(data, "role"), default=default)
    if role is None:
        raise ValidationError({"role": "Must be 'student' or 'controller'."})
    return role


def pagination():
    try:
        page = max(int(request.args.get("page", 1)), 1)
        limit = min(max(int(request.args.get("limit", 10)), 1), 100)
    except ValueError:
        raise ValidationError({"page": "page and limit must be integers."})
    return page, limit


def page_meta(page, limit, total):
    return {"page": page, "limit": limit, "total": total, "pages": (total + limit - 1) // limit}


def bool_arg(name):
    value = request.args.get(name)
    if value is None:
        return None
    return value.strip().lower() in {"1", "true", "yes"}
