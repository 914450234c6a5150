from functools import wraps
from flask import jsonify
from flask_jwt_extended import get_jwt, get_jwt_identity
from marketing_cms.domain.permissions import has_permission


def current_role():
    return get_jwt().get("role")


def current_user_id():
    return get_jwt_identity()


def permission_required(resource, action):
    """
    Gate a view on the caller's role granting `action` on `resource`.
    Must be applied under @jwt_required().
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not has_permission(current_role(), resource, action):
                return jsonify({
                    "error": "Forbidden",
                    "message": f"Insufficient permissions for {resource}:{action}"
                }), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator
