from functools import wraps

from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

from app.models.enums import UserRole
from app.services.access import Caller
from app.utils.api_response import APIResponse


def current_caller():
    """Build the caller identity from the verified access token"""
    claims = get_jwt()
    return Caller(
        user_id=get_jwt_identity(),
        email=claims.get('email'),
        role=claims.get('role', UserRole.CUSTOMER.value)
    )


def admin_required():
    """Decorator to require an admin access token"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            verify_jwt_in_request()
            if not current_caller().is_admin:
                return APIResponse.forbidden("Admin access required")
            return f(*args, **kwargs)
        return decorated_function
    return decorator
