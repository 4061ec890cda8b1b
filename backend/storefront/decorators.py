# Overview: Request authentication and role decorators for API routes.

from functools import wraps
from flask import request, g

from .errors import AuthenticationError, PermissionDeniedError
from .extensions import get_container
from .permissions import has_role


def bearer_token() -> str | None:
    """Token from 'Authorization: Bearer <token>', or None."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def require_auth(f):
    """
    Require a valid access token.

    Sets g.principal to the resolved Principal. Raises AuthenticationError
    (401) when:
    - No Authorization header
    - Invalid or expired token
    - User no longer exists
    - User account deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.principal = get_container().auth.authenticate(bearer_token())
        return f(*args, **kwargs)

    return decorated_function


def require_roles(allowed_roles):
    """
    Require the principal's role to be in `allowed_roles` (e.g. MANAGER_OR_ADMIN).

    Must be applied below @require_auth. Raises PermissionDeniedError (403).
    """
    allowed = frozenset(allowed_roles)

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            principal = getattr(g, "principal", None)
            if principal is None:
                raise AuthenticationError("Authentication required")
            if not has_role(principal.role, allowed):
                raise PermissionDeniedError("Insufficient permissions")
            return f(*args, **kwargs)

        return decorated_function
    return decorator
