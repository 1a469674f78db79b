# Overview: Request and position decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .errors import AuthorizationError, error_response
from .models.employees import POSITIONS
from .services import auth_service, session_service


def _is_authenticated() -> bool:
    return hasattr(g, 'session_context') and hasattr(g, 'current_employee')


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def require_auth(f):
    """
    Require a valid session token.

    Sets the following Flask g attributes:
    - g.session_context: the SessionContext (employee + session record)
    - g.current_employee: the authenticated Employee

    SECURITY: Returns 401 if:
    - No Authorization header
    - Unknown or revoked token
    - Employee deleted since login
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if not token:
            return jsonify({"error": "Authentication required"}), 401

        context = session_service.validate_session(token)
        if not context:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.session_context = context
        g.current_employee = context.employee

        return f(*args, **kwargs)

    return decorated_function


def require_position(position: str):
    """
    Require an employee position.

    Admin is a superset of Cashier: require_position("Cashier") lets both
    through, require_position("Admin") only admins.
    """
    if position not in POSITIONS:
        raise ValueError(f"Unknown position: {position}")

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Ensure @require_auth was called first
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            try:
                auth_service.require_position(g.current_employee, position)
            except AuthorizationError as e:
                return error_response(e)

            return f(*args, **kwargs)

        return decorated_function

    return decorator
