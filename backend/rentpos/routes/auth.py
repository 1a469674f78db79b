# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/rentpos/routes/auth.py
"""
Authentication API routes

- Login issues an opaque bearer token (stored hashed server-side)
- Logout revokes it
- Validate resolves a token back to the employee (terminal restart)

There is no self-registration: employees are created by an Admin via
/api/admin/employees or `flask employees create`.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..errors import PosError, error_response
from ..services import auth_service, employee_service, session_service
from ..decorators import bearer_token, require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate employee and create session token.

    Token must be included as `Authorization: Bearer <token>` on protected routes.
    """
    try:
        data = request.get_json(silent=True) or {}
        username = data.get("username")
        password = data.get("password")

        if not all([username, password]):
            return jsonify({"error": "Please fill in all fields"}), 400

        employee = auth_service.authenticate(username, password)
        session, token = session_service.create_session(employee.id)
        employee_service.log_action(employee.id, employee_service.ACTION_LOGIN)

        current_app.logger.info("Employee %s logged in", employee.username)

        return jsonify({
            "employee": employee.to_dict(),
            "token": token,
            "session": session.to_dict(),
            "message": "Login successful"
        }), 200

    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to login employee")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
@require_auth
def logout_route():
    """Revoke the presented session token."""
    try:
        session_service.revoke_session(bearer_token())
        employee_service.log_action(g.current_employee.id, employee_service.ACTION_LOGOUT)
        return jsonify({"message": "Logged out"}), 200

    except Exception:
        current_app.logger.exception("Failed to logout employee")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/validate")
@require_auth
def validate_route():
    """Return the employee behind a still-valid token."""
    context = g.session_context
    return jsonify({
        "valid": True,
        "employee": context.employee.to_dict(),
        "session": context.session.to_dict(),
    }), 200
