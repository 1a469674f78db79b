# Overview: Flask API routes for admin operations; parses input and returns JSON responses.

# backend/rentpos/routes/admin.py
"""
Admin routes.

Provides endpoints for:
- Employee management (list, create, update, delete)
- Transaction history across sales, rentals and returns
- Today's dashboard stats
- Employee action log

All endpoints require an authenticated Admin.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..errors import PosError, error_response
from ..models.employees import POSITION_ADMIN
from ..services import employee_service, transaction_service
from ..decorators import require_auth, require_position

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


def _limit(default: int, maximum: int = 500) -> int:
    limit = request.args.get("limit", default, type=int)
    return max(1, min(limit or default, maximum))


# =============================================================================
# EMPLOYEE MANAGEMENT
# =============================================================================

@admin_bp.get("/employees")
@require_auth
@require_position(POSITION_ADMIN)
def list_employees():
    """List all employees, newest first."""
    employees = employee_service.list_employees()
    return jsonify({"employees": [e.to_dict() for e in employees]}), 200


@admin_bp.get("/employees/<username>")
@require_auth
@require_position(POSITION_ADMIN)
def get_employee(username: str):
    try:
        employee = employee_service.get_employee_by_username(username)
        return jsonify({"employee": employee.to_dict()}), 200
    except PosError as e:
        return error_response(e)


@admin_bp.post("/employees")
@require_auth
@require_position(POSITION_ADMIN)
def create_employee():
    """
    Create a new employee.

    Body: {"username": "...", "name": "...", "password": "...", "position": "Cashier"}
    """
    try:
        data = request.get_json(silent=True) or {}
        required = ("username", "name", "password", "position")
        if not all(data.get(key) for key in required):
            return jsonify({"error": "Please fill in all fields", "required": list(required)}), 400

        employee = employee_service.create_employee(
            data["username"], data["name"], data["password"], data["position"]
        )
        employee_service.log_action(
            g.current_employee.id, employee_service.ACTION_EMPLOYEE_CREATED, employee.username
        )
        current_app.logger.info("Employee %s created by %s", employee.username, g.current_employee.username)
        return jsonify({"employee": employee.to_dict()}), 201

    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create employee")
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.patch("/employees/<username>")
@require_auth
@require_position(POSITION_ADMIN)
def update_employee(username: str):
    """
    Update name, password and/or position.

    Changing password or position signs the employee out everywhere.
    """
    try:
        data = request.get_json(silent=True) or {}
        employee = employee_service.update_employee(
            username,
            name=data.get("name"),
            password=data.get("password"),
            position=data.get("position"),
        )
        employee_service.log_action(
            g.current_employee.id, employee_service.ACTION_EMPLOYEE_UPDATED, employee.username
        )
        return jsonify({"employee": employee.to_dict()}), 200

    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update employee %s", username)
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.delete("/employees/<username>")
@require_auth
@require_position(POSITION_ADMIN)
def delete_employee(username: str):
    try:
        employee = employee_service.delete_employee(username, actor=g.current_employee)
        employee_service.log_action(
            g.current_employee.id, employee_service.ACTION_EMPLOYEE_DELETED, employee.username
        )
        current_app.logger.info("Employee %s deleted by %s", username, g.current_employee.username)
        return jsonify({"message": f"Employee {username} deleted"}), 200

    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete employee %s", username)
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# TRANSACTIONS & STATS
# =============================================================================

@admin_bp.get("/transactions")
@require_auth
@require_position(POSITION_ADMIN)
def list_transactions():
    """
    Recent transactions across all kinds, newest first.

    Query params:
    - type: all | sale | rental | return (default all)
    - limit: int (default 50)
    """
    try:
        result = transaction_service.recent_transactions(
            kind=request.args.get("type") or None,
            limit=_limit(50),
        )
        return jsonify(result), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list transactions")
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.get("/transactions/<kind>/<int:transaction_id>")
@require_auth
@require_position(POSITION_ADMIN)
def get_transaction(kind: str, transaction_id: int):
    try:
        record = transaction_service.get_transaction(kind, transaction_id)
        return jsonify({"transaction": record.to_dict(include_items=True)}), 200
    except PosError as e:
        return error_response(e)


@admin_bp.get("/stats")
@require_auth
@require_position(POSITION_ADMIN)
def stats():
    """Today's sales total, sale count and active rental count."""
    try:
        return jsonify(transaction_service.today_stats()), 200
    except PosError as e:
        return error_response(e)


@admin_bp.get("/logs")
@require_auth
@require_position(POSITION_ADMIN)
def list_logs():
    """
    Employee action log, newest first.

    Query params:
    - employee_id: int (optional)
    - limit: int (default 100)
    """
    logs = employee_service.list_logs(
        employee_id=request.args.get("employee_id", type=int),
        limit=_limit(100),
    )
    return jsonify({"logs": [entry.to_dict() for entry in logs]}), 200
