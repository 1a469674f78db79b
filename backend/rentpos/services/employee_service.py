# Overview: Service-layer operations for employee administration and the employee action log.

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import Employee, EmployeeLog
from . import auth_service, session_service

# Employee log actions
ACTION_LOGIN = "login"
ACTION_LOGOUT = "logout"
ACTION_SALE = "sale_committed"
ACTION_RENTAL = "rental_committed"
ACTION_RETURN = "return_committed"
ACTION_EMPLOYEE_CREATED = "employee_created"
ACTION_EMPLOYEE_UPDATED = "employee_updated"
ACTION_EMPLOYEE_DELETED = "employee_deleted"


def list_employees() -> list[Employee]:
    return db.session.query(Employee).order_by(Employee.created_at.desc(), Employee.id.desc()).all()


def get_employee_by_username(username: str) -> Employee:
    employee = db.session.query(Employee).filter_by(username=(username or "").strip()).first()
    if not employee:
        raise NotFoundError("Employee with such username doesn't exist", details={"username": username})
    return employee


def create_employee(username: str, name: str, password: str, position: str) -> Employee:
    """
    Create an employee after validating every field.

    Raises ValidationError (including PasswordValidationError) for bad input
    or a username that is already taken.
    """
    username = (username or "").strip()
    name = (name or "").strip()

    auth_service.validate_username(username)
    auth_service.validate_name(name)
    auth_service.validate_position(position)

    if db.session.query(Employee).filter_by(username=username).first():
        raise ValidationError("Username already exists", details={"username": username})

    employee = Employee(
        username=username,
        name=name,
        password_hash=auth_service.hash_password(password),
        position=position,
    )
    db.session.add(employee)
    db.session.commit()
    return employee


def update_employee(
    username: str,
    *,
    name: str | None = None,
    password: str | None = None,
    position: str | None = None,
) -> Employee:
    """
    Update name, password and/or position, looked up by username.

    Changing the password or position revokes the employee's open sessions.
    """
    employee = get_employee_by_username(username)
    revoke = False

    if name is not None:
        name = name.strip()
        auth_service.validate_name(name)
        employee.name = name

    if password:
        employee.password_hash = auth_service.hash_password(password)
        revoke = True

    if position is not None and position != employee.position:
        auth_service.validate_position(position)
        employee.position = position
        revoke = True

    db.session.commit()

    if revoke:
        session_service.revoke_all_employee_sessions(employee.id)

    return employee


def delete_employee(username: str, actor: Employee) -> Employee:
    employee = get_employee_by_username(username)
    if employee.id == actor.id:
        raise ValidationError("You cannot delete your own account")

    db.session.delete(employee)
    db.session.commit()
    return employee


# =============================================================================
# ACTION LOG
# =============================================================================

def log_action(employee_id: int, action: str, details: str | None = None) -> EmployeeLog | None:
    """
    Append an employee log entry.

    A failure to log is reported and swallowed: the audited action has
    already happened and must not be reported as failed.
    """
    entry = EmployeeLog(employee_id=employee_id, action=action, details=details[:255] if details else None)
    try:
        db.session.add(entry)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Failed to log action %s for employee %s", action, employee_id)
        return None
    return entry


def list_logs(employee_id: int | None = None, limit: int = 100) -> list[EmployeeLog]:
    query = db.session.query(EmployeeLog)
    if employee_id is not None:
        query = query.filter(EmployeeLog.employee_id == employee_id)
    return query.order_by(EmployeeLog.created_at.desc(), EmployeeLog.id.desc()).limit(limit).all()
