# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

WHY: Every sale, rental and return is attributed to the employee who
signed in. Uses bcrypt for password hashing and validates password,
username and name rules before anything is stored.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 8 characters with upper, lower, digit and special char
- Session tokens managed separately (see session_service.py)
"""

import re

import bcrypt
from flask import current_app

from ..errors import AuthenticationError, AuthorizationError, ValidationError
from ..extensions import db
from ..models import Employee
from ..models.employees import POSITION_ADMIN, POSITIONS

RESERVED_USERNAMES = {"admin", "root", "superuser", "test", "demo"}


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character (!@#$%^&*(),.?":{}|<>)

    Raises PasswordValidationError if requirements not met.
    """
    if not password or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r'[!@#$%^&*(),.?":{}|<>]', password):
        raise PasswordValidationError("Password must contain at least one special character")


def validate_username(username: str) -> None:
    """4-20 word characters, not purely numeric, not a reserved word."""
    if not username or len(username) < 4:
        raise ValidationError("Username must be at least 4 characters")
    if len(username) > 20:
        raise ValidationError("Username must be at most 20 characters")
    if not re.fullmatch(r'[A-Za-z0-9_]+', username):
        raise ValidationError("Username can only contain letters, numbers, and underscores")
    if username.isdigit():
        raise ValidationError("Username cannot be only numbers")
    if username.lower() in RESERVED_USERNAMES:
        raise ValidationError("Username cannot be a reserved word")


def validate_name(name: str) -> None:
    if not name or len(name) < 2:
        raise ValidationError("Name must be at least 2 characters")
    if len(name) > 100:
        raise ValidationError("Name must be at most 100 characters")
    if not re.fullmatch(r"[A-Za-z\s'-]+", name):
        raise ValidationError("Name can only contain letters, spaces, hyphens, and apostrophes")


def validate_position(position: str) -> None:
    if position not in POSITIONS:
        raise ValidationError(f"Position must be one of: {', '.join(POSITIONS)}")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt (cost factor 12 unless BCRYPT_ROUNDS says otherwise).

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=current_app.config.get("BCRYPT_ROUNDS", 12))
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    A malformed stored hash counts as a mismatch.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def authenticate(username: str, password: str) -> Employee:
    """
    Authenticate employee with username and password.

    Raises AuthenticationError for an unknown username or a wrong password
    (same message for both so usernames cannot be enumerated).
    """
    employee = db.session.query(Employee).filter_by(username=(username or "").strip()).first()

    if not employee or not verify_password(password, employee.password_hash):
        raise AuthenticationError("Invalid credentials")

    return employee


def require_position(employee: Employee, position: str) -> None:
    """
    Capability gate. Admin routes need Admin; Cashier routes accept both
    positions because Admin is a superset.
    """
    if position == POSITION_ADMIN and not employee.is_admin:
        raise AuthorizationError(
            "Admin access required",
            details={"required_position": POSITION_ADMIN, "position": employee.position},
        )
