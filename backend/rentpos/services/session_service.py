# Overview: Service-layer operations for sessions; encapsulates business logic and database work.

"""
Session Token Management Service

WHY: The signed-in employee must be an explicit object handed to every
operation that records who did it, not ambient state. Login issues an
opaque bearer token; each request resolves it into a SessionContext.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage (fast, one-way)
- Revocable on logout; there is no expiry or refresh
"""

import hashlib
import secrets
from dataclasses import dataclass

from ..extensions import db
from ..models import Employee, SessionToken
from rentpos.time_utils import utcnow


@dataclass
class SessionContext:
    """
    Who is acting, resolved from the session record.

    Passed to services that attribute transactions; never stored globally.
    """
    employee: Employee
    session: SessionToken

    @property
    def employee_id(self) -> int:
        return self.employee.id

    @property
    def position(self) -> str:
        return self.employee.position

    @property
    def is_admin(self) -> bool:
        return self.employee.is_admin


def generate_token() -> str:
    """
    Generate cryptographically secure random token.

    Returns 64-character hex string (32 bytes of entropy).
    This is the plaintext token sent to client (never stored).
    """
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """
    Hash token for database storage using SHA-256.

    WHY SHA-256 not bcrypt: Tokens are already high-entropy (unlike passwords).
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def create_session(employee_id: int) -> tuple[SessionToken, str]:
    """
    Create new session token for an employee.

    Returns (session_record, plaintext_token).
    Client receives plaintext_token, database stores only the hash.
    """
    employee = db.session.get(Employee, employee_id)
    if not employee:
        raise ValueError("Employee not found")

    plaintext_token = generate_token()
    now = utcnow()

    session = SessionToken(
        employee_id=employee_id,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        last_used_at=now,
    )

    db.session.add(session)
    db.session.commit()

    return session, plaintext_token


def validate_session(token: str) -> SessionContext | None:
    """
    Validate session token and return SessionContext if valid.

    Returns None if the token is unknown or revoked, or the employee has
    been deleted since login.
    """
    if not token:
        return None

    session = db.session.query(SessionToken).filter(
        SessionToken.token_hash == hash_token(token),
        SessionToken.revoked_at.is_(None),
    ).first()

    if not session or not session.employee:
        return None

    session.last_used_at = utcnow()
    db.session.commit()

    return SessionContext(employee=session.employee, session=session)


def revoke_session(token: str) -> bool:
    """
    Revoke session token.

    Returns True if session was revoked, False if not found.
    """
    session = db.session.query(SessionToken).filter(
        SessionToken.token_hash == hash_token(token),
        SessionToken.revoked_at.is_(None),
    ).first()

    if not session:
        return False

    session.revoked_at = utcnow()
    db.session.commit()
    return True


def revoke_all_employee_sessions(employee_id: int) -> int:
    """
    Revoke all active sessions for an employee.

    WHY: A password or position change must force re-login everywhere.
    """
    now = utcnow()

    sessions = db.session.query(SessionToken).filter(
        SessionToken.employee_id == employee_id,
        SessionToken.revoked_at.is_(None),
    ).all()

    for session in sessions:
        session.revoked_at = now

    db.session.commit()
    return len(sessions)
