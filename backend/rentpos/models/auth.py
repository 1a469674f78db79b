from __future__ import annotations

from ..extensions import db
from rentpos.time_utils import to_utc_z


class SessionToken(db.Model):
    """
    Server-side login session.

    Only the SHA-256 hash of the bearer token is stored. Sessions have no
    expiry; logout sets revoked_at.
    """
    __tablename__ = "session_tokens"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False, index=True)
    token_hash = db.Column(db.String(64), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_used_at = db.Column(db.DateTime(timezone=True), nullable=True)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)

    employee = db.relationship(
        "Employee",
        backref=db.backref("sessions", lazy=True, cascade="all, delete-orphan"),
    )

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "created_at": to_utc_z(self.created_at),
            "last_used_at": to_utc_z(self.last_used_at),
            "revoked_at": to_utc_z(self.revoked_at),
        }
