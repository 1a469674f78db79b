from __future__ import annotations

from ..extensions import db
from rentpos.time_utils import to_utc_z

POSITION_ADMIN = "Admin"
POSITION_CASHIER = "Cashier"
POSITIONS = (POSITION_ADMIN, POSITION_CASHIER)


class Employee(db.Model):
    """
    Employee accounts for login and attribution.

    WHY: Every sale, rental and return records who rang it up.
    Position drives the route gate: Admin is a superset of Cashier.
    """
    __tablename__ = "employees"
    __table_args__ = (
        db.CheckConstraint("position IN ('Admin', 'Cashier')", name="ck_employees_position"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), nullable=False, unique=True, index=True)
    name = db.Column(db.String(128), nullable=False)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    position = db.Column(db.String(16), nullable=False, default=POSITION_CASHIER)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    @property
    def is_admin(self) -> bool:
        return self.position == POSITION_ADMIN

    def __repr__(self) -> str:
        return f"<Employee id={self.id} username={self.username!r} position={self.position}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "name": self.name,
            "position": self.position,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class EmployeeLog(db.Model):
    """
    Append-only log of employee actions.

    IMMUTABLE: Records are never updated or deleted.
    """
    __tablename__ = "employee_logs"
    __table_args__ = (
        db.Index("ix_employee_logs_employee_created", "employee_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    # No FK: log rows outlive deleted employees
    employee_id = db.Column(db.Integer, nullable=False, index=True)
    action = db.Column(db.String(64), nullable=False, index=True)
    details = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "action": self.action,
            "details": self.details,
            "created_at": to_utc_z(self.created_at),
        }
