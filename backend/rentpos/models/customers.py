from __future__ import annotations

from ..extensions import db
from rentpos.money import money_str
from rentpos.time_utils import to_utc_z


class Customer(db.Model):
    """
    Rental customer, keyed by phone number.

    Created on first verification and never updated or deleted here.
    """
    __tablename__ = "customers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    phone = db.Column(db.String(32), nullable=False, unique=True, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "phone": self.phone,
            "created_at": to_utc_z(self.created_at),
        }


class Coupon(db.Model):
    """Coupon codes with an explicit discount; unknown codes fall back to the prefix rule."""
    __tablename__ = "coupons"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(32), nullable=False, unique=True, index=True)
    discount_percentage = db.Column(db.Numeric(5, 2), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "discount_percentage": money_str(self.discount_percentage),
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }
