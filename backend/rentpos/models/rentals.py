from __future__ import annotations

from ..extensions import db
from rentpos.money import money_str
from rentpos.time_utils import to_iso_date, to_utc_z

MONEY = db.Numeric(14, 6)

RENTAL_STATUS_ACTIVE = "active"
RENTAL_STATUS_RETURNED = "returned"
RENTAL_STATUS_OVERDUE = "overdue"
RENTAL_OPEN_STATUSES = (RENTAL_STATUS_ACTIVE, RENTAL_STATUS_OVERDUE)

RETURN_KIND_LATE_FEE = "late_fee"
RETURN_KIND_UNSATISFIED = "unsatisfied"


class RentalTransaction(db.Model):
    """
    Rental document.

    LIFECYCLE: active -> returned, driven only by a ReturnTransaction.
    """
    __tablename__ = "rental_transactions"
    __table_args__ = (
        db.CheckConstraint(
            "status IN ('active', 'returned', 'overdue')",
            name="ck_rental_transactions_status",
        ),
        db.Index("ix_rental_transactions_customer_status", "customer_id", "status"),
        db.Index("ix_rental_transactions_created", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    employee_id = db.Column(db.Integer, nullable=False, index=True)  # no FK: history outlives employees

    total = db.Column(MONEY, nullable=False)
    return_date = db.Column(db.Date, nullable=False)
    status = db.Column(db.String(16), nullable=False, default=RENTAL_STATUS_ACTIVE, index=True)

    payment_method = db.Column(db.String(16), nullable=True)
    cash_received = db.Column(MONEY, nullable=True)
    change_due = db.Column(MONEY, nullable=True)
    cashback = db.Column(MONEY, nullable=True)
    card_last4 = db.Column(db.String(4), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    customer = db.relationship("Customer", backref=db.backref("rentals", lazy=True))

    def to_dict(self, include_items: bool = False) -> dict:
        data = {
            "id": self.id,
            "customer_id": self.customer_id,
            "employee_id": self.employee_id,
            "total": money_str(self.total),
            "return_date": to_iso_date(self.return_date),
            "status": self.status,
            "payment_method": self.payment_method,
            "cash_received": money_str(self.cash_received),
            "change_due": money_str(self.change_due),
            "cashback": money_str(self.cashback),
            "card_last4": self.card_last4,
            "created_at": to_utc_z(self.created_at),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class RentalTransactionItem(db.Model):
    """Line item of a rental."""
    __tablename__ = "rental_transaction_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    rental_id = db.Column(db.Integer, db.ForeignKey("rental_transactions.id"), nullable=False, index=True)
    product_id = db.Column(db.String(32), db.ForeignKey("rental_products.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    rental_price = db.Column(MONEY, nullable=False)
    subtotal = db.Column(MONEY, nullable=False)

    rental = db.relationship(
        "RentalTransaction",
        backref=db.backref("items", lazy=True, order_by="RentalTransactionItem.id"),
    )
    product = db.relationship("RentalProduct")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "rental_id": self.rental_id,
            "product_id": self.product_id,
            "name": self.product.name if self.product else None,
            "quantity": self.quantity,
            "rental_price": money_str(self.rental_price),
            "subtotal": money_str(self.subtotal),
        }


class ReturnTransaction(db.Model):
    """
    Return of (some of) one rental's items.

    Creating one is the only way a rental's status changes.
    """
    __tablename__ = "return_transactions"
    __table_args__ = (
        db.Index("ix_return_transactions_created", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    rental_id = db.Column(db.Integer, db.ForeignKey("rental_transactions.id"), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    employee_id = db.Column(db.Integer, nullable=False, index=True)  # no FK: history outlives employees

    kind = db.Column(db.String(16), nullable=False, default=RETURN_KIND_LATE_FEE)
    late_fees = db.Column(MONEY, nullable=False, default=0)
    total_due = db.Column(MONEY, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    rental = db.relationship("RentalTransaction", backref=db.backref("returns", lazy=True))
    customer = db.relationship("Customer")

    def to_dict(self, include_items: bool = False) -> dict:
        data = {
            "id": self.id,
            "rental_id": self.rental_id,
            "customer_id": self.customer_id,
            "employee_id": self.employee_id,
            "kind": self.kind,
            "late_fees": money_str(self.late_fees),
            "total_due": money_str(self.total_due),
            "created_at": to_utc_z(self.created_at),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class ReturnTransactionItem(db.Model):
    """Per-item record of a return: days late and the fee charged."""
    __tablename__ = "return_transaction_items"
    __table_args__ = (
        db.UniqueConstraint("rental_item_id", name="uq_return_items_rental_item"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    return_id = db.Column(db.Integer, db.ForeignKey("return_transactions.id"), nullable=False, index=True)
    rental_item_id = db.Column(db.Integer, db.ForeignKey("rental_transaction_items.id"), nullable=False)

    days_late = db.Column(db.Integer, nullable=False, default=0)
    late_fee = db.Column(MONEY, nullable=False, default=0)

    return_transaction = db.relationship(
        "ReturnTransaction",
        backref=db.backref("items", lazy=True, order_by="ReturnTransactionItem.id"),
    )
    rental_item = db.relationship("RentalTransactionItem")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "return_id": self.return_id,
            "rental_item_id": self.rental_item_id,
            "days_late": self.days_late,
            "late_fee": money_str(self.late_fee),
        }
