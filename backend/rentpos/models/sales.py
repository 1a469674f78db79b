from __future__ import annotations

from ..extensions import db
from rentpos.money import money_str
from rentpos.time_utils import to_utc_z

MONEY = db.Numeric(14, 6)


class SalesTransaction(db.Model):
    """
    Committed sale.

    IMMUTABLE: There is no update or delete path. Totals are stored at full
    precision; only receipts round to cents.
    """
    __tablename__ = "sales_transactions"
    __table_args__ = (
        db.Index("ix_sales_transactions_created", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, nullable=False, index=True)  # no FK: history outlives employees

    subtotal = db.Column(MONEY, nullable=False)
    discount = db.Column(MONEY, nullable=False, default=0)
    tax = db.Column(MONEY, nullable=False)
    total = db.Column(MONEY, nullable=False)

    payment_method = db.Column(db.String(16), nullable=False)  # cash, card
    coupon_code = db.Column(db.String(32), nullable=True)

    # Tender details
    cash_received = db.Column(MONEY, nullable=True)
    change_due = db.Column(MONEY, nullable=True)
    cashback = db.Column(MONEY, nullable=True)
    card_last4 = db.Column(db.String(4), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self, include_items: bool = False) -> dict:
        data = {
            "id": self.id,
            "employee_id": self.employee_id,
            "subtotal": money_str(self.subtotal),
            "discount": money_str(self.discount),
            "tax": money_str(self.tax),
            "total": money_str(self.total),
            "payment_method": self.payment_method,
            "coupon_code": self.coupon_code,
            "cash_received": money_str(self.cash_received),
            "change_due": money_str(self.change_due),
            "cashback": money_str(self.cashback),
            "card_last4": self.card_last4,
            "created_at": to_utc_z(self.created_at),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class SalesTransactionItem(db.Model):
    """Line item of a committed sale."""
    __tablename__ = "sales_transaction_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(db.Integer, db.ForeignKey("sales_transactions.id"), nullable=False, index=True)
    product_id = db.Column(db.String(32), db.ForeignKey("products.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(MONEY, nullable=False)
    subtotal = db.Column(MONEY, nullable=False)

    transaction = db.relationship(
        "SalesTransaction",
        backref=db.backref("items", lazy=True, order_by="SalesTransactionItem.id"),
    )
    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "transaction_id": self.transaction_id,
            "product_id": self.product_id,
            "name": self.product.name if self.product else None,
            "quantity": self.quantity,
            "price": money_str(self.price),
            "subtotal": money_str(self.subtotal),
        }
