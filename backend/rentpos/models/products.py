from __future__ import annotations

from ..extensions import db
from rentpos.money import money_str
from rentpos.time_utils import to_utc_z


class Product(db.Model):
    """
    Sellable product master data.

    Stock is only ever changed through inventory_service's conditional
    updates; the check constraint is a last line of defence.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        db.Index("ix_products_category", "category"),
    )

    # Shelf code as printed on the label (e.g. "1000")
    id = db.Column(db.String(32), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    price = db.Column(db.Numeric(12, 2), nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)
    category = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    @property
    def unit_price(self):
        return self.price

    def __repr__(self) -> str:
        return f"<Product id={self.id!r} name={self.name!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": money_str(self.price),
            "stock": self.stock,
            "category": self.category,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class RentalProduct(db.Model):
    """Rentable item (movie, book, equipment) priced per rental."""
    __tablename__ = "rental_products"
    __table_args__ = (
        db.CheckConstraint("stock >= 0", name="ck_rental_products_stock_non_negative"),
        db.Index("ix_rental_products_category", "category"),
    )

    id = db.Column(db.String(32), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    rental_price = db.Column(db.Numeric(12, 2), nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)
    category = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    @property
    def unit_price(self):
        return self.rental_price

    def __repr__(self) -> str:
        return f"<RentalProduct id={self.id!r} name={self.name!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "rental_price": money_str(self.rental_price),
            "stock": self.stock,
            "category": self.category,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
