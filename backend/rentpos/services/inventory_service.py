# Overview: Service-layer stock adjustments; every change is a single conditional UPDATE.

"""
Inventory Service

WHY: Two cashiers can check out carts holding the same product at the same
time. A read-modify-write ("load stock, subtract, save") lets both succeed
and drives stock negative. Instead each decrement is one statement:

    UPDATE products SET stock = stock - :n WHERE id = :id AND stock >= :n

The database applies it atomically; zero affected rows means the guard
failed. Callers run these inside unit_of_work() so a failed decrement rolls
back everything written before it.
"""

from __future__ import annotations

from sqlalchemy import update

from ..errors import InsufficientStockError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Product, RentalProduct


def _require_positive(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError("Quantity must be a positive integer")


def _label(model) -> str:
    return "Rental product" if model is RentalProduct else "Product"


def decrement_stock(model, product_id: str, quantity: int) -> None:
    """
    Decrement stock by quantity if and only if enough is on hand.

    Raises:
        NotFoundError: unknown product id
        InsufficientStockError: stock < quantity (stock is left unchanged)
    """
    _require_positive(quantity)

    stmt = (
        update(model)
        .where(model.id == product_id, model.stock >= quantity)
        .values(stock=model.stock - quantity)
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    if result.rowcount == 1:
        return

    available = db.session.query(model.stock).filter(model.id == product_id).scalar()
    if available is None:
        raise NotFoundError(f"{_label(model)} {product_id} not found")
    raise InsufficientStockError(
        f"Insufficient stock for {product_id}",
        details={"product_id": product_id, "requested_quantity": quantity, "available": available},
    )


def increment_stock(model, product_id: str, quantity: int) -> None:
    """Put quantity units back on the shelf (returns)."""
    _require_positive(quantity)

    stmt = (
        update(model)
        .where(model.id == product_id)
        .values(stock=model.stock + quantity)
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    if result.rowcount != 1:
        raise NotFoundError(f"{_label(model)} {product_id} not found")


def decrement_product_stock(product_id: str, quantity: int) -> None:
    decrement_stock(Product, product_id, quantity)


def decrement_rental_stock(product_id: str, quantity: int) -> None:
    decrement_stock(RentalProduct, product_id, quantity)


def increment_rental_stock(product_id: str, quantity: int) -> None:
    increment_stock(RentalProduct, product_id, quantity)
