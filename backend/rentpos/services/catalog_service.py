# Overview: Service-layer lookups for products, rental products, customers and coupons.

from __future__ import annotations

import re

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from ..errors import NotFoundError, PersistenceError, ValidationError
from ..extensions import db
from ..models import Coupon, Customer, Product, RentalProduct
from .concurrency import run_with_retry

KIND_SALE = "sale"
KIND_RENTAL = "rental"

_CATALOGS = {
    KIND_SALE: Product,
    KIND_RENTAL: RentalProduct,
}

# Verification accepts both 10-digit local and 11-digit numbers
_PHONE_DIGITS = re.compile(r"^\d{10,11}$")


def catalog_model(kind: str):
    try:
        return _CATALOGS[kind]
    except KeyError:
        raise ValidationError(f"Unknown catalog kind: {kind}")


def find_item(kind: str, item_id) -> Product | RentalProduct:
    """Resolve an item id within the sale or rental catalog."""
    model = catalog_model(kind)
    item_id = str(item_id).strip() if item_id is not None else ""
    if not item_id:
        raise ValidationError("Item id required")

    item = run_with_retry(lambda: db.session.get(model, item_id))
    if item is None:
        label = "Rental product" if kind == KIND_RENTAL else "Product"
        raise NotFoundError(f"{label} {item_id} not found", details={"product_id": item_id})
    return item


def list_items(kind: str, category: str | None = None) -> list:
    model = catalog_model(kind)

    def _op():
        query = db.session.query(model)
        if category:
            query = query.filter(model.category == category)
        return query.order_by(model.id).all()

    return run_with_retry(_op)


# =============================================================================
# CUSTOMERS
# =============================================================================

def normalize_phone(phone) -> str:
    """Strip common separators and require a 10 or 11 digit number."""
    if phone is None:
        raise ValidationError("Phone number required")
    digits = re.sub(r"[\s\-().+]", "", str(phone))
    if not _PHONE_DIGITS.match(digits):
        raise ValidationError("Phone number must be 10 or 11 digits")
    return digits


def get_customer_by_phone(phone) -> Customer | None:
    phone = normalize_phone(phone)
    return run_with_retry(lambda: db.session.query(Customer).filter_by(phone=phone).first())


def require_customer_by_phone(phone) -> Customer:
    customer = get_customer_by_phone(phone)
    if customer is None:
        raise NotFoundError("Customer not found", details={"phone": normalize_phone(phone)})
    return customer


def get_or_create_customer(phone, commit: bool = True) -> tuple[Customer, bool]:
    """
    Return (customer, created).

    With commit=False the new row is only flushed so it joins the caller's
    unit of work.
    """
    phone = normalize_phone(phone)
    customer = get_customer_by_phone(phone)
    if customer is not None:
        return customer, False

    customer = Customer(phone=phone)
    db.session.add(customer)
    if not commit:
        db.session.flush()
        return customer, True

    try:
        db.session.commit()
    except IntegrityError:
        # Another terminal verified the same phone first
        db.session.rollback()
        customer = get_customer_by_phone(phone)
        if customer is None:
            raise PersistenceError("Could not create customer")
        return customer, False
    return customer, True


# =============================================================================
# COUPONS
# =============================================================================

def get_active_coupon(code: str | None) -> Coupon | None:
    if not code or not code.strip():
        return None
    code = code.strip()
    return run_with_retry(
        lambda: db.session.query(Coupon)
        .filter(func.upper(Coupon.code) == code.upper(), Coupon.is_active.is_(True))
        .first()
    )
