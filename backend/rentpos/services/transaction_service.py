# Overview: Service-layer commit sequences for sales, rentals and returns.

"""
Transaction Sequencer

WHY: A sale is not one row. It is a parent transaction, one item row per
cart line and one stock decrement per line. If any of those fails the
customer has not bought anything, so none of them may stick.

DESIGN PRINCIPLES:
- Nothing is written before the final commit call; quotes are read-only
- Each commit runs in a single unit_of_work(): all rows and stock changes
  commit together or roll back together
- Stock decrements and rental status flips are conditional UPDATEs
  (compare-and-swap in the database), never read-modify-write
- Prices are re-read from the catalog at commit; cart prices are display hints
- Commits are never retried automatically

FLOWS:
1. Sale:   sales_transactions -> sales_transaction_items + product stock--
2. Rental: customer (get or create) -> rental_transactions
           -> rental_transaction_items + rental stock--
3. Return: per originating rental: return_transactions
           -> return_transaction_items + rental stock++ -> rental.status=returned
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal

from flask import current_app
from sqlalchemy import func, update

from ..cart import Cart, CartLine
from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import (
    Customer,
    RentalTransaction,
    RentalTransactionItem,
    ReturnTransaction,
    ReturnTransactionItem,
    SalesTransaction,
    SalesTransactionItem,
)
from ..models.rentals import (
    RENTAL_OPEN_STATUSES,
    RENTAL_STATUS_ACTIVE,
    RENTAL_STATUS_RETURNED,
    RETURN_KIND_LATE_FEE,
    RETURN_KIND_UNSATISFIED,
)
from ..money import ZERO, money_str, to_decimal
from ..time_utils import today as current_date
from ..time_utils import to_utc_z
from . import catalog_service, inventory_service, pricing_service
from .catalog_service import KIND_RENTAL, KIND_SALE
from .concurrency import lock_for_update, run_with_retry, unit_of_work
from .pricing_service import CouponResult, ReturnLineQuote, ReturnSummary, SaleSummary, Tender

TRANSACTION_KINDS = ("sale", "rental", "return")


def _rate(key: str, default: Decimal) -> Decimal:
    return to_decimal(current_app.config.get(key, default), key)


# =============================================================================
# PRICING AGAINST THE CATALOG
# =============================================================================

def price_cart(cart: Cart) -> list[CartLine]:
    """
    Re-resolve every cart line against the catalog.

    Returns fresh lines carrying current names and prices. Raises
    NotFoundError if an item has disappeared since it was added.
    """
    lines = []
    for line in cart:
        item = catalog_service.find_item(cart.kind, line.product_id)
        lines.append(CartLine(
            product_id=item.id,
            name=item.name,
            unit_price=item.unit_price,
            quantity=line.quantity,
        ))
    return lines


def resolve_coupon(code: str | None) -> CouponResult:
    """Active coupon rows win; any other code goes through the prefix rule."""
    if code and code.strip():
        coupon = catalog_service.get_active_coupon(code)
        if coupon is not None:
            return CouponResult(
                code=coupon.code,
                valid=True,
                discount_rate=coupon.discount_percentage / Decimal(100),
            )
    return pricing_service.evaluate_coupon(
        code, rate=_rate("COUPON_DISCOUNT_RATE", pricing_service.COUPON_DISCOUNT_RATE)
    )


@dataclass
class SaleQuote:
    lines: list[CartLine]
    coupon: CouponResult | None
    summary: SaleSummary

    def to_dict(self) -> dict:
        return {
            "lines": [line.to_dict() for line in self.lines],
            "coupon": self.coupon.to_dict() if self.coupon else None,
            "summary": self.summary.to_dict(),
        }


def quote_sale(cart: Cart, coupon_code: str | None = None) -> SaleQuote:
    """Price a sale cart without writing anything. An invalid coupon simply earns no discount."""
    lines = price_cart(cart)
    coupon = resolve_coupon(coupon_code) if coupon_code else None
    discount_rate = coupon.discount_rate if coupon and coupon.valid else ZERO
    summary = pricing_service.compute_sale_summary(
        lines,
        discount_rate=discount_rate,
        tax_rate=_rate("TAX_RATE", pricing_service.TAX_RATE),
    )
    return SaleQuote(lines=lines, coupon=coupon, summary=summary)


def _tender(payment: dict | None, total: Decimal) -> Tender:
    payment = payment or {}
    return pricing_service.compute_tender(
        payment.get("method"),
        total,
        cash_received=payment.get("cash_received"),
        card_number=payment.get("card_number"),
        cashback=payment.get("cashback"),
    )


# =============================================================================
# SALE
# =============================================================================

@dataclass
class SaleResult:
    transaction: SalesTransaction
    quote: SaleQuote
    tender: Tender


def commit_sale(
    employee_id: int,
    cart: Cart,
    payment: dict | None,
    coupon_code: str | None = None,
) -> SaleResult:
    """
    Commit a sale as one unit of work.

    Raises:
        ValidationError: empty cart, invalid coupon, bad payment
        NotFoundError: a cart item no longer exists
        InsufficientStockError: stock ran out between cart and checkout
        PersistenceError: the store rejected the write
    """
    if cart.kind != KIND_SALE:
        raise ValidationError("Expected a sale cart")
    if cart.is_empty:
        raise ValidationError("Cart is empty")

    quote = quote_sale(cart, coupon_code)
    if quote.coupon is not None and not quote.coupon.valid:
        raise ValidationError("Invalid coupon code", details={"coupon_code": coupon_code})
    tender = _tender(payment, quote.summary.total)
    summary = quote.summary

    with unit_of_work() as session:
        transaction = SalesTransaction(
            employee_id=employee_id,
            subtotal=summary.subtotal,
            discount=summary.discount,
            tax=summary.tax,
            total=summary.total,
            payment_method=tender.method,
            coupon_code=quote.coupon.code if quote.coupon else None,
            cash_received=tender.cash_received,
            change_due=tender.change,
            cashback=tender.cashback,
            card_last4=tender.card_last4,
        )
        session.add(transaction)
        session.flush()

        for line in quote.lines:
            session.add(SalesTransactionItem(
                transaction_id=transaction.id,
                product_id=line.product_id,
                quantity=line.quantity,
                price=line.unit_price,
                subtotal=line.line_total,
            ))
            inventory_service.decrement_product_stock(line.product_id, line.quantity)

    return SaleResult(transaction=transaction, quote=quote, tender=tender)


# =============================================================================
# RENTAL
# =============================================================================

@dataclass
class RentalQuote:
    lines: list[CartLine]
    total: Decimal
    return_date: date | None = None

    def to_dict(self) -> dict:
        return {
            "lines": [line.to_dict() for line in self.lines],
            "total": money_str(self.total),
            "return_date": self.return_date.isoformat() if self.return_date else None,
        }


def quote_rental(cart: Cart, return_date=None, today: date | None = None) -> RentalQuote:
    """Price a rental cart; the return date is validated only when given."""
    due = None
    if return_date:
        due = pricing_service.validate_return_date(return_date, today or current_date())
    lines = price_cart(cart)
    return RentalQuote(lines=lines, total=pricing_service.compute_rental_total(lines), return_date=due)


@dataclass
class RentalResult:
    rental: RentalTransaction
    customer: Customer
    quote: RentalQuote
    tender: Tender


def commit_rental(
    employee_id: int,
    phone: str,
    cart: Cart,
    return_date,
    payment: dict | None,
    today: date | None = None,
) -> RentalResult:
    """
    Commit a rental as one unit of work: resolve or create the customer,
    insert the rental (status active) and its items, decrement rental stock.
    """
    if cart.kind != KIND_RENTAL:
        raise ValidationError("Expected a rental cart")
    if cart.is_empty:
        raise ValidationError("Cart is empty")

    due = pricing_service.validate_return_date(return_date, today or current_date())
    catalog_service.normalize_phone(phone)
    quote = quote_rental(cart)
    quote.return_date = due
    tender = _tender(payment, quote.total)

    with unit_of_work() as session:
        customer, _ = catalog_service.get_or_create_customer(phone, commit=False)

        rental = RentalTransaction(
            customer_id=customer.id,
            employee_id=employee_id,
            total=quote.total,
            return_date=due,
            status=RENTAL_STATUS_ACTIVE,
            payment_method=tender.method,
            cash_received=tender.cash_received,
            change_due=tender.change,
            cashback=tender.cashback,
            card_last4=tender.card_last4,
        )
        session.add(rental)
        session.flush()

        for line in quote.lines:
            session.add(RentalTransactionItem(
                rental_id=rental.id,
                product_id=line.product_id,
                quantity=line.quantity,
                rental_price=line.unit_price,
                subtotal=line.line_total,
            ))
            inventory_service.decrement_rental_stock(line.product_id, line.quantity)

    return RentalResult(rental=rental, customer=customer, quote=quote, tender=tender)


# =============================================================================
# RETURN
# =============================================================================

def list_active_rentals(customer_id: int) -> list[RentalTransaction]:
    return run_with_retry(
        lambda: db.session.query(RentalTransaction)
        .filter(
            RentalTransaction.customer_id == customer_id,
            RentalTransaction.status.in_(RENTAL_OPEN_STATUSES),
        )
        .order_by(RentalTransaction.created_at.desc(), RentalTransaction.id.desc())
        .all()
    )


def _open_items_query(customer_id: int):
    return (
        db.session.query(RentalTransactionItem)
        .join(RentalTransaction, RentalTransactionItem.rental_id == RentalTransaction.id)
        .filter(
            RentalTransaction.customer_id == customer_id,
            RentalTransaction.status.in_(RENTAL_OPEN_STATUSES),
        )
        .order_by(RentalTransaction.created_at.desc(), RentalTransactionItem.id)
    )


def _quote_item(item: RentalTransactionItem, on_date: date) -> ReturnLineQuote:
    return pricing_service.quote_return_line(
        rental_item_id=item.id,
        rental_id=item.rental_id,
        product_id=item.product_id,
        name=item.product.name if item.product else item.product_id,
        rental_price=item.rental_price,
        quantity=item.quantity,
        due_date=item.rental.return_date,
        today=on_date,
        rate=_rate("LATE_FEE_RATE", pricing_service.LATE_FEE_RATE),
    )


def list_returnable_items(phone: str, today: date | None = None) -> tuple[Customer, list[ReturnLineQuote]]:
    """Every item of the customer's open rentals, priced as if returned today."""
    customer = catalog_service.require_customer_by_phone(phone)
    on_date = today or current_date()
    items = run_with_retry(lambda: _open_items_query(customer.id).all())
    return customer, [_quote_item(item, on_date) for item in items]


@dataclass
class ReturnQuote:
    customer: Customer
    items: list[ReturnLineQuote]
    summary: ReturnSummary

    def to_dict(self) -> dict:
        return {
            "customer": self.customer.to_dict(),
            "items": [item.to_dict() for item in self.items],
            "summary": self.summary.to_dict(),
        }


def _parse_item_ids(rental_item_ids) -> list[int]:
    if not isinstance(rental_item_ids, (list, tuple)) or not rental_item_ids:
        raise ValidationError("Please select at least one item to return")
    ids: list[int] = []
    for raw in rental_item_ids:
        try:
            item_id = int(raw)
        except (TypeError, ValueError):
            raise ValidationError("rental_item_ids must be integers")
        if item_id not in ids:
            ids.append(item_id)
    return ids


def quote_return(
    phone: str,
    rental_item_ids,
    unsatisfied: bool = False,
    today: date | None = None,
    lock: bool = False,
) -> ReturnQuote:
    """
    Price the selected rental items.

    Every id must belong to one of this customer's open rentals, otherwise
    NotFoundError. Selection order is preserved.
    """
    ids = _parse_item_ids(rental_item_ids)
    customer = catalog_service.require_customer_by_phone(phone)
    on_date = today or current_date()

    query = _open_items_query(customer.id).filter(RentalTransactionItem.id.in_(ids))
    if lock:
        query = lock_for_update(query)
    found = {item.id: item for item in query.all()}

    missing = [item_id for item_id in ids if item_id not in found]
    if missing:
        raise NotFoundError(
            "Rental item not found among the customer's active rentals",
            details={"rental_item_ids": missing},
        )

    quotes = [_quote_item(found[item_id], on_date) for item_id in ids]
    summary = pricing_service.compute_return_summary(quotes, unsatisfied=unsatisfied)
    return ReturnQuote(customer=customer, items=quotes, summary=summary)


@dataclass
class ReturnResult:
    returns: list[ReturnTransaction]
    quote: ReturnQuote
    rental_ids: list[int] = field(default_factory=list)


def _close_rental(rental_id: int) -> None:
    """Flip an open rental to returned; fails if another return got there first."""
    stmt = (
        update(RentalTransaction)
        .where(
            RentalTransaction.id == rental_id,
            RentalTransaction.status.in_(RENTAL_OPEN_STATUSES),
        )
        .values(status=RENTAL_STATUS_RETURNED)
        .execution_options(synchronize_session=False)
    )
    if db.session.execute(stmt).rowcount != 1:
        raise ValidationError("Rental has already been returned", details={"rental_id": rental_id})


def commit_return(
    employee_id: int,
    phone: str,
    rental_item_ids,
    unsatisfied: bool = False,
    today: date | None = None,
) -> ReturnResult:
    """
    Commit a return as one unit of work.

    Selected items are grouped by originating rental (first-seen order).
    Per rental: one return row with that rental's fees, one item row per
    selected line, stock restored by the rented quantity, rental closed.

    Unsatisfied-item returns record zero days late and zero fee; the refund
    is shown to the cashier but not written to any balance.
    """
    kind = RETURN_KIND_UNSATISFIED if unsatisfied else RETURN_KIND_LATE_FEE
    returns: list[ReturnTransaction] = []

    with unit_of_work() as session:
        quote = quote_return(phone, rental_item_ids, unsatisfied=unsatisfied, today=today, lock=True)

        groups: dict[int, list[ReturnLineQuote]] = {}
        for item in quote.items:
            groups.setdefault(item.rental_id, []).append(item)

        for rental_id, items in groups.items():
            fees = ZERO if unsatisfied else sum((item.late_fee for item in items), ZERO)
            return_txn = ReturnTransaction(
                rental_id=rental_id,
                customer_id=quote.customer.id,
                employee_id=employee_id,
                kind=kind,
                late_fees=fees,
                total_due=fees,
            )
            session.add(return_txn)
            session.flush()

            for item in items:
                session.add(ReturnTransactionItem(
                    return_id=return_txn.id,
                    rental_item_id=item.rental_item_id,
                    days_late=0 if unsatisfied else item.days_late,
                    late_fee=ZERO if unsatisfied else item.late_fee,
                ))
                inventory_service.increment_rental_stock(item.product_id, item.quantity)

            _close_rental(rental_id)
            returns.append(return_txn)

    return ReturnResult(returns=returns, quote=quote, rental_ids=list(groups))


# =============================================================================
# QUERIES
# =============================================================================

def get_transaction(kind: str, transaction_id: int):
    model = {
        "sale": SalesTransaction,
        "rental": RentalTransaction,
        "return": ReturnTransaction,
    }.get(kind)
    if model is None:
        raise ValidationError(f"Transaction type must be one of: {', '.join(TRANSACTION_KINDS)}")
    record = run_with_retry(lambda: db.session.get(model, transaction_id))
    if record is None:
        raise NotFoundError(f"{kind.capitalize()} transaction {transaction_id} not found")
    return record


def recent_transactions(kind: str | None = None, limit: int = 50) -> dict:
    """
    Latest sales, rentals and returns merged newest first, plus per-type totals
    over the fetched rows.
    """
    if kind not in (None, "all", *TRANSACTION_KINDS):
        raise ValidationError(f"Filter must be one of: all, {', '.join(TRANSACTION_KINDS)}")

    def _op():
        sales = db.session.query(SalesTransaction).order_by(
            SalesTransaction.created_at.desc(), SalesTransaction.id.desc()).limit(limit).all()
        rentals = db.session.query(RentalTransaction).order_by(
            RentalTransaction.created_at.desc(), RentalTransaction.id.desc()).limit(limit).all()
        returns = db.session.query(ReturnTransaction).order_by(
            ReturnTransaction.created_at.desc(), ReturnTransaction.id.desc()).limit(limit).all()
        return sales, rentals, returns

    sales, rentals, returns = run_with_retry(_op)

    rows = (
        [("sale", t.created_at, t.id, t.total, {"payment_method": t.payment_method}) for t in sales]
        + [("rental", t.created_at, t.id, t.total, {"status": t.status}) for t in rentals]
        + [("return", t.created_at, t.id, t.total_due, {"kind": t.kind}) for t in returns]
    )
    rows.sort(key=lambda row: (row[1] or datetime.min, row[2]), reverse=True)

    totals = {
        "sales": sum((t.total for t in sales), ZERO),
        "rentals": sum((t.total for t in rentals), ZERO),
        "returns": sum((t.total_due for t in returns), ZERO),
    }

    transactions = [
        {"type": row[0], "id": row[2], "total": money_str(row[3]), "created_at": to_utc_z(row[1]), **row[4]}
        for row in rows
        if kind in (None, "all") or row[0] == kind
    ]
    return {
        "transactions": transactions,
        "totals": {key: money_str(value) for key, value in totals.items()},
    }


def today_stats(today: date | None = None) -> dict:
    """Today's sales total and count, and the number of active rentals."""
    start = datetime.combine(today or current_date(), time.min)

    def _op():
        total, count = db.session.query(
            func.coalesce(func.sum(SalesTransaction.total), 0),
            func.count(SalesTransaction.id),
        ).filter(SalesTransaction.created_at >= start).one()
        active = db.session.query(func.count(RentalTransaction.id)).filter(
            RentalTransaction.status == RENTAL_STATUS_ACTIVE
        ).scalar()
        return total, count, active

    total, count, active = run_with_retry(_op)
    return {
        "total_sales": money_str(to_decimal(total, "total_sales")),
        "transaction_count": count,
        "active_rentals": active or 0,
    }
