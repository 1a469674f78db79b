# Overview: Pure pricing math for sales, rentals, returns and tender.

"""
Pricing Calculators

Pure, deterministic, no I/O. Every amount is a Decimal carried at full
precision; rounding to cents happens only in receipt_service.

SALE:
    subtotal = sum(unit_price * qty)
    discount = subtotal * discount_rate     (0 or the coupon rate)
    tax      = (subtotal - discount) * tax_rate
    total    = subtotal - discount + tax

RENTAL:
    total = sum(rental_price * qty)          (no tax, no discount)

RETURN:
    days_late = max(0, today - due_date in whole days)
    late_fee  = rental_price * late_fee_rate * days_late   (per unit)
    unsatisfied-item returns refund the rental price instead and show the
    refund as a negative total.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional

from ..errors import ValidationError
from ..money import ZERO, money_str, round_cents, to_decimal
from ..time_utils import parse_iso_date

TAX_RATE = Decimal("0.06")
COUPON_DISCOUNT_RATE = Decimal("0.10")
LATE_FEE_RATE = Decimal("0.10")

PAYMENT_CASH = "cash"
PAYMENT_CARD = "card"
PAYMENT_METHODS = (PAYMENT_CASH, PAYMENT_CARD)

MAX_CASHBACK = Decimal("100")
MIN_CARD_DIGITS = 16


# =============================================================================
# SALES
# =============================================================================

@dataclass(frozen=True)
class CouponResult:
    code: str | None
    valid: bool
    discount_rate: Decimal

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "valid": self.valid,
            "discount_rate": money_str(self.discount_rate),
        }


def evaluate_coupon(code: str | None, rate: Decimal = COUPON_DISCOUNT_RATE) -> CouponResult:
    """
    Apply the coupon prefix rule: codes starting with "C" (any case) earn
    the coupon rate; anything else is invalid and earns nothing.
    """
    normalized = code.strip() if code else ""
    if normalized and normalized[0].upper() == "C":
        return CouponResult(code=normalized, valid=True, discount_rate=rate)
    return CouponResult(code=normalized or None, valid=False, discount_rate=ZERO)


@dataclass(frozen=True)
class SaleSummary:
    subtotal: Decimal
    discount_rate: Decimal
    discount: Decimal
    tax_rate: Decimal
    tax: Decimal
    total: Decimal

    def to_dict(self) -> dict:
        return {
            "subtotal": money_str(self.subtotal),
            "discount_rate": money_str(self.discount_rate),
            "discount": money_str(self.discount),
            "tax_rate": money_str(self.tax_rate),
            "tax": money_str(self.tax),
            "total": money_str(self.total),
        }


def line_total(unit_price: Decimal, quantity: int) -> Decimal:
    return unit_price * quantity


def compute_subtotal(lines: Iterable) -> Decimal:
    return sum((line_total(line.unit_price, line.quantity) for line in lines), ZERO)


def compute_sale_summary(
    lines: Iterable,
    discount_rate: Decimal = ZERO,
    tax_rate: Decimal = TAX_RATE,
) -> SaleSummary:
    subtotal = compute_subtotal(lines)
    discount = subtotal * discount_rate
    tax = (subtotal - discount) * tax_rate
    total = subtotal - discount + tax
    return SaleSummary(
        subtotal=subtotal,
        discount_rate=discount_rate,
        discount=discount,
        tax_rate=tax_rate,
        tax=tax,
        total=total,
    )


# =============================================================================
# RENTALS
# =============================================================================

def compute_rental_total(lines: Iterable) -> Decimal:
    return compute_subtotal(lines)


def validate_return_date(value, today: date) -> date:
    """
    Rentals need a due date that is present and not in the past.

    Accepts a date, a datetime (time part dropped) or an ISO "YYYY-MM-DD"
    string.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("Return date required")
    if isinstance(value, datetime):
        due = value.date()
    elif isinstance(value, date):
        due = value
    else:
        try:
            due = parse_iso_date(str(value))
        except ValueError:
            raise ValidationError("Return date must be YYYY-MM-DD")
    if due < today:
        raise ValidationError(
            "Return date cannot be earlier than today",
            details={"return_date": due.isoformat(), "today": today.isoformat()},
        )
    return due


# =============================================================================
# RETURNS
# =============================================================================

def days_late(due_date: date, today: date) -> int:
    return max(0, (today - due_date).days)


def late_fee(rental_price: Decimal, days: int, rate: Decimal = LATE_FEE_RATE) -> Decimal:
    return rental_price * rate * days


@dataclass(frozen=True)
class ReturnLineQuote:
    """One selectable rental line with its fee as of a given day."""
    rental_item_id: int
    rental_id: int
    product_id: str
    name: str
    rental_price: Decimal
    quantity: int
    due_date: date
    days_late: int
    late_fee: Decimal
    refund: Decimal

    def to_dict(self) -> dict:
        return {
            "rental_item_id": self.rental_item_id,
            "rental_id": self.rental_id,
            "product_id": self.product_id,
            "name": self.name,
            "rental_price": money_str(self.rental_price),
            "quantity": self.quantity,
            "due_date": self.due_date.isoformat(),
            "days_late": self.days_late,
            "late_fee": money_str(self.late_fee),
            "refund": money_str(self.refund),
        }


def quote_return_line(
    *,
    rental_item_id: int,
    rental_id: int,
    product_id: str,
    name: str,
    rental_price: Decimal,
    quantity: int,
    due_date: date,
    today: date,
    rate: Decimal = LATE_FEE_RATE,
) -> ReturnLineQuote:
    days = days_late(due_date, today)
    return ReturnLineQuote(
        rental_item_id=rental_item_id,
        rental_id=rental_id,
        product_id=product_id,
        name=name,
        rental_price=rental_price,
        quantity=quantity,
        due_date=due_date,
        days_late=days,
        late_fee=late_fee(rental_price, days, rate) * quantity,
        refund=rental_price * quantity,
    )


@dataclass(frozen=True)
class ReturnSummary:
    unsatisfied: bool
    late_fees: Decimal
    refund: Decimal
    total: Decimal

    def to_dict(self) -> dict:
        return {
            "unsatisfied": self.unsatisfied,
            "late_fees": money_str(self.late_fees),
            "refund": money_str(self.refund),
            "total": money_str(self.total),
        }


def compute_return_summary(quotes: Iterable[ReturnLineQuote], unsatisfied: bool = False) -> ReturnSummary:
    quotes = list(quotes)
    if unsatisfied:
        refund = sum((q.refund for q in quotes), ZERO)
        return ReturnSummary(unsatisfied=True, late_fees=ZERO, refund=refund, total=-refund)
    fees = sum((q.late_fee for q in quotes), ZERO)
    return ReturnSummary(unsatisfied=False, late_fees=fees, refund=ZERO, total=fees)


# =============================================================================
# TENDER
# =============================================================================

@dataclass(frozen=True)
class Tender:
    method: str
    amount_charged: Decimal
    cash_received: Optional[Decimal] = None
    change: Optional[Decimal] = None
    cashback: Optional[Decimal] = None
    card_last4: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "method": self.method,
            "amount_charged": money_str(self.amount_charged),
            "cash_received": money_str(self.cash_received),
            "change": money_str(self.change),
            "cashback": money_str(self.cashback),
            "card_last4": self.card_last4,
        }


def _amount(value, field: str) -> Decimal:
    try:
        amount = to_decimal(value, field)
    except ValueError as exc:
        raise ValidationError(str(exc))
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"{field} must be a non-negative amount")
    return amount


def compute_tender(
    method: str | None,
    total: Decimal,
    *,
    cash_received=None,
    card_number: str | None = None,
    cashback=None,
    allow_cashback: bool = True,
) -> Tender:
    """
    Validate a payment and work out change / card charge.

    Cash must cover the total. Card needs a full card number; optional
    cashback (0-100) is added to the card charge.
    """
    method = (method or "").strip().lower()
    if method not in PAYMENT_METHODS:
        raise ValidationError("Payment method must be 'cash' or 'card'")

    if method == PAYMENT_CASH:
        if cashback not in (None, "") and _amount(cashback, "cashback") != 0:
            raise ValidationError("Cashback is only available on card payments")
        if cash_received is None or cash_received == "":
            raise ValidationError("cash_received required for cash payments")
        received = _amount(cash_received, "cash_received")
        # Cash covers the total as displayed, rounded to cents
        if received < round_cents(total):
            raise ValidationError(
                "Cash received is less than the total",
                details={"total": money_str(total), "cash_received": money_str(received)},
            )
        return Tender(
            method=PAYMENT_CASH,
            amount_charged=total,
            cash_received=received,
            change=max(received - total, ZERO),
        )

    digits = re.sub(r"\s", "", card_number or "")
    if not digits.isdigit() or len(digits) < MIN_CARD_DIGITS:
        raise ValidationError(f"Card number must have at least {MIN_CARD_DIGITS} digits")

    extra = ZERO
    if cashback not in (None, ""):
        if not allow_cashback:
            raise ValidationError("Cashback is not available for this transaction")
        extra = _amount(cashback, "cashback")
        if extra > MAX_CASHBACK:
            raise ValidationError(f"Cashback cannot exceed {MAX_CASHBACK}")

    return Tender(
        method=PAYMENT_CARD,
        amount_charged=total + extra,
        cashback=extra if extra else None,
        card_last4=digits[-4:],
    )
