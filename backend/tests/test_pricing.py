"""
Pricing calculator tests.

Verifies:
- Sale summary identities and the worked coupon example
- Coupon prefix rule
- Days late / late fee math, including per-quantity fees
- Return summaries for late and unsatisfied returns
- Tender rules for cash and card
"""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from rentpos.cart import CartLine
from rentpos.errors import ValidationError
from rentpos.services import pricing_service
from rentpos.services.pricing_service import (
    compute_return_summary,
    compute_sale_summary,
    compute_tender,
    days_late,
    evaluate_coupon,
    late_fee,
    quote_return_line,
    validate_return_date,
)

TODAY = date(2024, 3, 10)


def _line(price: str, qty: int, product_id: str = "1000") -> CartLine:
    return CartLine(product_id=product_id, name="Item", unit_price=Decimal(price), quantity=qty)


def _return_line(item_id: int, price: str = "30.00", due: date = TODAY - timedelta(days=3), qty: int = 1):
    return quote_return_line(
        rental_item_id=item_id,
        rental_id=item_id,
        product_id="1000",
        name="Theory Of Everything",
        rental_price=Decimal(price),
        quantity=qty,
        due_date=due,
        today=TODAY,
    )


# =============================================================================
# SALES
# =============================================================================

class TestSaleSummary:

    def test_potato_with_coupon_worked_example(self):
        coupon = evaluate_coupon("C10")
        summary = compute_sale_summary([_line("1.00", 3)], discount_rate=coupon.discount_rate)

        assert summary.subtotal == Decimal("3.00")
        assert summary.discount == Decimal("0.30")
        assert summary.tax == Decimal("0.162")
        assert summary.total == Decimal("2.862")

    @pytest.mark.parametrize(
        "lines,rate",
        [
            ([("1.00", 3)], Decimal("0")),
            ([("9.99", 2), ("0.50", 7)], Decimal("0.10")),
            ([("39.99", 1), ("12.99", 4), ("3.99", 11)], Decimal("0.10")),
        ],
    )
    def test_total_identity(self, lines, rate):
        summary = compute_sale_summary([_line(p, q) for p, q in lines], discount_rate=rate)
        assert summary.total == summary.subtotal - summary.discount + summary.tax
        assert summary.tax == (summary.subtotal - summary.discount) * Decimal("0.06")

    def test_empty_cart_is_all_zero(self):
        summary = compute_sale_summary([])
        assert summary.subtotal == 0
        assert summary.total == 0


class TestCoupon:

    @pytest.mark.parametrize("code", ["c007", "C10", "  coupon  ", "CAFE"])
    def test_prefix_c_is_valid(self, code):
        result = evaluate_coupon(code)
        assert result.valid is True
        assert result.discount_rate == Decimal("0.10")

    @pytest.mark.parametrize("code", ["X1", "", None, "10C"])
    def test_other_codes_invalid(self, code):
        result = evaluate_coupon(code)
        assert result.valid is False
        assert result.discount_rate == 0


# =============================================================================
# RENTALS & RETURNS
# =============================================================================

class TestReturnDate:

    def test_today_is_allowed(self):
        assert validate_return_date(TODAY.isoformat(), TODAY) == TODAY

    def test_past_date_rejected(self):
        with pytest.raises(ValidationError):
            validate_return_date("2024-03-09", TODAY)

    def test_datetime_uses_calendar_day(self):
        assert validate_return_date(datetime(2030, 1, 1, 12), TODAY) == date(2030, 1, 1)
        assert validate_return_date(datetime.combine(TODAY, datetime.max.time()), TODAY) == TODAY
        with pytest.raises(ValidationError):
            validate_return_date(datetime(2024, 3, 9, 23, 59), TODAY)

    @pytest.mark.parametrize("value", [None, "", "   ", "next tuesday"])
    def test_missing_or_garbled_rejected(self, value):
        with pytest.raises(ValidationError):
            validate_return_date(value, TODAY)


class TestLateFees:

    def test_days_late(self):
        assert days_late(TODAY, TODAY) == 0
        assert days_late(TODAY - timedelta(days=3), TODAY) == 3
        assert days_late(TODAY + timedelta(days=5), TODAY) == 0

    def test_late_fee_ten_percent_per_day(self):
        assert late_fee(Decimal("30.00"), 3) == Decimal("9.00")
        assert late_fee(Decimal("30.00"), 0) == 0

    def test_two_late_items_total_fees(self):
        summary = compute_return_summary([_return_line(1), _return_line(2)])
        assert summary.late_fees == Decimal("18.00")
        assert summary.total == Decimal("18.00")

    def test_fee_scales_with_quantity(self):
        quote = _return_line(1, qty=2)
        assert quote.late_fee == Decimal("18.00")
        assert quote.refund == Decimal("60.00")

    def test_unsatisfied_refund_is_negative_total(self):
        summary = compute_return_summary([_return_line(1), _return_line(2, price="40.50")], unsatisfied=True)
        assert summary.late_fees == 0
        assert summary.refund == Decimal("70.50")
        assert summary.total == Decimal("-70.50")


# =============================================================================
# TENDER
# =============================================================================

class TestTender:

    def test_cash_change(self):
        tender = compute_tender("cash", Decimal("2.862"), cash_received="5")
        assert tender.change == Decimal("2.138")
        assert tender.amount_charged == Decimal("2.862")

    def test_cash_below_total_fails(self):
        with pytest.raises(ValidationError):
            compute_tender("cash", Decimal("10"), cash_received="9.99")

    def test_cash_matching_displayed_total_accepted(self):
        tender = compute_tender("cash", Decimal("2.862"), cash_received="2.86")
        assert tender.change == Decimal("0")
        assert tender.amount_charged == Decimal("2.862")

    def test_cash_below_displayed_total_fails(self):
        with pytest.raises(ValidationError):
            compute_tender("cash", Decimal("2.862"), cash_received="2.85")

    def test_cash_cashback_rejected(self):
        with pytest.raises(ValidationError):
            compute_tender("cash", Decimal("10"), cash_received="20", cashback="5")

    def test_card_cashback_added_to_charge(self):
        tender = compute_tender("card", Decimal("30"), card_number="4111 1111 1111 1111", cashback="20")
        assert tender.amount_charged == Decimal("50")
        assert tender.card_last4 == "1111"

    @pytest.mark.parametrize("cashback", ["-1", "100.01", "abc"])
    def test_card_cashback_bounds(self, cashback):
        with pytest.raises(ValidationError):
            compute_tender("card", Decimal("30"), card_number="4111111111111111", cashback=cashback)

    def test_short_card_number_rejected(self):
        with pytest.raises(ValidationError):
            compute_tender("card", Decimal("30"), card_number="411111111111")

    def test_unknown_method_rejected(self):
        with pytest.raises(ValidationError):
            compute_tender("cheque", Decimal("30"))

    def test_constants(self):
        assert pricing_service.MAX_CASHBACK == Decimal("100")
        assert pricing_service.TAX_RATE == Decimal("0.06")
