"""Receipt formatting: rounding happens here and only here."""

from datetime import datetime
from decimal import Decimal

import pytest

from rentpos.services import receipt_service
from rentpos.services.pricing_service import compute_tender


def _sale_receipt(tender=None):
    return receipt_service.build_receipt(
        "sale",
        reference=17,
        lines=[{"name": "Potato", "quantity": 3, "unit_price": Decimal("1.00"), "amount": Decimal("3.00")}],
        totals={
            "Subtotal": Decimal("3.00"),
            "Discount": Decimal("-0.30"),
            "Tax": Decimal("0.162"),
            "Total": Decimal("2.862"),
        },
        tender=tender,
        created_at=datetime(2024, 3, 10, 14, 30),
        employee_name="Debra Cooper",
    )


def test_amounts_rounded_to_cents():
    receipt = _sale_receipt()
    assert [t["amount"] for t in receipt["totals"]] == ["3.00", "-0.30", "0.16", "2.86"]
    assert receipt["created_at"] == "2024-03-10T14:30:00Z"


def test_half_up_rounding():
    receipt = receipt_service.build_receipt(
        "rental", reference=1, lines=[], totals={"Total": Decimal("0.125")}
    )
    assert receipt["totals"][0]["amount"] == "0.13"


@pytest.mark.parametrize("kind,title", [
    ("sale", "Sales Receipt"),
    ("rental", "Rental Receipt"),
    ("return", "Return Receipt"),
])
def test_titles(kind, title):
    receipt = receipt_service.build_receipt(kind, reference=1, lines=[], totals={})
    assert receipt["title"] == title


def test_unknown_kind():
    with pytest.raises(ValueError):
        receipt_service.build_receipt("refund", reference=1, lines=[], totals={})


def test_render_text_cash():
    tender = compute_tender("cash", Decimal("2.862"), cash_received="10")
    text = receipt_service.render_text(_sale_receipt(tender))
    lines = text.splitlines()

    assert lines[0].strip() == "Sales Receipt"
    assert "Cashier: Debra Cooper" in lines
    assert any(line.startswith("Total") and line.endswith("2.86") for line in lines)
    assert any(line.startswith("Change") and line.endswith("7.14") for line in lines)
    assert all(len(line) <= receipt_service.RECEIPT_WIDTH for line in lines)


def test_render_text_card_masks_number():
    tender = compute_tender("card", Decimal("30"), card_number="4111111111114242", cashback="20")
    text = receipt_service.render_text(_sale_receipt(tender))

    assert "**** 4242" in text
    assert "4111111111114242" not in text
    assert any(line.startswith("Charged") and line.endswith("50.00") for line in text.splitlines())
