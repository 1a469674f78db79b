# Overview: Receipt and summary formatting; the only place money is rounded to cents.

from __future__ import annotations

from decimal import Decimal

from ..money import ZERO, format_money
from ..time_utils import to_iso_date, to_utc_z
from .pricing_service import Tender

RECEIPT_TITLES = {
    "sale": "Sales Receipt",
    "rental": "Rental Receipt",
    "return": "Return Receipt",
}

RECEIPT_WIDTH = 40


def _tender_dict(tender: Tender | None) -> dict | None:
    if tender is None:
        return None
    data = {
        "method": tender.method,
        "amount_charged": format_money(tender.amount_charged),
    }
    if tender.cash_received is not None:
        data["cash_received"] = format_money(tender.cash_received)
        data["change"] = format_money(tender.change)
    if tender.card_last4:
        data["card_last4"] = tender.card_last4
        data["cashback"] = format_money(tender.cashback or ZERO)
    return data


def build_receipt(
    kind: str,
    *,
    reference,
    lines: list[dict],
    totals: dict[str, Decimal],
    tender: Tender | None = None,
    created_at=None,
    employee_name: str | None = None,
    customer_phone: str | None = None,
    return_date=None,
) -> dict:
    """
    Build a display receipt.

    lines: dicts with name, quantity, unit_price, amount (Decimals), and
    optionally a note.
    totals: ordered label -> Decimal; rendered in the given order.
    """
    if kind not in RECEIPT_TITLES:
        raise ValueError(f"Unknown receipt kind: {kind}")

    receipt = {
        "title": RECEIPT_TITLES[kind],
        "kind": kind,
        "reference": reference,
        "created_at": to_utc_z(created_at) if created_at else None,
        "employee": employee_name,
        "customer_phone": customer_phone,
        "return_date": to_iso_date(return_date) if return_date else None,
        "lines": [
            {
                "name": line["name"],
                "quantity": line["quantity"],
                "unit_price": format_money(line["unit_price"]),
                "amount": format_money(line["amount"]),
                **({"note": line["note"]} if line.get("note") else {}),
            }
            for line in lines
        ],
        "totals": [{"label": label, "amount": format_money(amount)} for label, amount in totals.items()],
        "tender": _tender_dict(tender),
    }
    return receipt


def _row(left: str, right: str, width: int = RECEIPT_WIDTH) -> str:
    space = max(1, width - len(left) - len(right))
    return f"{left}{' ' * space}{right}"


def render_text(receipt: dict, width: int = RECEIPT_WIDTH) -> str:
    """Plain-text printable receipt, fixed width."""
    rule = "-" * width
    out = [receipt["title"].center(width).rstrip(), rule]

    if receipt.get("reference") is not None:
        out.append(f"Ref: {receipt['reference']}")
    if receipt.get("created_at"):
        out.append(f"Date: {receipt['created_at']}")
    if receipt.get("employee"):
        out.append(f"Cashier: {receipt['employee']}")
    if receipt.get("customer_phone"):
        out.append(f"Customer: {receipt['customer_phone']}")
    if receipt.get("return_date"):
        out.append(f"Due back: {receipt['return_date']}")
    out.append(rule)

    for line in receipt["lines"]:
        out.append(line["name"][:width])
        out.append(_row(f"  {line['quantity']} x {line['unit_price']}", line["amount"], width))
        if line.get("note"):
            out.append(f"  {line['note']}"[:width])

    out.append(rule)
    for total in receipt["totals"]:
        out.append(_row(total["label"], total["amount"], width))

    tender = receipt.get("tender")
    if tender:
        out.append(rule)
        out.append(_row("Paid by", tender["method"].capitalize(), width))
        if "cash_received" in tender:
            out.append(_row("Cash received", tender["cash_received"], width))
            out.append(_row("Change", tender["change"], width))
        if "card_last4" in tender:
            out.append(_row("Card", f"**** {tender['card_last4']}", width))
            out.append(_row("Cashback", tender["cashback"], width))
        out.append(_row("Charged", tender["amount_charged"], width))

    out.append(rule)
    out.append("Thank you!".center(width).rstrip())
    return "\n".join(out) + "\n"


# =============================================================================
# BUILDERS FOR COMMITTED TRANSACTIONS
# =============================================================================

def sale_receipt(result, employee_name: str | None = None) -> dict:
    """Receipt for a transaction_service.SaleResult."""
    summary = result.quote.summary
    totals = {"Subtotal": summary.subtotal}
    if summary.discount:
        totals["Discount"] = -summary.discount
    totals["Tax"] = summary.tax
    totals["Total"] = summary.total
    return build_receipt(
        "sale",
        reference=result.transaction.id,
        lines=[
            {"name": line.name, "quantity": line.quantity, "unit_price": line.unit_price, "amount": line.line_total}
            for line in result.quote.lines
        ],
        totals=totals,
        tender=result.tender,
        created_at=result.transaction.created_at,
        employee_name=employee_name,
    )


def rental_receipt(result, employee_name: str | None = None) -> dict:
    """Receipt for a transaction_service.RentalResult."""
    return build_receipt(
        "rental",
        reference=result.rental.id,
        lines=[
            {"name": line.name, "quantity": line.quantity, "unit_price": line.unit_price, "amount": line.line_total}
            for line in result.quote.lines
        ],
        totals={"Total": result.quote.total},
        tender=result.tender,
        created_at=result.rental.created_at,
        employee_name=employee_name,
        customer_phone=result.customer.phone,
        return_date=result.quote.return_date,
    )


def return_receipt(result, employee_name: str | None = None) -> dict:
    """Receipt for a transaction_service.ReturnResult."""
    summary = result.quote.summary
    lines = []
    for item in result.quote.items:
        if summary.unsatisfied:
            amount, note = -item.refund, "Refund: unsatisfied"
        else:
            amount = item.late_fee
            note = f"{item.days_late} day(s) late" if item.days_late else None
        lines.append({
            "name": item.name,
            "quantity": item.quantity,
            "unit_price": item.rental_price,
            "amount": amount,
            "note": note,
        })

    if summary.unsatisfied:
        totals = {"Refund": summary.refund, "Total": summary.total}
    else:
        totals = {"Late fees": summary.late_fees, "Total": summary.total}

    return build_receipt(
        "return",
        reference=", ".join(str(r.id) for r in result.returns),
        lines=lines,
        totals=totals,
        created_at=result.returns[0].created_at if result.returns else None,
        employee_name=employee_name,
        customer_phone=result.quote.customer.phone,
    )
