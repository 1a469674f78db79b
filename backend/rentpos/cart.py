# Overview: In-memory cart accumulator shared by the sale and rental flows.

"""
Cart

A cart lives only while a transaction is being assembled. It is never
persisted: the client holds it (as JSON) between requests and hands it back
at checkout, so abandoning a sale leaves nothing behind in the store.

Lines are unique by item id and keep insertion order. Adding an id already
in the cart adds to that line's quantity.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from .errors import InsufficientStockError, ValidationError
from .money import money_str, to_decimal
from .services import catalog_service
from .services.catalog_service import KIND_RENTAL, KIND_SALE


@dataclass
class CartLine:
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "unit_price": money_str(self.unit_price),
            "quantity": self.quantity,
            "line_total": money_str(self.line_total),
        }


def _parse_quantity(value) -> int:
    if isinstance(value, bool):
        raise ValidationError("Quantity must be a whole number")
    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            raise ValidationError("Quantity must be a whole number")
        value = int(value)
    if not isinstance(value, int):
        raise ValidationError("Quantity must be a whole number")
    if value < 1:
        raise ValidationError("Quantity must be at least 1")
    return value


class Cart:
    """Ordered item id -> CartLine mapping for one sale or rental in progress."""

    def __init__(self, kind: str = KIND_SALE):
        if kind not in (KIND_SALE, KIND_RENTAL):
            raise ValidationError(f"Unknown cart kind: {kind}")
        self.kind = kind
        self._lines: dict[str, CartLine] = {}

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self):
        return iter(self._lines.values())

    def __contains__(self, product_id) -> bool:
        return str(product_id) in self._lines

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def quantity_of(self, product_id) -> int:
        line = self._lines.get(str(product_id))
        return line.quantity if line else 0

    def merge_line(self, line: CartLine) -> CartLine:
        """Append a resolved line, or add its quantity to an existing one."""
        existing = self._lines.get(line.product_id)
        if existing is not None:
            existing.quantity += line.quantity
            return existing
        self._lines[line.product_id] = line
        return line

    def remove(self, product_id) -> None:
        self._lines.pop(str(product_id), None)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "lines": [line.to_dict() for line in self._lines.values()],
        }

    @classmethod
    def from_dict(cls, data: dict | None, kind: str = KIND_SALE) -> "Cart":
        """
        Rebuild a cart the client sent back.

        Only product_id/quantity are trusted structurally; names and prices
        are display hints and get re-resolved at checkout.
        """
        data = data or {}
        cart = cls(data.get("kind") or kind)
        if cart.kind != kind:
            raise ValidationError(f"Expected a {kind} cart, got {cart.kind}")
        lines = data.get("lines") or []
        if not isinstance(lines, list):
            raise ValidationError("cart.lines must be a list")
        for raw in lines:
            if not isinstance(raw, dict) or not raw.get("product_id"):
                raise ValidationError("Each cart line needs a product_id")
            try:
                price = to_decimal(raw.get("unit_price", "0"), "unit_price")
            except ValueError as exc:
                raise ValidationError(str(exc))
            cart.merge_line(CartLine(
                product_id=str(raw["product_id"]),
                name=str(raw.get("name") or ""),
                unit_price=price,
                quantity=_parse_quantity(raw.get("quantity")),
            ))
        return cart


def add_item(cart: Cart, product_id, quantity=1) -> CartLine:
    """
    Resolve product_id in the cart's catalog and add it.

    The stock check here is advisory (combined with what is already in the
    cart); checkout re-checks atomically.

    Raises:
        NotFoundError: id not in the catalog
        InsufficientStockError: quantity exceeds available stock
        ValidationError: quantity < 1
    """
    quantity = _parse_quantity(quantity)
    item = catalog_service.find_item(cart.kind, product_id)

    wanted = cart.quantity_of(item.id) + quantity
    if wanted > item.stock:
        raise InsufficientStockError(
            f"Insufficient stock! Available: {item.stock}",
            details={"product_id": item.id, "requested_quantity": wanted, "available": item.stock},
        )

    return cart.merge_line(CartLine(
        product_id=item.id,
        name=item.name,
        unit_price=item.unit_price,
        quantity=quantity,
    ))


def remove_item(cart: Cart, product_id) -> None:
    """Delete the line for product_id; no-op if absent."""
    cart.remove(product_id)
