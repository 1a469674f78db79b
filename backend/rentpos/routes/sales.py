# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/rentpos/routes/sales.py
"""
Sales API routes.

The cart lives on the client: every request carries it as JSON and cart
routes return the updated cart. Nothing is written until /checkout.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..cart import Cart, add_item, remove_item
from ..errors import PosError, error_response
from ..models.employees import POSITION_CASHIER
from ..services import employee_service, receipt_service, transaction_service
from ..services.catalog_service import KIND_SALE
from ..decorators import require_auth, require_position


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


def _payload() -> tuple[dict, Cart]:
    data = request.get_json(silent=True) or {}
    return data, Cart.from_dict(data.get("cart"), KIND_SALE)


@sales_bp.post("/cart/items")
@require_auth
@require_position(POSITION_CASHIER)
def add_cart_item_route():
    """
    Add a product to the cart (quantities merge for a repeated id).

    Body: {"cart": {...}, "product_id": "1000", "quantity": 1}
    """
    try:
        data, cart = _payload()
        if not data.get("product_id"):
            return jsonify({"error": "product_id required"}), 400

        line = add_item(cart, data["product_id"], data.get("quantity", 1))
        return jsonify({"cart": cart.to_dict(), "line": line.to_dict()}), 200

    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add item to sale cart")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.post("/cart/remove")
@require_auth
@require_position(POSITION_CASHIER)
def remove_cart_item_route():
    try:
        data, cart = _payload()
        remove_item(cart, data.get("product_id"))
        return jsonify({"cart": cart.to_dict()}), 200

    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to remove item from sale cart")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.post("/coupon")
@require_auth
@require_position(POSITION_CASHIER)
def coupon_route():
    """
    Check a coupon code against the cart.

    Always 200: `coupon.valid` tells the terminal whether the discount applies.
    """
    try:
        data, cart = _payload()
        code = (data.get("coupon_code") or "").strip()
        if not code:
            return jsonify({"error": "coupon_code required"}), 400

        quote = transaction_service.quote_sale(cart, code)
        return jsonify(quote.to_dict()), 200

    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to evaluate coupon")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.post("/quote")
@require_auth
@require_position(POSITION_CASHIER)
def quote_route():
    """Subtotal, discount, tax and total at current catalog prices."""
    try:
        data, cart = _payload()
        quote = transaction_service.quote_sale(cart, data.get("coupon_code"))
        return jsonify(quote.to_dict()), 200

    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to quote sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.post("/checkout")
@require_auth
@require_position(POSITION_CASHIER)
def checkout_route():
    """
    Commit the sale.

    Body: {"cart": {...}, "coupon_code": "C10" (optional),
           "payment": {"method": "cash", "cash_received": "20"}
                   or {"method": "card", "card_number": "...", "cashback": "20"}}
    """
    try:
        data, cart = _payload()
        employee = g.session_context.employee

        result = transaction_service.commit_sale(
            employee.id,
            cart,
            data.get("payment"),
            coupon_code=data.get("coupon_code"),
        )
        transaction = result.transaction

        current_app.logger.info(
            "Sale %s committed by %s: total=%s", transaction.id, employee.username, transaction.total
        )
        employee_service.log_action(
            employee.id, employee_service.ACTION_SALE, f"Sale #{transaction.id} total {transaction.total}"
        )

        receipt = receipt_service.sale_receipt(result, employee_name=employee.name)
        return jsonify({
            "transaction": transaction.to_dict(include_items=True),
            "tender": result.tender.to_dict(),
            "receipt": receipt,
            "receipt_text": receipt_service.render_text(receipt),
        }), 201

    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to commit sale")
        return jsonify({"error": "Internal server error"}), 500
