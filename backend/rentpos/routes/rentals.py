# Overview: Flask API routes for rental operations; parses input and returns JSON responses.

# backend/rentpos/routes/rentals.py
"""
Rental API routes.

Flow: verify the customer's phone, build the cart, pick a return date,
check out. Unknown phones are registered on verification.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..cart import Cart, add_item, remove_item
from ..errors import PosError, error_response
from ..models.employees import POSITION_CASHIER
from ..services import catalog_service, employee_service, receipt_service, transaction_service
from ..services.catalog_service import KIND_RENTAL
from ..decorators import require_auth, require_position


rentals_bp = Blueprint("rentals", __name__, url_prefix="/api/rentals")


def _payload() -> tuple[dict, Cart]:
    data = request.get_json(silent=True) or {}
    return data, Cart.from_dict(data.get("cart"), KIND_RENTAL)


@rentals_bp.post("/customer")
@require_auth
@require_position(POSITION_CASHIER)
def verify_customer_route():
    """
    Resolve a customer by phone, creating one if needed.

    Returns 201 when the customer was just registered, 200 otherwise.
    """
    try:
        data = request.get_json(silent=True) or {}
        customer, created = catalog_service.get_or_create_customer(data.get("phone"))
        active = transaction_service.list_active_rentals(customer.id)
        return jsonify({
            "customer": customer.to_dict(),
            "created": created,
            "active_rentals": [rental.to_dict() for rental in active],
        }), 201 if created else 200

    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to verify rental customer")
        return jsonify({"error": "Internal server error"}), 500


@rentals_bp.post("/cart/items")
@require_auth
@require_position(POSITION_CASHIER)
def add_cart_item_route():
    try:
        data, cart = _payload()
        if not data.get("product_id"):
            return jsonify({"error": "product_id required"}), 400

        line = add_item(cart, data["product_id"], data.get("quantity", 1))
        return jsonify({"cart": cart.to_dict(), "line": line.to_dict()}), 200

    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add item to rental cart")
        return jsonify({"error": "Internal server error"}), 500


@rentals_bp.post("/cart/remove")
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
        current_app.logger.exception("Failed to remove item from rental cart")
        return jsonify({"error": "Internal server error"}), 500


@rentals_bp.post("/quote")
@require_auth
@require_position(POSITION_CASHIER)
def quote_route():
    """Rental total (no tax, no coupons); return_date validated when present."""
    try:
        data, cart = _payload()
        quote = transaction_service.quote_rental(cart, data.get("return_date"))
        return jsonify(quote.to_dict()), 200

    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to quote rental")
        return jsonify({"error": "Internal server error"}), 500


@rentals_bp.post("/checkout")
@require_auth
@require_position(POSITION_CASHIER)
def checkout_route():
    """
    Commit the rental.

    Body: {"phone": "5551234567", "cart": {...}, "return_date": "YYYY-MM-DD",
           "payment": {"method": "card", "card_number": "...", "cashback": "20"}}
    """
    try:
        data, cart = _payload()
        employee = g.session_context.employee

        result = transaction_service.commit_rental(
            employee.id,
            data.get("phone"),
            cart,
            data.get("return_date"),
            data.get("payment"),
        )
        rental = result.rental

        current_app.logger.info(
            "Rental %s committed by %s for customer %s: total=%s",
            rental.id, employee.username, result.customer.phone, rental.total,
        )
        employee_service.log_action(
            employee.id, employee_service.ACTION_RENTAL, f"Rental #{rental.id} total {rental.total}"
        )

        receipt = receipt_service.rental_receipt(result, employee_name=employee.name)
        return jsonify({
            "rental": rental.to_dict(include_items=True),
            "customer": result.customer.to_dict(),
            "tender": result.tender.to_dict(),
            "receipt": receipt,
            "receipt_text": receipt_service.render_text(receipt),
        }), 201

    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to commit rental")
        return jsonify({"error": "Internal server error"}), 500
