# Overview: Flask API routes for rental returns; parses input and returns JSON responses.

# backend/rentpos/routes/returns.py
"""
Returns API routes.

- /lookup: the customer's outstanding rental items with today's late fees
- /quote:  totals for a selection (late fees, or a refund when unsatisfied)
- /commit: record the return, restock, close the rentals
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..errors import PosError, ValidationError, error_response
from ..models.employees import POSITION_CASHIER
from ..services import employee_service, receipt_service, transaction_service
from ..decorators import require_auth, require_position


returns_bp = Blueprint("returns", __name__, url_prefix="/api/returns")


def _selection(data: dict) -> tuple:
    unsatisfied = data.get("unsatisfied", False)
    if unsatisfied is None:
        unsatisfied = False
    if not isinstance(unsatisfied, bool):
        raise ValidationError(
            "unsatisfied must be true or false",
            details={"unsatisfied": unsatisfied},
        )
    return data.get("phone"), data.get("rental_item_ids"), unsatisfied


@returns_bp.post("/lookup")
@require_auth
@require_position(POSITION_CASHIER)
def lookup_route():
    """Body: {"phone": "5551234567"}"""
    try:
        data = request.get_json(silent=True) or {}
        customer, items = transaction_service.list_returnable_items(data.get("phone"))
        return jsonify({
            "customer": customer.to_dict(),
            "items": [item.to_dict() for item in items],
        }), 200

    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to look up rentals for return")
        return jsonify({"error": "Internal server error"}), 500


@returns_bp.post("/quote")
@require_auth
@require_position(POSITION_CASHIER)
def quote_route():
    """Body: {"phone": "...", "rental_item_ids": [1, 2], "unsatisfied": false}"""
    try:
        phone, item_ids, unsatisfied = _selection(request.get_json(silent=True) or {})
        quote = transaction_service.quote_return(phone, item_ids, unsatisfied=unsatisfied)
        return jsonify(quote.to_dict()), 200

    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to quote return")
        return jsonify({"error": "Internal server error"}), 500


@returns_bp.post("/commit")
@require_auth
@require_position(POSITION_CASHIER)
def commit_route():
    """
    Commit the return.

    Creates one return transaction per originating rental.
    """
    try:
        phone, item_ids, unsatisfied = _selection(request.get_json(silent=True) or {})
        employee = g.session_context.employee

        result = transaction_service.commit_return(employee.id, phone, item_ids, unsatisfied=unsatisfied)
        summary = result.quote.summary

        current_app.logger.info(
            "Return committed by %s for rentals %s: total=%s",
            employee.username, result.rental_ids, summary.total,
        )
        employee_service.log_action(
            employee.id,
            employee_service.ACTION_RETURN,
            f"Returns {', '.join('#%s' % r.id for r in result.returns)} total {summary.total}",
        )

        receipt = receipt_service.return_receipt(result, employee_name=employee.name)
        return jsonify({
            "returns": [r.to_dict(include_items=True) for r in result.returns],
            "summary": summary.to_dict(),
            "receipt": receipt,
            "receipt_text": receipt_service.render_text(receipt),
        }), 201

    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to commit return")
        return jsonify({"error": "Internal server error"}), 500
