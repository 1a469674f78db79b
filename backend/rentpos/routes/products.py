# Overview: Flask API routes for the sale and rental catalogs; read-only lookups.

# backend/rentpos/routes/products.py
"""
Catalog routes.

SECURITY: All routes require an authenticated employee (either position).
"""
from flask import Blueprint, request, jsonify, current_app

from ..errors import PosError, error_response
from ..models.employees import POSITION_CASHIER
from ..services import catalog_service
from ..services.catalog_service import KIND_RENTAL, KIND_SALE
from ..decorators import require_auth, require_position

products_bp = Blueprint("products", __name__, url_prefix="/api")


def _list(kind: str, key: str):
    try:
        category = request.args.get("category") or None
        items = catalog_service.list_items(kind, category=category)
        return jsonify({key: [item.to_dict() for item in items]}), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list %s", key)
        return jsonify({"error": "Internal server error"}), 500


def _get(kind: str, item_id: str, key: str):
    try:
        item = catalog_service.find_item(kind, item_id)
        return jsonify({key: item.to_dict()}), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to get %s %s", key, item_id)
        return jsonify({"error": "Internal server error"}), 500


@products_bp.get("/products")
@require_auth
@require_position(POSITION_CASHIER)
def list_products():
    """
    List sale products.

    Query params:
    - category: str (optional) - e.g. grocery, electronics, clothing
    """
    return _list(KIND_SALE, "products")


@products_bp.get("/products/<product_id>")
@require_auth
@require_position(POSITION_CASHIER)
def get_product(product_id: str):
    return _get(KIND_SALE, product_id, "product")


@products_bp.get("/rental-products")
@require_auth
@require_position(POSITION_CASHIER)
def list_rental_products():
    """
    List rental products.

    Query params:
    - category: str (optional) - movie, book, equipment
    """
    return _list(KIND_RENTAL, "rental_products")


@products_bp.get("/rental-products/<product_id>")
@require_auth
@require_position(POSITION_CASHIER)
def get_rental_product(product_id: str):
    return _get(KIND_RENTAL, product_id, "rental_product")
