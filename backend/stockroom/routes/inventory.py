# Overview: Flask API routes for inventory operations; parses input and returns JSON responses.

# backend/stockroom/routes/inventory.py
"""
Inventory routes.

SECURITY: reads require authentication, writes require MANAGER or above.
"""
from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_role
from ..models import ROLE_MANAGER
from ..services import inventory_service
from ..validation import ListParams, arg_bool, arg_int_or_none, get_json_body

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("")
@require_auth
def list_inventory_route():
    """
    Query params:
    - page, limit (default 20), search (product name, sku, description)
    - categoryId, location (substring), lowStock ("true")
    - sortBy: quantity | reservedQuantity | location | batchNumber |
      expiryDate | createdAt | updatedAt | productName (default updatedAt desc)
    """
    params = ListParams.from_request(
        default_limit=20,
        sort_fields=tuple(inventory_service.SORT_FIELDS),
        default_sort="updatedAt",
        default_order="desc",
    )
    result = inventory_service.list_inventory(
        params,
        category_id=arg_int_or_none("categoryId"),
        location=request.args.get("location"),
        low_stock=arg_bool("lowStock"),
    )
    return jsonify(result), 200


@inventory_bp.get("/<int:item_id>")
@require_auth
def get_inventory_item_route(item_id: int):
    return jsonify(inventory_service.get_inventory_item(item_id)), 200


@inventory_bp.post("")
@require_role(ROLE_MANAGER)
def create_inventory_item_route():
    """
    Two modes:
    - {productId, quantity, ...}: new stock row for an existing product
    - {productName, sku, sellingPrice, ...}: new product and its first row
    """
    return jsonify(inventory_service.create_inventory_item(get_json_body())), 201


@inventory_bp.put("/<int:item_id>")
@require_role(ROLE_MANAGER)
def update_inventory_item_route(item_id: int):
    return jsonify(inventory_service.update_inventory_item(item_id, get_json_body())), 200


@inventory_bp.delete("/<int:item_id>")
@require_role(ROLE_MANAGER)
def delete_inventory_item_route(item_id: int):
    return jsonify(inventory_service.delete_inventory_item(item_id)), 200
