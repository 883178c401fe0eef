# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/stockroom/routes/products.py
"""
Product management routes.

SECURITY:
- Read operations are public (the storefront uses them)
- Write operations require MANAGER or above
"""
from flask import Blueprint, jsonify

from ..decorators import require_role
from ..models import ROLE_MANAGER
from ..services import products_service
from ..validation import (
    ListParams,
    arg_bool,
    arg_decimal_or_none,
    arg_int_or_none,
    get_json_body,
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products_route():
    """
    List products.

    Query params:
    - page, limit (default 10, max 100)
    - search: matches name, sku, description
    - categoryId, supplierId: exact match
    - minPrice, maxPrice: selling price range, inclusive
    - lowStock: "true" keeps products whose total stock <= lowStockThreshold
    - sortBy: name | sku | sellingPrice | createdAt | updatedAt, sortOrder
    """
    params = ListParams.from_request(
        default_limit=10,
        sort_fields=tuple(products_service.SORT_FIELDS),
        default_sort="createdAt",
        default_order="desc",
    )
    result = products_service.list_products(
        params,
        category_id=arg_int_or_none("categoryId"),
        supplier_id=arg_int_or_none("supplierId"),
        min_price=arg_decimal_or_none("minPrice"),
        max_price=arg_decimal_or_none("maxPrice"),
        low_stock=arg_bool("lowStock"),
    )
    return jsonify(result), 200


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    return jsonify(products_service.get_product(product_id)), 200


@products_bp.post("")
@require_role(ROLE_MANAGER)
def create_product_route():
    return jsonify(products_service.create_product(get_json_body())), 201


@products_bp.put("/<int:product_id>")
@require_role(ROLE_MANAGER)
def update_product_route(product_id: int):
    return jsonify(products_service.update_product(product_id, get_json_body())), 200


@products_bp.delete("/<int:product_id>")
@require_role(ROLE_MANAGER)
def delete_product_route(product_id: int):
    return jsonify(products_service.delete_product(product_id)), 200
