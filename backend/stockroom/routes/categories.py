# Overview: Flask API routes for categories operations; parses input and returns JSON responses.

# backend/stockroom/routes/categories.py
"""
Category routes.

Reads are public. Writes require MANAGER or above.
"""

from flask import Blueprint, jsonify

from ..decorators import require_role
from ..models import ROLE_MANAGER
from ..services import category_service
from ..validation import ListParams, arg_bool, get_json_body


categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


@categories_bp.get("")
def list_categories_route():
    """
    Query params:
    - page, limit (default 20), search (name, description)
    - includeProductCount: "true" adds productCount to each row
    - sortBy: name | createdAt | updatedAt (default name), sortOrder
    """
    params = ListParams.from_request(
        default_limit=20,
        sort_fields=tuple(category_service.SORT_FIELDS),
        default_sort="name",
        default_order="asc",
    )
    result = category_service.list_categories(
        params, include_product_count=arg_bool("includeProductCount")
    )
    return jsonify(result), 200


@categories_bp.get("/<int:category_id>")
def get_category_route(category_id: int):
    return jsonify(category_service.get_category(category_id)), 200


@categories_bp.post("")
@require_role(ROLE_MANAGER)
def create_category_route():
    return jsonify(category_service.create_category(get_json_body())), 201


@categories_bp.put("/<int:category_id>")
@require_role(ROLE_MANAGER)
def update_category_route(category_id: int):
    return jsonify(category_service.update_category(category_id, get_json_body())), 200


@categories_bp.delete("/<int:category_id>")
@require_role(ROLE_MANAGER)
def delete_category_route(category_id: int):
    return jsonify(category_service.delete_category(category_id)), 200
