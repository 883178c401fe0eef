# Overview: Flask API routes for suppliers operations; parses input and returns JSON responses.

# backend/stockroom/routes/suppliers.py
from flask import Blueprint, jsonify

from ..decorators import require_role
from ..models import ROLE_MANAGER
from ..services import supplier_service
from ..validation import ListParams, arg_bool, get_json_body


suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/api/suppliers")


@suppliers_bp.get("")
def list_suppliers_route():
    params = ListParams.from_request(
        default_limit=20,
        sort_fields=tuple(supplier_service.SORT_FIELDS),
        default_sort="name",
        default_order="asc",
    )
    result = supplier_service.list_suppliers(
        params, include_product_count=arg_bool("includeProductCount")
    )
    return jsonify(result), 200


@suppliers_bp.get("/<int:supplier_id>")
def get_supplier_route(supplier_id: int):
    return jsonify(supplier_service.get_supplier(supplier_id)), 200


@suppliers_bp.post("")
@require_role(ROLE_MANAGER)
def create_supplier_route():
    return jsonify(supplier_service.create_supplier(get_json_body())), 201


@suppliers_bp.put("/<int:supplier_id>")
@require_role(ROLE_MANAGER)
def update_supplier_route(supplier_id: int):
    """Partial update; send only the fields to change."""
    return jsonify(supplier_service.update_supplier(supplier_id, get_json_body())), 200


@suppliers_bp.delete("/<int:supplier_id>")
@require_role(ROLE_MANAGER)
def delete_supplier_route(supplier_id: int):
    return jsonify(supplier_service.delete_supplier(supplier_id)), 200
