# Overview: Flask API routes for the public catalog; parses input and returns JSON responses.

from flask import Blueprint, jsonify

from ..services import catalog_service
from ..validation import ListParams, arg_int_or_none

catalog_bp = Blueprint("catalog", __name__, url_prefix="/api/catalog")


@catalog_bp.get("")
def catalog_route():
    """Public storefront listing: in-stock items only, no authentication."""
    params = ListParams.from_request(default_limit=20, default_sort="updatedAt")
    result = catalog_service.list_catalog(params, category_id=arg_int_or_none("categoryId"))
    return jsonify(result), 200
