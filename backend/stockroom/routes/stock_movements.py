# Overview: Flask API routes for stock movement operations; parses input and returns JSON responses.

# backend/stockroom/routes/stock_movements.py
"""
Stock movement ledger routes.

Any authenticated user may record movements under their own id; MANAGER and
ADMIN may record on behalf of other users. USER-role callers only see their
own movements in the listing.
"""
from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth
from ..services import stock_movement_service
from ..validation import ListParams, arg_datetime_or_none, arg_int_or_none, get_json_body

stock_movements_bp = Blueprint("stock_movements", __name__, url_prefix="/api/stock-movements")


@stock_movements_bp.get("")
@require_auth
def list_stock_movements_route():
    params = ListParams.from_request(
        default_limit=20,
        sort_fields=tuple(stock_movement_service.SORT_FIELDS),
        default_sort="createdAt",
        default_order="desc",
    )
    result = stock_movement_service.list_stock_movements(
        params,
        g.current_user,
        product_id=arg_int_or_none("productId"),
        movement_type=(request.args.get("type") or "").strip() or None,
        user_id=arg_int_or_none("userId"),
        start_date=arg_datetime_or_none("startDate"),
        end_date=arg_datetime_or_none("endDate"),
    )
    return jsonify(result), 200


@stock_movements_bp.post("")
@require_auth
def create_stock_movement_route():
    """
    Body: productId, type, quantity (signed, non-zero) required;
    inventoryItemId, userId, reason, reference, notes optional.
    """
    result = stock_movement_service.create_stock_movement(get_json_body(), g.current_user)
    return jsonify(result), 201
