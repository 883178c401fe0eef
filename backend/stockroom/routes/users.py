# Overview: Flask API routes for user management operations; parses input and returns JSON responses.

# backend/stockroom/routes/users.py
"""
User management routes.

- list: MANAGER+
- create / delete: ADMIN
- get / update: self or MANAGER+ (checked in the service)
"""
from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_role
from ..models import ROLE_ADMIN, ROLE_MANAGER
from ..services import user_service
from ..validation import ListParams, get_json_body

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_role(ROLE_MANAGER)
def list_users_route():
    params = ListParams.from_request(
        default_limit=20,
        sort_fields=tuple(user_service.SORT_FIELDS),
        default_sort="createdAt",
        default_order="desc",
    )

    is_active = request.args.get("isActive")
    result = user_service.list_users(
        params,
        role=(request.args.get("role") or "").strip() or None,
        is_active=None if is_active is None else is_active.strip().lower() == "true",
    )
    return jsonify(result), 200


@users_bp.post("")
@require_role(ROLE_ADMIN)
def create_user_route():
    return jsonify(user_service.create_user(get_json_body())), 201


@users_bp.get("/<int:user_id>")
@require_auth
def get_user_route(user_id: int):
    return jsonify(user_service.get_user(user_id, g.current_user)), 200


@users_bp.put("/<int:user_id>")
@require_auth
def update_user_route(user_id: int):
    return jsonify(user_service.update_user(user_id, get_json_body(), g.current_user)), 200


@users_bp.delete("/<int:user_id>")
@require_role(ROLE_ADMIN)
def delete_user_route(user_id: int):
    return jsonify(user_service.delete_user(user_id, g.current_user)), 200
