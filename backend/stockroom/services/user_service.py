# Overview: Service-layer operations for user accounts; encapsulates business logic and database work.

# backend/stockroom/services/user_service.py
"""
User Management Service

Permission matrix:
- list: MANAGER+
- create / delete: ADMIN
- read / update: the user themself or MANAGER+
- role and isActive changes: ADMIN only

A user with stock movement history cannot be deleted; deactivate it instead.
"""
from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from ..errors import AuthorizationError, ConflictError, NotFoundError, ValidationError, translate_db_error
from ..extensions import db
from ..models import ROLE_ADMIN, ROLE_MANAGER, StockMovement, User
from ..validation import (
    ListParams,
    enforce_max_lengths,
    optional_str,
    order_clause,
    paginate,
    parse_bool,
    require_any_field,
    search_filter,
    validate_email,
)
from .auth_service import (
    USER_UNIQUE_MESSAGES,
    create_user as create_account,
    has_role,
    hash_password,
    validate_password,
    validate_role,
)

SORT_FIELDS = {
    "username": User.username,
    "email": User.email,
    "role": User.role,
    "firstName": User.first_name,
    "lastName": User.last_name,
    "createdAt": User.created_at,
    "updatedAt": User.updated_at,
}

UPDATABLE_FIELDS = ("email", "password", "firstName", "lastName", "role", "isActive")


def _movement_count(user_id: int) -> int:
    return db.session.query(StockMovement).filter(StockMovement.user_id == user_id).count()


def get_user_or_404(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def _check_self_or_manager(current_user: User, user_id: int) -> None:
    if current_user.id != user_id and not has_role(current_user.role, ROLE_MANAGER):
        raise AuthorizationError("Insufficient permissions")


def list_users(params: ListParams, *, role: str | None = None, is_active: bool | None = None) -> dict:
    query = db.session.query(User)

    if params.search:
        query = query.filter(
            search_filter(db, params.search, User.username, User.email, User.first_name, User.last_name)
        )
    if role:
        query = query.filter(User.role == validate_role(role))
    if is_active is not None:
        query = query.filter(User.is_active.is_(is_active))

    query = query.order_by(order_clause(SORT_FIELDS[params.sort_by], params), User.id.desc())

    try:
        users, pagination = paginate(query, params)
        rows = []
        for user in users:
            row = user.to_dict()
            row["stockMovementCount"] = _movement_count(user.id)
            rows.append(row)
    except SQLAlchemyError as exc:
        raise translate_db_error(exc, resource="users", action="fetch")

    return {
        "users": rows,
        "pagination": pagination,
        "filters": {
            "search": params.search,
            "role": role or None,
            "isActive": is_active,
        },
        "sorting": params.sorting(),
    }


def create_user(data: dict) -> dict:
    """Admin-side account creation; the caller may choose the role."""
    user = create_account(data, allow_role=True)
    return {"message": "User created successfully", "user": user.to_dict()}


def get_user(user_id: int, current_user: User) -> dict:
    _check_self_or_manager(current_user, user_id)
    user = get_user_or_404(user_id)

    recent = (
        user.stock_movements.order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
        .limit(10)
        .all()
    )

    data = user.to_dict()
    data["stockMovements"] = [
        {
            "id": m.id,
            "type": m.type,
            "quantity": m.quantity,
            "createdAt": m.to_dict()["createdAt"],
            "product": m.product.to_summary() if m.product else None,
        }
        for m in recent
    ]
    data["stockMovementCount"] = _movement_count(user.id)
    return data


def update_user(user_id: int, data: dict, current_user: User) -> dict:
    """
    Partial update.

    Raises AuthorizationError when a non-admin touches role or isActive, or
    when a USER edits someone else.
    """
    _check_self_or_manager(current_user, user_id)
    user = get_user_or_404(user_id)
    require_any_field(data, UPDATABLE_FIELDS)

    is_admin = has_role(current_user.role, ROLE_ADMIN)
    if "role" in data and not is_admin:
        raise AuthorizationError("Only administrators can change user roles")
    if "isActive" in data and not is_admin:
        raise AuthorizationError("Only administrators can change user status")

    changes = {}
    if "email" in data:
        changes["email"] = validate_email(data["email"] or "").lower()
    if "password" in data:
        if data["password"] is None:
            raise ValidationError("Password cannot be empty", fields=["password"])
        changes["password_hash"] = hash_password(validate_password(data["password"]))
    if "firstName" in data:
        changes["first_name"] = optional_str(data["firstName"])
    if "lastName" in data:
        changes["last_name"] = optional_str(data["lastName"])
    if "role" in data:
        changes["role"] = validate_role(data["role"])
    if "isActive" in data:
        changes["is_active"] = parse_bool(data["isActive"])

    for attr, value in changes.items():
        setattr(user, attr, value)
    enforce_max_lengths(user)

    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise translate_db_error(
            exc, resource="user", action="update", unique_messages=USER_UNIQUE_MESSAGES
        )

    return {"message": "User updated successfully", "user": user.to_dict()}


def delete_user(user_id: int, current_user: User) -> dict:
    if current_user.id == user_id:
        raise ValidationError("Cannot delete your own account")

    user = get_user_or_404(user_id)

    movement_count = _movement_count(user.id)
    if movement_count > 0:
        raise ConflictError(
            "Cannot delete user with existing stock movement records",
            details=f"This user has {movement_count} stock movement records",
            movementCount=movement_count,
        )

    try:
        db.session.delete(user)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise translate_db_error(
            exc,
            resource="user",
            action="delete",
            foreign_key_error=ConflictError("Cannot delete user due to existing references"),
        )

    return {"message": "User deleted successfully"}
