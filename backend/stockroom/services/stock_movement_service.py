# Overview: Service-layer operations for the stock movement ledger; encapsulates business logic and database work.

# backend/stockroom/services/stock_movement_service.py
"""
Stock Movement Service

The ledger is append-only. quantity is a signed delta: positive for stock
coming in, negative for stock going out.

When a movement names an inventory item, the movement row and the item's
quantity change are written in the same transaction. The increment is done
in SQL (quantity = quantity + delta) so the read-modify-write happens inside
the store.
"""
from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from ..errors import AuthorizationError, NotFoundError, ValidationError, translate_db_error
from ..extensions import db
from ..models import InventoryItem, MOVEMENT_TYPES, Product, ROLE_MANAGER, ROLE_USER, StockMovement, User
from ..validation import (
    ListParams,
    enforce_max_lengths,
    is_blank,
    optional_int,
    optional_str,
    order_clause,
    paginate,
    parse_int,
    require_fields,
)
from .auth_service import has_role

SORT_FIELDS = {
    "createdAt": StockMovement.created_at,
    "quantity": StockMovement.quantity,
    "type": StockMovement.type,
}


def validate_movement_type(value) -> str:
    movement_type = str(value).strip().upper()
    if movement_type not in MOVEMENT_TYPES:
        raise ValidationError(
            f"Invalid movement type. Must be one of: {', '.join(MOVEMENT_TYPES)}",
            fields=["type"],
        )
    return movement_type


def list_stock_movements(
    params: ListParams,
    current_user: User,
    *,
    product_id: int | None = None,
    movement_type: str | None = None,
    user_id: int | None = None,
    start_date=None,
    end_date=None,
) -> dict:
    """
    Paginated ledger with inbound/outbound counts over the filtered set.

    A USER only ever sees their own movements; any userId filter they pass
    is replaced with their own id.
    """
    if movement_type:
        movement_type = validate_movement_type(movement_type)
    if current_user.role == ROLE_USER:
        user_id = current_user.id

    query = db.session.query(StockMovement)
    if product_id is not None:
        query = query.filter(StockMovement.product_id == product_id)
    if movement_type:
        query = query.filter(StockMovement.type == movement_type)
    if user_id is not None:
        query = query.filter(StockMovement.user_id == user_id)
    if start_date is not None:
        query = query.filter(StockMovement.created_at >= start_date)
    if end_date is not None:
        query = query.filter(StockMovement.created_at <= end_date)

    ordered = query.order_by(order_clause(SORT_FIELDS[params.sort_by], params), StockMovement.id.desc())

    try:
        movements, pagination = paginate(ordered, params)
        rows = [m.to_dict() for m in movements]
        stats = {
            "totalMovements": pagination["totalCount"],
            "inboundMovements": query.filter(StockMovement.quantity > 0).count(),
            "outboundMovements": query.filter(StockMovement.quantity < 0).count(),
        }
    except SQLAlchemyError as exc:
        raise translate_db_error(exc, resource="stock movements", action="fetch")

    return {
        "stockMovements": rows,
        "pagination": pagination,
        "filters": {
            "productId": product_id,
            "type": movement_type or None,
            "userId": user_id,
            "startDate": start_date.isoformat() if start_date else None,
            "endDate": end_date.isoformat() if end_date else None,
        },
        "sorting": params.sorting(),
        "stats": stats,
    }


def _resolve_actor_id(data: dict, current_user: User) -> int:
    requested = optional_int(data.get("userId"), "userId")
    if requested is None or requested == current_user.id:
        return current_user.id

    if not has_role(current_user.role, ROLE_MANAGER):
        raise AuthorizationError("Only managers and administrators can create records for other users")
    if db.session.get(User, requested) is None:
        raise NotFoundError("User not found")
    return requested


def create_stock_movement(data: dict, current_user: User) -> dict:
    """
    Record a movement and apply it to the referenced inventory item.

    Raises ValidationError for missing/invalid fields or an item that belongs
    to another product, AuthorizationError when a USER records for someone
    else, NotFoundError for unknown product/item/user.
    """
    require_fields(data, "productId", "type", "quantity")

    product_id = parse_int(data["productId"], "productId")
    movement_type = validate_movement_type(data["type"])
    quantity = parse_int(data["quantity"], "quantity")
    if quantity == 0:
        raise ValidationError("quantity must be a non-zero integer", fields=["quantity"])

    actor_id = _resolve_actor_id(data, current_user)

    if db.session.get(Product, product_id) is None:
        raise NotFoundError("Product not found")

    item_id = None
    if not is_blank(data.get("inventoryItemId")):
        item_id = parse_int(data["inventoryItemId"], "inventoryItemId")
        item = db.session.get(InventoryItem, item_id)
        if item is None:
            raise NotFoundError("Inventory item not found")
        if item.product_id != product_id:
            raise ValidationError("Inventory item does not belong to the specified product")

    movement = StockMovement(
        product_id=product_id,
        inventory_item_id=item_id,
        user_id=actor_id,
        type=movement_type,
        quantity=quantity,
        reason=optional_str(data.get("reason")),
        reference=optional_str(data.get("reference")),
        notes=optional_str(data.get("notes")),
    )
    enforce_max_lengths(movement)

    try:
        db.session.add(movement)
        db.session.flush()
        if item_id is not None:
            db.session.query(InventoryItem).filter(InventoryItem.id == item_id).update(
                {InventoryItem.quantity: InventoryItem.quantity + quantity},
                synchronize_session=False,
            )
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise translate_db_error(
            exc,
            resource="stock movement",
            action="create",
            foreign_key_error=ValidationError("Invalid reference to product, inventory item, or user"),
        )

    return movement.to_dict()
