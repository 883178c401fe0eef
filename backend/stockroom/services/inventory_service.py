# Overview: Service-layer operations for inventory items; encapsulates business logic and database work.

# backend/stockroom/services/inventory_service.py
"""
Inventory Service

Stock on hand per product batch.

Creation has two modes:
- productId given: attach a new inventory row to an existing product
- no productId: create the product (productName, sku, sellingPrice) and its
  first inventory row in one transaction

Updates touch the owning product and the inventory row together and commit
once. Quantities change afterwards through stock movements.
"""
from __future__ import annotations

from decimal import Decimal

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError

from ..errors import ConflictError, NotFoundError, ValidationError, translate_db_error
from ..extensions import db
from ..models import InventoryItem, Product, StockMovement
from ..models.catalog import decimal_str
from ..validation import (
    ListParams,
    clean_str,
    enforce_max_lengths,
    is_blank,
    optional_datetime,
    optional_decimal,
    optional_int,
    optional_str,
    order_clause,
    paginate,
    parse_decimal,
    parse_int,
    require_any_field,
    require_fields,
    search_filter,
)

SORT_FIELDS = {
    "quantity": InventoryItem.quantity,
    "reservedQuantity": InventoryItem.reserved_quantity,
    "location": InventoryItem.location,
    "batchNumber": InventoryItem.batch_number,
    "expiryDate": InventoryItem.expiry_date,
    "createdAt": InventoryItem.created_at,
    "updatedAt": InventoryItem.updated_at,
    "productName": Product.name,
}

PRODUCT_FIELDS = ("productName", "description", "sku", "sellingPrice", "lowStockThreshold")
ITEM_FIELDS = ("quantity", "reservedQuantity", "location", "batchNumber", "expiryDate")

NEW_PRODUCT_LOW_STOCK_THRESHOLD = 10

BATCH_CONFLICT_MESSAGE = "Inventory item for this product and batch already exists"

INVENTORY_UNIQUE_MESSAGES = {
    "sku": "SKU already exists",
    "product_id": BATCH_CONFLICT_MESSAGE,
    "batch_number": BATCH_CONFLICT_MESSAGE,
}


def get_inventory_item_or_404(item_id: int) -> InventoryItem:
    item = db.session.get(InventoryItem, item_id)
    if item is None:
        raise NotFoundError("Inventory item not found")
    return item


def _filtered_query(params: ListParams, *, category_id, location, low_stock):
    query = db.session.query(InventoryItem).join(Product, InventoryItem.product_id == Product.id)

    if params.search:
        query = query.filter(
            search_filter(db, params.search, Product.name, Product.sku, Product.description)
        )
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if location:
        query = query.filter(InventoryItem.location.ilike(f"%{location}%"))
    if low_stock:
        query = query.filter(InventoryItem.quantity <= Product.low_stock_threshold)
    return query


def _stats(query) -> dict:
    """Totals over every row matching the filters, not just the current page."""
    total_items, low_stock_items, total_value = (
        query.order_by(None)
        .with_entities(
            func.count(InventoryItem.id),
            func.sum(case((InventoryItem.quantity <= Product.low_stock_threshold, 1), else_=0)),
            func.sum(InventoryItem.quantity * Product.selling_price),
        )
        .one()
    )
    return {
        "totalItems": total_items or 0,
        "lowStockItems": int(low_stock_items or 0),
        "totalValue": decimal_str(Decimal(str(total_value or 0))),
    }


def list_inventory(
    params: ListParams,
    *,
    category_id: int | None = None,
    location: str | None = None,
    low_stock: bool = False,
) -> dict:
    """
    Paginated inventory listing with stats.

    The low-stock filter (quantity <= product.lowStockThreshold) runs in the
    query, so pagination totals and page contents agree.
    """
    location = (location or "").strip() or None
    query = _filtered_query(params, category_id=category_id, location=location, low_stock=low_stock)
    ordered = query.order_by(order_clause(SORT_FIELDS[params.sort_by], params), InventoryItem.id.desc())

    try:
        items, pagination = paginate(ordered, params)
        rows = [item.to_dict() for item in items]
        stats = _stats(query)
    except SQLAlchemyError as exc:
        raise translate_db_error(exc, resource="inventory", action="fetch")

    return {
        "inventoryItems": rows,
        "pagination": pagination,
        "filters": {
            "search": params.search,
            "categoryId": category_id,
            "lowStock": low_stock,
            "location": location,
        },
        "sorting": params.sorting(),
        "stats": stats,
    }


def get_inventory_item(item_id: int) -> dict:
    item = get_inventory_item_or_404(item_id)

    recent = (
        item.stock_movements.order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
        .limit(10)
        .all()
    )

    data = item.to_dict()
    data["stockMovements"] = [m.to_dict() for m in recent]
    return data


def _item_fields(data: dict) -> dict:
    return {
        "reserved_quantity": optional_int(data.get("reservedQuantity"), "reservedQuantity", minimum=0) or 0,
        "location": optional_str(data.get("location")),
        "batch_number": optional_str(data.get("batchNumber")),
        "expiry_date": optional_datetime(data.get("expiryDate"), "expiryDate"),
    }


def create_inventory_item(data: dict) -> dict:
    if not is_blank(data.get("productId")):
        item = _create_for_existing_product(data)
    else:
        item = _create_with_new_product(data)

    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise translate_db_error(
            exc,
            resource="inventory item",
            action="create",
            unique_messages=INVENTORY_UNIQUE_MESSAGES,
        )

    return item.to_dict()


def _create_for_existing_product(data: dict) -> InventoryItem:
    require_fields(data, "quantity")

    product_id = parse_int(data["productId"], "productId")
    quantity = parse_int(data["quantity"], "quantity", minimum=0)
    fields = _item_fields(data)

    if db.session.get(Product, product_id) is None:
        raise NotFoundError("Product not found")

    item = InventoryItem(product_id=product_id, quantity=quantity, **fields)
    enforce_max_lengths(item)
    db.session.add(item)
    return item


def _create_with_new_product(data: dict) -> InventoryItem:
    require_fields(data, "productName", "sku", "sellingPrice")

    selling_price = parse_decimal(data["sellingPrice"], "sellingPrice")
    threshold = optional_int(data.get("lowStockThreshold"), "lowStockThreshold", minimum=0)
    quantity = optional_int(data.get("quantity"), "quantity", minimum=0) or 0
    fields = _item_fields(data)

    product = Product(
        name=clean_str(data["productName"]),
        description=optional_str(data.get("description")),
        sku=clean_str(data["sku"]),
        selling_price=selling_price,
        purchase_price=Decimal("0.00"),
        low_stock_threshold=NEW_PRODUCT_LOW_STOCK_THRESHOLD if threshold is None else threshold,
    )
    item = InventoryItem(product=product, quantity=quantity, **fields)
    enforce_max_lengths(product, item)
    db.session.add(product)
    db.session.add(item)
    return item


def update_inventory_item(item_id: int, data: dict) -> dict:
    """
    Partial update of the item and its product in one transaction.

    Only keys present in data change; at least one must be given.
    """
    item = get_inventory_item_or_404(item_id)
    require_any_field(data, PRODUCT_FIELDS + ITEM_FIELDS)

    for name in ("productName", "sku", "sellingPrice", "quantity"):
        if name in data and is_blank(data[name]):
            raise ValidationError(f"{name} cannot be empty", fields=[name])

    product = item.product
    with db.session.no_autoflush:
        if "productName" in data:
            product.name = clean_str(data["productName"])
        if "description" in data:
            product.description = optional_str(data["description"])
        if "sku" in data:
            product.sku = clean_str(data["sku"])
        if "sellingPrice" in data:
            product.selling_price = parse_decimal(data["sellingPrice"], "sellingPrice")
        if "lowStockThreshold" in data:
            threshold = optional_int(data["lowStockThreshold"], "lowStockThreshold", minimum=0)
            product.low_stock_threshold = threshold or 0

        if "quantity" in data:
            item.quantity = parse_int(data["quantity"], "quantity", minimum=0)
        if "reservedQuantity" in data:
            item.reserved_quantity = (
                optional_int(data["reservedQuantity"], "reservedQuantity", minimum=0) or 0
            )
        if "location" in data:
            item.location = optional_str(data["location"])
        if "batchNumber" in data:
            item.batch_number = optional_str(data["batchNumber"])
        if "expiryDate" in data:
            item.expiry_date = optional_datetime(data["expiryDate"], "expiryDate")

    enforce_max_lengths(product, item)

    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise translate_db_error(
            exc,
            resource="inventory item",
            action="update",
            unique_messages=INVENTORY_UNIQUE_MESSAGES,
        )

    return item.to_dict()


def delete_inventory_item(item_id: int) -> dict:
    """Deletes the row only; the product stays."""
    item = get_inventory_item_or_404(item_id)

    movement_count = item.stock_movements.count()
    if movement_count > 0:
        raise ConflictError(
            f"Cannot delete inventory item: it has {movement_count} stock movements",
            movementCount=movement_count,
        )

    try:
        db.session.delete(item)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise translate_db_error(exc, resource="inventory item", action="delete")

    return {"message": "Inventory item deleted successfully"}
