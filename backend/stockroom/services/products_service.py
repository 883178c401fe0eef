# Overview: Service-layer operations for products; encapsulates business logic and database work.

# backend/stockroom/services/products_service.py
"""
Products Service

- list_products: search, category/supplier/price filters, low-stock filter, sorting
- create_product / update_product: PUT semantics, lowStockThreshold kept when omitted
- delete_product: blocked while inventory rows or stock movements reference it
"""
from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from ..errors import ConflictError, NotFoundError, translate_db_error
from ..extensions import db
from ..models import Category, InventoryItem, Product, StockMovement, Supplier
from ..validation import (
    ListParams,
    clean_str,
    enforce_max_lengths,
    optional_decimal,
    optional_int,
    optional_str,
    order_clause,
    paginate,
    parse_decimal,
    require_fields,
    search_filter,
)

SORT_FIELDS = {
    "name": Product.name,
    "sku": Product.sku,
    "sellingPrice": Product.selling_price,
    "createdAt": Product.created_at,
    "updatedAt": Product.updated_at,
}

REQUIRED_FIELDS = ("name", "sku", "sellingPrice")


def get_product_or_404(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


def resolve_category_id(value) -> int | None:
    category_id = optional_int(value, "categoryId")
    if category_id is not None and db.session.get(Category, category_id) is None:
        raise NotFoundError("Category not found")
    return category_id


def resolve_supplier_id(value) -> int | None:
    supplier_id = optional_int(value, "supplierId")
    if supplier_id is not None and db.session.get(Supplier, supplier_id) is None:
        raise NotFoundError("Supplier not found")
    return supplier_id


def low_stock_products_filter(query):
    """Products whose summed inventory quantity is at or below their threshold."""
    totals = (
        db.session.query(
            InventoryItem.product_id.label("product_id"),
            func.sum(InventoryItem.quantity).label("total_quantity"),
        )
        .group_by(InventoryItem.product_id)
        .subquery()
    )
    return query.outerjoin(totals, totals.c.product_id == Product.id).filter(
        func.coalesce(totals.c.total_quantity, 0) <= Product.low_stock_threshold
    )


def list_products(
    params: ListParams,
    *,
    category_id: int | None = None,
    supplier_id: int | None = None,
    min_price=None,
    max_price=None,
    low_stock: bool = False,
) -> dict:
    """
    Paginated product listing.

    search matches name, sku and description case-insensitively.
    min_price / max_price bound the selling price (inclusive).
    """
    query = db.session.query(Product)

    if params.search:
        query = query.filter(
            search_filter(db, params.search, Product.name, Product.sku, Product.description)
        )
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if supplier_id is not None:
        query = query.filter(Product.supplier_id == supplier_id)
    if min_price is not None:
        query = query.filter(Product.selling_price >= min_price)
    if max_price is not None:
        query = query.filter(Product.selling_price <= max_price)
    if low_stock:
        query = low_stock_products_filter(query)

    query = query.order_by(order_clause(SORT_FIELDS[params.sort_by], params), Product.id.desc())

    try:
        products, pagination = paginate(query, params)
        items = [p.to_dict() for p in products]
    except SQLAlchemyError as exc:
        raise translate_db_error(exc, resource="products", action="fetch")

    return {
        "products": items,
        "pagination": pagination,
        "filters": {
            "search": params.search,
            "categoryId": category_id,
            "supplierId": supplier_id,
            "minPrice": float(min_price) if min_price is not None else None,
            "maxPrice": float(max_price) if max_price is not None else None,
            "lowStock": low_stock,
        },
        "sorting": params.sorting(),
    }


def get_product(product_id: int) -> dict:
    return get_product_or_404(product_id).to_dict()


def _apply_product_payload(product: Product, data: dict, *, creating: bool) -> None:
    require_fields(data, *REQUIRED_FIELDS)

    threshold = optional_int(data.get("lowStockThreshold"), "lowStockThreshold", minimum=0)
    if threshold is None:
        threshold = 0 if creating else product.low_stock_threshold

    product.name = clean_str(data["name"])
    product.sku = clean_str(data["sku"])
    product.selling_price = parse_decimal(data["sellingPrice"], "sellingPrice")
    product.purchase_price = optional_decimal(data.get("purchasePrice"), "purchasePrice")
    product.description = optional_str(data.get("description"))
    product.image_url = optional_str(data.get("imageUrl"))
    product.category_id = resolve_category_id(data.get("categoryId"))
    product.supplier_id = resolve_supplier_id(data.get("supplierId"))
    product.low_stock_threshold = threshold
    enforce_max_lengths(product)


def create_product(data: dict) -> dict:
    product = Product()
    _apply_product_payload(product, data, creating=True)

    try:
        db.session.add(product)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise translate_db_error(exc, resource="product", action="create")

    return product.to_dict()


def update_product(product_id: int, data: dict) -> dict:
    """
    Replace a product's fields.

    name, sku and sellingPrice are required; optional fields omitted from the
    payload are cleared, except lowStockThreshold which keeps its value.
    """
    product = get_product_or_404(product_id)

    with db.session.no_autoflush:
        _apply_product_payload(product, data, creating=False)

    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise translate_db_error(exc, resource="product", action="update")

    return product.to_dict()


def delete_product(product_id: int) -> dict:
    product = get_product_or_404(product_id)

    inventory_count = db.session.query(InventoryItem).filter(InventoryItem.product_id == product.id).count()
    movement_count = db.session.query(StockMovement).filter(StockMovement.product_id == product.id).count()
    if inventory_count or movement_count:
        raise ConflictError(
            "Cannot delete product: it has related records (inventory, stock movements)",
            inventoryCount=inventory_count,
            movementCount=movement_count,
        )

    deleted = product.to_summary()
    try:
        db.session.delete(product)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise translate_db_error(
            exc,
            resource="product",
            action="delete",
            foreign_key_error=ConflictError(
                "Cannot delete product: it has related records (inventory, stock movements)"
            ),
        )

    return {"message": "Product deleted successfully", "deletedProduct": deleted}
