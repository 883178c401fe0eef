# Overview: Service-layer operations for the public storefront catalog; read-only.

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from ..errors import translate_db_error
from ..extensions import db
from ..models import Category, InventoryItem, Product
from ..validation import ListParams, paginate, search_filter


def _catalog_entry(item: InventoryItem) -> dict:
    product = item.product
    entry = product.to_dict(include_relations=False)
    entry["category"] = product.category.to_summary() if product.category else None
    entry["inventoryItemId"] = item.id
    entry["stockQuantity"] = item.quantity
    entry["reservedQuantity"] = item.reserved_quantity
    entry["availableQuantity"] = item.available_quantity
    # Storefront clients read `quantity` as what can be bought.
    entry["quantity"] = item.available_quantity
    return entry


def list_catalog(params: ListParams, *, category_id: int | None = None) -> dict:
    """
    In-stock inventory rows (quantity > 0) as product entries, newest update
    first, plus every category for the filter menu.
    """
    query = (
        db.session.query(InventoryItem)
        .join(Product, InventoryItem.product_id == Product.id)
        .filter(InventoryItem.quantity > 0)
    )
    if params.search:
        query = query.filter(
            search_filter(db, params.search, Product.name, Product.sku, Product.description)
        )
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)

    query = query.order_by(InventoryItem.updated_at.desc(), InventoryItem.id.desc())

    try:
        items, pagination = paginate(query, params)
        products = [_catalog_entry(item) for item in items]
        categories = [c.to_summary() for c in db.session.query(Category).order_by(Category.name.asc())]
    except SQLAlchemyError as exc:
        raise translate_db_error(exc, resource="catalog", action="fetch")

    return {
        "products": products,
        "pagination": pagination,
        "filters": {"search": params.search, "categoryId": category_id},
        "categories": categories,
    }
