# Overview: Service-layer operations for suppliers; encapsulates business logic and database work.

"""
Supplier Service

Supplier names are unique. A supplier that still supplies products cannot
be deleted; reassign or delete the products first.
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from ..errors import ConflictError, NotFoundError, ValidationError, translate_db_error
from ..extensions import db
from ..models import Product, Supplier
from ..validation import (
    ListParams,
    clean_str,
    enforce_max_lengths,
    is_blank,
    optional_str,
    order_clause,
    paginate,
    require_any_field,
    require_fields,
    search_filter,
    validate_email,
)

SORT_FIELDS = {
    "name": Supplier.name,
    "contactPerson": Supplier.contact_person,
    "email": Supplier.email,
    "createdAt": Supplier.created_at,
    "updatedAt": Supplier.updated_at,
}

UPDATABLE_FIELDS = ("name", "contactPerson", "phone", "email", "address")

SUPPLIER_UNIQUE_MESSAGES = {"name": "Supplier with this name already exists"}


def _product_count(supplier_id: int) -> int:
    return db.session.query(Product).filter(Product.supplier_id == supplier_id).count()


def _to_dict(supplier: Supplier, *, with_count: bool = True) -> dict:
    data = supplier.to_dict()
    if with_count:
        data["productCount"] = _product_count(supplier.id)
    return data


def _optional_email(value) -> str | None:
    if is_blank(value):
        return None
    return validate_email(value)


def get_supplier_or_404(supplier_id: int) -> Supplier:
    supplier = db.session.get(Supplier, supplier_id)
    if supplier is None:
        raise NotFoundError("Supplier not found")
    return supplier


def list_suppliers(params: ListParams, *, include_product_count: bool = False) -> dict:
    query = db.session.query(Supplier)

    if params.search:
        query = query.filter(
            search_filter(
                db,
                params.search,
                Supplier.name,
                Supplier.contact_person,
                Supplier.email,
                Supplier.phone,
            )
        )

    query = query.order_by(order_clause(SORT_FIELDS[params.sort_by], params), Supplier.id.asc())

    try:
        suppliers, pagination = paginate(query, params)
        items = [_to_dict(s, with_count=include_product_count) for s in suppliers]
    except SQLAlchemyError as exc:
        raise translate_db_error(exc, resource="suppliers", action="fetch")

    return {
        "suppliers": items,
        "pagination": pagination,
        "filters": {
            "search": params.search,
            "includeProductCount": include_product_count,
        },
        "sorting": params.sorting(),
    }


def get_supplier(supplier_id: int) -> dict:
    supplier = get_supplier_or_404(supplier_id)

    products = (
        db.session.query(Product)
        .filter(Product.supplier_id == supplier.id)
        .order_by(Product.name.asc())
        .all()
    )

    data = _to_dict(supplier)
    data["products"] = [
        {
            "id": p.id,
            "name": p.name,
            "sku": p.sku,
            "sellingPrice": p.to_dict(include_relations=False)["sellingPrice"],
            "lowStockThreshold": p.low_stock_threshold,
            "createdAt": p.to_dict(include_relations=False)["createdAt"],
        }
        for p in products
    ]
    return data


def create_supplier(data: dict) -> dict:
    require_fields(data, "name")

    supplier = Supplier(
        name=clean_str(data["name"]),
        contact_person=optional_str(data.get("contactPerson")),
        phone=optional_str(data.get("phone")),
        email=_optional_email(data.get("email")),
        address=optional_str(data.get("address")),
    )
    enforce_max_lengths(supplier)

    try:
        db.session.add(supplier)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise translate_db_error(
            exc, resource="supplier", action="create", unique_messages=SUPPLIER_UNIQUE_MESSAGES
        )

    return _to_dict(supplier)


def update_supplier(supplier_id: int, data: dict) -> dict:
    """Partial update: only the fields present in data change."""
    supplier = get_supplier_or_404(supplier_id)
    require_any_field(data, UPDATABLE_FIELDS)

    if "name" in data and is_blank(data["name"]):
        raise ValidationError("Name cannot be empty", fields=["name"])
    email = _optional_email(data.get("email"))

    if "name" in data:
        supplier.name = clean_str(data["name"])
    if "email" in data:
        supplier.email = email
    if "contactPerson" in data:
        supplier.contact_person = optional_str(data["contactPerson"])
    if "phone" in data:
        supplier.phone = optional_str(data["phone"])
    if "address" in data:
        supplier.address = optional_str(data["address"])
    enforce_max_lengths(supplier)

    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise translate_db_error(
            exc, resource="supplier", action="update", unique_messages=SUPPLIER_UNIQUE_MESSAGES
        )

    return _to_dict(supplier)


def delete_supplier(supplier_id: int) -> dict:
    supplier = get_supplier_or_404(supplier_id)

    product_count = _product_count(supplier.id)
    if product_count > 0:
        raise ConflictError(
            "Cannot delete supplier with existing products",
            details=f"This supplier has {product_count} associated products",
            productCount=product_count,
        )

    try:
        db.session.delete(supplier)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise translate_db_error(
            exc,
            resource="supplier",
            action="delete",
            foreign_key_error=ConflictError("Cannot delete supplier due to existing references"),
        )

    return {"message": "Supplier deleted successfully"}
