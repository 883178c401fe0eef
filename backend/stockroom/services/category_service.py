# Overview: Service-layer operations for categories; encapsulates business logic and database work.

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from ..errors import ConflictError, NotFoundError, translate_db_error
from ..extensions import db
from ..models import Category, Product
from ..validation import (
    ListParams,
    clean_str,
    enforce_max_lengths,
    optional_str,
    order_clause,
    paginate,
    require_fields,
    search_filter,
)

SORT_FIELDS = {
    "name": Category.name,
    "createdAt": Category.created_at,
    "updatedAt": Category.updated_at,
}

CATEGORY_UNIQUE_MESSAGES = {"name": "Category name already exists"}


def _product_count(category_id: int) -> int:
    return db.session.query(Product).filter(Product.category_id == category_id).count()


def _to_dict(category: Category, *, with_count: bool = True) -> dict:
    data = category.to_dict()
    if with_count:
        data["productCount"] = _product_count(category.id)
    return data


def get_category_or_404(category_id: int) -> Category:
    category = db.session.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


def list_categories(params: ListParams, *, include_product_count: bool = False) -> dict:
    query = db.session.query(Category)

    if params.search:
        query = query.filter(search_filter(db, params.search, Category.name, Category.description))

    query = query.order_by(order_clause(SORT_FIELDS[params.sort_by], params), Category.id.asc())

    try:
        categories, pagination = paginate(query, params)
        items = [_to_dict(c, with_count=include_product_count) for c in categories]
    except SQLAlchemyError as exc:
        raise translate_db_error(exc, resource="categories", action="fetch")

    return {
        "categories": items,
        "pagination": pagination,
        "filters": {
            "search": params.search,
            "includeProductCount": include_product_count,
        },
        "sorting": params.sorting(),
    }


def get_category(category_id: int) -> dict:
    category = get_category_or_404(category_id)

    preview = (
        db.session.query(Product)
        .filter(Product.category_id == category.id)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .limit(10)
        .all()
    )

    data = _to_dict(category)
    data["products"] = [
        {
            "id": p.id,
            "name": p.name,
            "sku": p.sku,
            "sellingPrice": p.to_dict(include_relations=False)["sellingPrice"],
            "imageUrl": p.image_url,
        }
        for p in preview
    ]
    return data


def _apply(category: Category, data: dict) -> None:
    require_fields(data, "name")
    category.name = clean_str(data["name"])
    category.description = optional_str(data.get("description"))
    enforce_max_lengths(category)


def create_category(data: dict) -> dict:
    category = Category()
    _apply(category, data)

    try:
        db.session.add(category)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise translate_db_error(
            exc, resource="category", action="create", unique_messages=CATEGORY_UNIQUE_MESSAGES
        )

    return _to_dict(category)


def update_category(category_id: int, data: dict) -> dict:
    category = get_category_or_404(category_id)
    _apply(category, data)

    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise translate_db_error(
            exc, resource="category", action="update", unique_messages=CATEGORY_UNIQUE_MESSAGES
        )

    return _to_dict(category)


def delete_category(category_id: int) -> dict:
    """
    Delete a category with no products.

    Raises NotFoundError, or ConflictError carrying productCount when products
    still reference it.
    """
    category = get_category_or_404(category_id)

    product_count = _product_count(category.id)
    if product_count > 0:
        raise ConflictError(
            f"Cannot delete category: it has {product_count} associated products. "
            "Please reassign or delete these products first.",
            productCount=product_count,
        )

    deleted = {"id": category.id, "name": category.name}
    try:
        db.session.delete(category)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise translate_db_error(
            exc,
            resource="category",
            action="delete",
            foreign_key_error=ConflictError("Cannot delete category: it has associated products"),
        )

    return {"message": "Category deleted successfully", "deletedCategory": deleted}
