from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from ..time_utils import to_utc_z


def decimal_str(value: Decimal | None) -> str | None:
    """Money travels as a string so clients never see float rounding."""
    if value is None:
        return None
    return str(Decimal(value).quantize(Decimal("0.01")))


class Category(db.Model):
    __tablename__ = "categories"
    __table_args__ = (
        db.UniqueConstraint("name", name="uq_categories_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Category id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }

    def to_summary(self) -> dict:
        return {"id": self.id, "name": self.name, "description": self.description}


class Supplier(db.Model):
    __tablename__ = "suppliers"
    __table_args__ = (
        db.UniqueConstraint("name", name="uq_suppliers_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    contact_person = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(64), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    address = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Supplier id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "contactPerson": self.contact_person,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }

    def to_summary(self) -> dict:
        return {"id": self.id, "name": self.name}


class Product(db.Model):
    """
    Product master data.

    SKU is globally unique. Stock levels live on InventoryItem rows, one per
    (product, batch). A product with inventory rows or stock movements cannot
    be deleted.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("sku", name="uq_products_sku"),
        db.Index("ix_products_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    sku = db.Column(db.String(64), nullable=False)

    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True, index=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey("suppliers.id"), nullable=True, index=True)

    purchase_price = db.Column(db.Numeric(10, 2), nullable=True)
    selling_price = db.Column(db.Numeric(10, 2), nullable=False)

    image_url = db.Column(db.String(512), nullable=True)
    low_stock_threshold = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    category = db.relationship("Category", backref=db.backref("products", lazy="dynamic"))
    supplier = db.relationship("Supplier", backref=db.backref("products", lazy="dynamic"))

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r} name={self.name!r}>"

    def to_dict(self, *, include_relations: bool = True) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "sku": self.sku,
            "categoryId": self.category_id,
            "supplierId": self.supplier_id,
            "purchasePrice": decimal_str(self.purchase_price),
            "sellingPrice": decimal_str(self.selling_price),
            "imageUrl": self.image_url,
            "lowStockThreshold": self.low_stock_threshold,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }
        if include_relations:
            data["category"] = self.category.to_summary() if self.category else None
            data["supplier"] = self.supplier.to_summary() if self.supplier else None
        return data

    def to_summary(self) -> dict:
        return {"id": self.id, "name": self.name, "sku": self.sku}
