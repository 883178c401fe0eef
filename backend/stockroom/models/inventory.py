from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z

MOVEMENT_PURCHASE = "PURCHASE"
MOVEMENT_SALE = "SALE"
MOVEMENT_ADJUSTMENT = "ADJUSTMENT"
MOVEMENT_RETURN = "RETURN"
MOVEMENT_TRANSFER = "TRANSFER"
MOVEMENT_DAMAGE = "DAMAGE"
MOVEMENT_TYPES = (
    MOVEMENT_PURCHASE,
    MOVEMENT_SALE,
    MOVEMENT_ADJUSTMENT,
    MOVEMENT_RETURN,
    MOVEMENT_TRANSFER,
    MOVEMENT_DAMAGE,
)


class InventoryItem(db.Model):
    """
    Stock on hand for one product batch.

    available_quantity (quantity - reserved_quantity) is always derived, never stored.
    Low stock: quantity <= product.low_stock_threshold.
    """
    __tablename__ = "inventory_items"
    __table_args__ = (
        db.UniqueConstraint("product_id", "batch_number", name="uq_inventory_product_batch"),
        db.Index("ix_inventory_items_updated", "updated_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False, default=0)
    reserved_quantity = db.Column(db.Integer, nullable=False, default=0)

    location = db.Column(db.String(255), nullable=True)
    batch_number = db.Column(db.String(64), nullable=True)
    expiry_date = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    product = db.relationship("Product", backref=db.backref("inventory_items", lazy="dynamic"))

    @property
    def available_quantity(self) -> int:
        return (self.quantity or 0) - (self.reserved_quantity or 0)

    @property
    def is_low_stock(self) -> bool:
        threshold = self.product.low_stock_threshold if self.product else 0
        return (self.quantity or 0) <= (threshold or 0)

    def __repr__(self) -> str:
        return f"<InventoryItem id={self.id} product_id={self.product_id} qty={self.quantity}>"

    def to_dict(self, *, include_product: bool = True) -> dict:
        data = {
            "id": self.id,
            "productId": self.product_id,
            "quantity": self.quantity,
            "reservedQuantity": self.reserved_quantity,
            "availableQuantity": self.available_quantity,
            "location": self.location,
            "batchNumber": self.batch_number,
            "expiryDate": to_utc_z(self.expiry_date),
            "isLowStock": self.is_low_stock,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }
        if include_product:
            data["product"] = self.product.to_dict() if self.product else None
        return data

    def to_summary(self) -> dict:
        return {"id": self.id, "location": self.location, "batchNumber": self.batch_number}


class StockMovement(db.Model):
    """
    Append-only stock ledger row.

    quantity is a signed delta. When inventory_item_id is set, the same delta
    was applied to that item's quantity in the transaction that wrote this row.
    """
    __tablename__ = "stock_movements"
    __table_args__ = (
        db.Index("ix_stock_movements_product_created", "product_id", "created_at"),
        db.Index("ix_stock_movements_user_created", "user_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    inventory_item_id = db.Column(db.Integer, db.ForeignKey("inventory_items.id"), nullable=True, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    type = db.Column(db.String(32), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)

    reason = db.Column(db.String(255), nullable=True)
    reference = db.Column(db.String(255), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    product = db.relationship("Product", backref=db.backref("stock_movements", lazy="dynamic"))
    inventory_item = db.relationship("InventoryItem", backref=db.backref("stock_movements", lazy="dynamic"))
    user = db.relationship("User", backref=db.backref("stock_movements", lazy="dynamic"))

    def __repr__(self) -> str:
        return f"<StockMovement id={self.id} type={self.type} qty={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "productId": self.product_id,
            "inventoryItemId": self.inventory_item_id,
            "userId": self.user_id,
            "type": self.type,
            "quantity": self.quantity,
            "reason": self.reason,
            "reference": self.reference,
            "notes": self.notes,
            "createdAt": to_utc_z(self.created_at),
            "product": self.product.to_summary() if self.product else None,
            "inventoryItem": self.inventory_item.to_summary() if self.inventory_item else None,
            "user": self.user.to_summary() if self.user else None,
        }
