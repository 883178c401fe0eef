from .auth import User, ROLE_USER, ROLE_MANAGER, ROLE_ADMIN, VALID_ROLES
from .catalog import Category, Supplier, Product
from .inventory import InventoryItem, StockMovement, MOVEMENT_TYPES

__all__ = [
    'User', 'ROLE_USER', 'ROLE_MANAGER', 'ROLE_ADMIN', 'VALID_ROLES',
    'Category', 'Supplier', 'Product',
    'InventoryItem', 'StockMovement', 'MOVEMENT_TYPES',
]
