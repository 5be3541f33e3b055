from .catalog import Category, Product
from .parties import Customer, Seller
from .orders import Order, OrderItem
from .fulfillment import Payment, Shipping
from .inventory import InventoryRecord

__all__ = [
    'Category', 'Product',
    'Customer', 'Seller',
    'Order', 'OrderItem',
    'Payment', 'Shipping',
    'InventoryRecord',
]
