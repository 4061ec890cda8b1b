from .users import User
from .catalog import Category, Product
from .orders import Order, OrderItem, ORDER_STATUSES
from .security import SecurityEvent

__all__ = [
    'User',
    'Category', 'Product',
    'Order', 'OrderItem', 'ORDER_STATUSES',
    'SecurityEvent',
]
