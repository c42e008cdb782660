# ------ marketplace/model/__init__.py ------

from .business import Business
from .product import Product
from .ad import Ad, AdProduct
from .order import Order
from .user import User
from .promotional import PromotionalCode

__all__ = [
    "Business",
    "Product",
    "Ad",
    "AdProduct",
    "Order",
    "User",
    "PromotionalCode",
]
