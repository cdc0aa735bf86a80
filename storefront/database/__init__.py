# Database modules

from .products import product_db, ProductDatabase, SEED_PRODUCTS
from .carts import cart_db, CartDatabase
from .orders import order_db, OrderDatabase
from .reviews import review_db, ReviewDatabase

__all__ = [
    "product_db",
    "ProductDatabase",
    "SEED_PRODUCTS",
    "cart_db",
    "CartDatabase",
    "order_db",
    "OrderDatabase",
    "review_db",
    "ReviewDatabase",
]
