# cart/services/__init__.py

from .cart_service import (
    CartError,
    CartRefreshResult,
    InsufficientStockError,
    ProductUnavailableError,
    add_item,
    clear_cart,
    delete_cart,
    get_cart,
    purge_stale_carts,
    refresh_cart,
    remove_item,
    update_item_quantity,
)

__all__ = [
    "CartError",
    "CartRefreshResult",
    "InsufficientStockError",
    "ProductUnavailableError",
    "add_item",
    "clear_cart",
    "delete_cart",
    "get_cart",
    "purge_stale_carts",
    "refresh_cart",
    "remove_item",
    "update_item_quantity",
]
