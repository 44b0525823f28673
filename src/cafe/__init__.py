"""Доменное ядро кафе Birdies: меню, корзина, оформление заказа, бонусы."""

from .cart import Cart
from .controller import CafeApp
from .errors import CafeError, IdentityError, OrderPlacementError, ValidationError
from .router import Screen, resolve_screen
from .session import OrderSession, OrderStage

__all__ = [
    "Cart",
    "CafeApp",
    "CafeError",
    "IdentityError",
    "OrderPlacementError",
    "OrderSession",
    "OrderStage",
    "Screen",
    "ValidationError",
    "resolve_screen",
]
