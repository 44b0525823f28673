"""Выбор экрана по состоянию сессии.

Приоритет проверок: вход в аккаунт > онбординг > выбор точки > запрошенный экран.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class Screen(str, Enum):
    LOGIN = "login"
    SIGNUP = "signup"
    ONBOARDING = "onboarding"
    LOCATION = "location"
    HOME = "home"
    MENU = "menu"
    ITEM = "item"
    CART = "cart"
    CHECKOUT = "checkout"
    CONFIRMATION = "confirmation"
    TRACKING = "tracking"
    STARS = "stars"
    EVENTS = "events"
    ACCOUNT = "account"


# Экраны, для которых нужна выбранная точка самовывоза
ORDERING_SCREENS = {Screen.MENU, Screen.ITEM, Screen.CART, Screen.CHECKOUT}

# Вкладка «Заказать» нижней навигации
ORDER_TAB = "order"


def _parse(requested: Optional[str]) -> Screen:
    try:
        return Screen(requested)
    except ValueError:
        return Screen.HOME


def resolve_screen(
    authenticated: bool,
    onboarding_done: bool,
    location_chosen: bool,
    requested: Optional[str] = None,
    auth_mode: str = "login",
) -> Screen:
    if not authenticated:
        return Screen.SIGNUP if auth_mode == Screen.SIGNUP.value else Screen.LOGIN
    if not onboarding_done:
        return Screen.ONBOARDING
    screen = _parse(requested)
    if screen in (Screen.LOGIN, Screen.SIGNUP, Screen.ONBOARDING):
        return Screen.HOME
    if screen in ORDERING_SCREENS and not location_chosen:
        return Screen.LOCATION
    return screen


def navigate(target: str, location_chosen: bool) -> Screen:
    """Переход по вкладке: «Заказать» ведёт в меню или к выбору точки."""
    if target == ORDER_TAB:
        return Screen.MENU if location_chosen else Screen.LOCATION
    return _parse(target)
