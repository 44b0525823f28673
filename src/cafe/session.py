"""Сессия заказа: корзина, выбранная точка, оформление и бонусы."""

from __future__ import annotations

import dataclasses
import logging
import uuid
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from .cart import Cart
from .catalog import get_item, is_sized
from .config import ORDER_NUMBER_PREFIX
from .errors import EmptyCartError, InvalidTransitionError, MissingContactError, OrderPlacementError, ValidationError
from .loyalty import stars_earned
from .models import (
    ASAP,
    CartLine,
    CheckoutDetails,
    Customization,
    Location,
    MenuItem,
    Order,
    OrderStatus,
    Preferences,
    UserProfile,
)
from .sync import OrderStore, ProfileStore, ProfileSync


logger = logging.getLogger(__name__)


class OrderStage(str, Enum):
    BROWSING = "browsing"
    ITEM_CUSTOMIZATION = "item_customization"
    CART_REVIEW = "cart_review"
    CHECKOUT = "checkout"
    PLACING = "placing"
    CONFIRMED = "confirmed"


def generate_order_number() -> str:
    """Номер для показа пользователю, например BC3F9A1C."""
    return f"{ORDER_NUMBER_PREFIX}{uuid.uuid4().hex[:6].upper()}"


class OrderSession:
    """Состояние одного вошедшего пользователя.

    Принадлежит контроллеру приложения и живёт до выхода из аккаунта или
    смены пользователя. Все операции, кроме обращений к хранилищам,
    синхронны.
    """

    def __init__(
        self,
        uid: str,
        email: str,
        profile_store: ProfileStore,
        order_store: OrderStore,
    ) -> None:
        self.uid = uid
        self.email = email
        self._sync = ProfileSync(profile_store)
        self._orders = order_store
        self.profile = UserProfile.default(uid, email)
        self.cart = Cart()
        self.selected_location: Optional[Location] = None
        self.stage = OrderStage.BROWSING
        self.customizing: Optional[MenuItem] = None
        self.checkout_total: Optional[Decimal] = None
        self.current_order: Optional[Order] = None
        self.orders: List[Order] = []
        self.loaded = False
        self.last_sync_ok = True

    async def start(self) -> UserProfile:
        """Загрузить профиль. Экраны, читающие профиль, показываются только после этого."""
        self.profile = await self._sync.load(self.uid, self.email)
        self.loaded = True
        logger.info("Сессия %s начата, звёзд: %d", self.uid, self.profile.stars)
        return self.profile

    async def _save(self, **updates) -> bool:
        self.last_sync_ok = await self._sync.save(self.uid, self.email, updates)
        return self.last_sync_ok

    # Профиль

    async def complete_onboarding(self, preferences: Preferences) -> None:
        self.profile.preferences = preferences
        self.profile.has_completed_onboarding = True
        await self._save(preferences=preferences.to_dict(), hasCompletedOnboarding=True)

    async def select_location(self, location: Location) -> None:
        self.selected_location = location
        if self.profile.preferred_location is None:
            await self.set_preferred_location(location)

    async def set_preferred_location(self, location: Location) -> None:
        self.profile.preferred_location = location
        await self._save(preferredLocation=location.to_dict())

    async def toggle_favorite(self, item_id: int) -> bool:
        """Добавить или убрать позицию из избранного. Возвращает новое состояние."""
        get_item(item_id)
        favorites = self.profile.favorites
        if item_id in favorites:
            favorites.remove(item_id)
            is_favorite = False
        else:
            favorites.append(item_id)
            is_favorite = True
        await self._save(favorites=list(favorites))
        return is_favorite

    # Корзина

    def _require(self, action: str, *stages: OrderStage) -> None:
        if self.stage not in stages:
            raise InvalidTransitionError(self.stage.value, action)

    def begin_customization(self, item_id: int) -> MenuItem:
        self._require("customize", OrderStage.BROWSING, OrderStage.ITEM_CUSTOMIZATION)
        self.customizing = get_item(item_id)
        self.stage = OrderStage.ITEM_CUSTOMIZATION
        return self.customizing

    def default_customization(self, item: Optional[MenuItem] = None) -> Customization:
        """Параметры по умолчанию: обычный размер и молоко из предпочтений.

        У еды и выпечки нет ни размера, ни молока.
        """
        item = item or self.customizing
        if item is not None and not is_sized(item):
            return Customization(size=None, milk="")
        return Customization(milk=self.profile.preferences.milk or "Regular")

    def cancel_customization(self) -> None:
        self.customizing = None
        if self.stage == OrderStage.ITEM_CUSTOMIZATION:
            self.stage = OrderStage.BROWSING

    def confirm_customization(self, customization: Optional[Customization] = None, quantity: int = 1) -> CartLine:
        self._require("add_to_cart", OrderStage.ITEM_CUSTOMIZATION)
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")
        item = self.customizing
        customization = customization or self.default_customization(item)
        if not is_sized(item):
            customization = dataclasses.replace(customization, size=None, milk="")
        line = self.cart.add_line(item, customization, quantity)
        self.customizing = None
        self.stage = OrderStage.BROWSING
        return line

    def add_to_cart(self, item_id: int, customization: Optional[Customization] = None, quantity: int = 1) -> CartLine:
        self.close_cart()
        self.begin_customization(item_id)
        return self.confirm_customization(customization, quantity)

    def _forbid_while_placing(self, action: str) -> None:
        if self.stage == OrderStage.PLACING:
            raise InvalidTransitionError(self.stage.value, action)

    def remove_from_cart(self, line_id: str) -> bool:
        self._forbid_while_placing("remove_from_cart")
        return self.cart.remove_line(line_id)

    def update_quantity(self, line_id: str, quantity: int) -> bool:
        self._forbid_while_placing("update_quantity")
        return self.cart.set_quantity(line_id, quantity)

    def review_cart(self) -> None:
        self._require("review_cart", OrderStage.BROWSING, OrderStage.CART_REVIEW, OrderStage.CHECKOUT)
        self.stage = OrderStage.CART_REVIEW

    def close_cart(self) -> None:
        if self.stage in (OrderStage.CART_REVIEW, OrderStage.CHECKOUT):
            self.stage = OrderStage.BROWSING

    def begin_checkout(self) -> Decimal:
        """Перейти к оформлению. Возвращает итоговую сумму корзины."""
        self._require("checkout", OrderStage.CART_REVIEW, OrderStage.CHECKOUT)
        if self.cart.is_empty:
            raise EmptyCartError()
        if self.selected_location is None:
            raise ValidationError("Please select a pickup location")
        self.checkout_total = self.cart.total()
        self.stage = OrderStage.CHECKOUT
        return self.checkout_total

    # Оформление

    def _validate(self, details: CheckoutDetails) -> None:
        if self.cart.is_empty:
            raise EmptyCartError()
        if self.selected_location is None:
            raise ValidationError("Please select a pickup location")
        missing = details.contact.missing_fields()
        if missing:
            raise MissingContactError(missing)
        if details.pickup_time != ASAP and not details.pickup_time.strip():
            raise ValidationError("Please choose a pickup time")

    async def place_order(self, details: CheckoutDetails) -> Order:
        """Оформить заказ из текущей корзины.

        Запись заказа выполняется до любых локальных изменений: при ошибке
        хранилища корзина, звёзды и история остаются прежними. Сохранение
        профиля после этого — best-effort.
        """
        if self.cart.is_empty:
            raise EmptyCartError()
        self._require("place_order", OrderStage.CHECKOUT)
        self._validate(details)
        # Повторный вызов во время записи заказа упрётся в проверку стадии
        self.stage = OrderStage.PLACING

        lines = self.cart.snapshot()
        subtotal = self.cart.subtotal()
        tax = self.cart.tax()
        total = subtotal + tax
        order = Order(
            id="",
            order_number=generate_order_number(),
            items=lines,
            location=self.selected_location,
            pickup_time=details.pickup_time,
            contact=details.contact,
            payment_method=details.payment_method,
            subtotal=subtotal,
            tax=tax,
            total=total,
            stars_earned=stars_earned(total),
            status=OrderStatus.PLACED,
        )

        try:
            order.id = await self._orders.create_order(order.to_record(self.uid, self.email))
        except Exception as exc:
            self.stage = OrderStage.CHECKOUT
            logger.exception("Не удалось оформить заказ %s", order.order_number)
            raise OrderPlacementError("Failed to place order. Please try again.") from exc

        order.status = OrderStatus.CONFIRMED
        self.profile.stars += order.stars_earned
        self.orders.append(order)
        self.current_order = order
        self.cart.clear()
        self.checkout_total = None
        self.stage = OrderStage.CONFIRMED

        updates = {"stars": self.profile.stars}
        if self.profile.preferred_location is None:
            self.profile.preferred_location = order.location
            updates["preferredLocation"] = order.location.to_dict()
        await self._save(**updates)

        logger.info(
            "Заказ %s оформлен: %s %s, +%d звёзд",
            order.order_number,
            order.total,
            order.location.id,
            order.stars_earned,
        )
        return order

    def acknowledge_order(self) -> None:
        self._require("acknowledge", OrderStage.CONFIRMED)
        self.stage = OrderStage.BROWSING

    async def order_history(self) -> list[dict]:
        """Записи заказов пользователя из хранилища; при ошибке — заказы этой сессии."""
        try:
            return await self._orders.list_orders(self.uid)
        except Exception:
            logger.exception("Не удалось получить историю заказов %s", self.uid)
            return [order.to_dict() for order in self.orders]
