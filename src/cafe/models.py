"""Модели предметной области кафе."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional


class Category(str, Enum):
    COFFEE = "coffee"
    COLD = "cold"
    FOOD = "food"
    PASTRIES = "pastries"
    FEATURED = "featured"


class Size(str, Enum):
    SMALL = "Small"
    REGULAR = "Regular"
    LARGE = "Large"


# Надбавка к базовой цене позиции за размер
SIZE_DELTAS: dict[Size, Decimal] = {
    Size.SMALL: Decimal("-3"),
    Size.REGULAR: Decimal("0"),
    Size.LARGE: Decimal("3"),
}

MILK_OPTIONS = ["Regular", "Oat", "Almond", "Soy", "Coconut"]
DIET_OPTIONS = ["None", "Vegan", "Vegetarian"]
ALLERGY_OPTIONS = ["Dairy", "Nuts", "Gluten", "Soy", "Eggs"]


class OrderStatus(str, Enum):
    PLACED = "placed"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"


class PaymentMethod(str, Enum):
    CARD = "card"
    APPLE_PAY = "applePay"
    CASH = "cash"


ASAP = "ASAP"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def money(value) -> Decimal:
    """Привести число из JSON/документа к Decimal без артефактов float."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class Identity:
    """Текущий вошедший пользователь по данным провайдера учётных записей."""

    uid: str
    email: str


@dataclass(frozen=True)
class MenuItem:
    """Позиция меню из статического каталога."""

    id: int
    name: str
    category: Category
    price: Decimal
    description: str = ""
    image: str = ""
    tag: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "price": float(self.price),
            "description": self.description,
            "image": self.image,
        }
        if self.tag:
            data["tag"] = self.tag
        return data


@dataclass(frozen=True)
class Location:
    """Точка самовывоза."""

    id: str
    name: str
    address: str
    coordinates: Optional[tuple[float, float]] = None
    distance: Optional[str] = None
    hours: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"id": self.id, "name": self.name, "address": self.address}
        if self.coordinates:
            data["coordinates"] = {"lat": self.coordinates[0], "lng": self.coordinates[1]}
        if self.distance:
            data["distance"] = self.distance
        if self.hours:
            data["hours"] = self.hours
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Location":
        coords = data.get("coordinates")
        return cls(
            id=data["id"],
            name=data["name"],
            address=data.get("address", ""),
            coordinates=(coords["lat"], coords["lng"]) if coords else None,
            distance=data.get("distance"),
            hours=data.get("hours"),
        )


@dataclass(frozen=True)
class Customization:
    """Выбранные параметры позиции. size=None — позиция без размеров."""

    size: Optional[Size] = Size.REGULAR
    milk: str = "Regular"
    instructions: str = ""

    @property
    def size_delta(self) -> Decimal:
        if self.size is None:
            return Decimal("0")
        return SIZE_DELTAS[self.size]


@dataclass
class CartLine:
    """Строка корзины: позиция, параметры и количество."""

    line_id: str
    item: MenuItem
    customization: Customization
    quantity: int = 1

    @property
    def unit_price(self) -> Decimal:
        return self.item.price + self.customization.size_delta

    @property
    def price(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "cartId": self.line_id,
            "id": self.item.id,
            "name": self.item.name,
            "size": self.customization.size.value if self.customization.size else None,
            "milk": self.customization.milk or None,
            "specialInstructions": self.customization.instructions,
            "quantity": self.quantity,
            "price": float(self.unit_price),
            "linePrice": float(self.price),
        }


@dataclass(frozen=True)
class ContactInfo:
    name: str = ""
    phone: str = ""

    def missing_fields(self) -> list[str]:
        return [name for name, value in (("name", self.name), ("phone", self.phone)) if not value.strip()]


@dataclass
class CheckoutDetails:
    """Ответы пользователя на экране оформления."""

    contact: ContactInfo
    pickup_time: str = ASAP
    payment_method: PaymentMethod = PaymentMethod.CARD


@dataclass
class Order:
    """Снимок корзины на момент оформления. После создания меняется только статус."""

    id: str
    order_number: str
    items: list[CartLine]
    location: Location
    pickup_time: str
    contact: ContactInfo
    payment_method: PaymentMethod
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    stars_earned: int
    status: OrderStatus = OrderStatus.PLACED
    created_at: datetime = field(default_factory=utc_now)

    def to_record(self, user_id: str, user_email: str) -> dict:
        """Запись заказа в формате хранилища документов."""
        return {
            "userId": user_id,
            "userEmail": user_email,
            "items": [line.to_dict() for line in self.items],
            "location": self.location.to_dict(),
            "pickupTime": self.pickup_time,
            "contactInfo": {"name": self.contact.name, "phone": self.contact.phone},
            "paymentMethod": self.payment_method.value,
            "total": float(self.total),
            "status": self.status.value,
            "orderNumber": self.order_number,
            "createdAt": self.created_at.isoformat(),
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "orderNumber": self.order_number,
            "items": [line.to_dict() for line in self.items],
            "location": self.location.to_dict(),
            "pickupTime": self.pickup_time,
            "contactInfo": {"name": self.contact.name, "phone": self.contact.phone},
            "paymentMethod": self.payment_method.value,
            "subtotal": float(self.subtotal),
            "tax": float(self.tax),
            "total": float(self.total),
            "starsEarned": self.stars_earned,
            "status": self.status.value,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass
class Preferences:
    milk: str = ""
    diet: str = ""
    allergies: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"milk": self.milk, "diet": self.diet, "allergies": list(self.allergies)}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Preferences":
        data = data or {}
        return cls(
            milk=data.get("milk") or "",
            diet=data.get("diet") or "",
            allergies=list(data.get("allergies") or []),
        )


@dataclass
class UserProfile:
    """Профиль пользователя: предпочтения, избранное, звёзды."""

    uid: str
    email: str
    name: Optional[str] = None
    has_completed_onboarding: bool = False
    preferences: Preferences = field(default_factory=Preferences)
    preferred_location: Optional[Location] = None
    favorites: list[int] = field(default_factory=list)
    stars: int = 0

    @classmethod
    def default(cls, uid: str, email: str) -> "UserProfile":
        return cls(uid=uid, email=email)

    @classmethod
    def from_document(cls, uid: str, email: str, data: dict) -> "UserProfile":
        location = data.get("preferredLocation")
        return cls(
            uid=uid,
            email=data.get("email") or email,
            name=data.get("name"),
            has_completed_onboarding=bool(data.get("hasCompletedOnboarding", False)),
            preferences=Preferences.from_dict(data.get("preferences")),
            preferred_location=Location.from_dict(location) if location else None,
            favorites=[int(item_id) for item_id in data.get("favorites") or []],
            stars=max(0, int(data.get("stars") or 0)),
        )

    def to_document(self) -> dict:
        return {
            "email": self.email,
            "name": self.name,
            "hasCompletedOnboarding": self.has_completed_onboarding,
            "preferences": self.preferences.to_dict(),
            "preferredLocation": self.preferred_location.to_dict() if self.preferred_location else None,
            "favorites": list(self.favorites),
            "stars": self.stars,
        }


def snapshot_lines(lines: list[CartLine]) -> list[CartLine]:
    return [copy.copy(line) for line in lines]
