"""Статический каталог: точки, меню, сезонные позиции, события."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, List

from .errors import NotFoundError
from .models import Category, Location, MenuItem


LOCATIONS: List[Location] = [
    Location("difc", "DIFC", "Gate Village 5, DIFC", coordinates=(25.2138, 55.2794)),
    Location("jbr", "JBR", "The Beach, JBR", coordinates=(25.0772, 55.1358)),
    Location("downtown", "Downtown", "Boulevard Plaza, Downtown", coordinates=(25.1972, 55.2744)),
]


def _item(item_id: int, name: str, category: Category, price: int, description: str, image: str, tag=None) -> MenuItem:
    return MenuItem(item_id, name, category, Decimal(price), description, image, tag)


MENU_ITEMS: List[MenuItem] = [
    # Кофе
    _item(1, "Espresso", Category.COFFEE, 12, "Rich, bold espresso", "☕"),
    _item(2, "Cappuccino", Category.COFFEE, 18, "Classic Italian coffee", "☕"),
    _item(3, "Flat White", Category.COFFEE, 20, "Smooth microfoam", "☕"),
    _item(4, "Latte", Category.COFFEE, 20, "Creamy and smooth", "☕"),
    # Холодные напитки
    _item(5, "Iced Latte", Category.COLD, 22, "Refreshing iced coffee", "🥤"),
    _item(6, "Cold Brew", Category.COLD, 24, "Smooth cold brew", "🥤"),
    _item(7, "Matcha Latte", Category.COLD, 26, "Japanese green tea", "🍵"),
    # Еда
    _item(8, "Avocado Toast", Category.FOOD, 35, "Fresh avocado on sourdough", "🥑"),
    _item(9, "Shakshuka", Category.FOOD, 42, "Middle Eastern eggs", "🍳"),
    _item(10, "Granola Bowl", Category.FOOD, 38, "Yogurt and fresh fruit", "🥣"),
    # Выпечка
    _item(11, "Croissant", Category.PASTRIES, 15, "Buttery and flaky", "🥐"),
    _item(12, "Pain au Chocolat", Category.PASTRIES, 18, "Chocolate croissant", "🥐"),
    _item(13, "Cinnamon Roll", Category.PASTRIES, 20, "Sweet and sticky", "🥨"),
]

FEATURED_ITEMS: List[MenuItem] = [
    _item(101, "Pistachio Latte", Category.FEATURED, 28, "Limited edition", "🥤", tag="NEW"),
    _item(102, "Cardamom Coffee", Category.FEATURED, 25, "Arabic inspired", "☕", tag="SEASONAL"),
    _item(103, "Rose Matcha", Category.FEATURED, 30, "Floral & earthy", "🍵", tag="NEW"),
]

# Вкладки фильтра меню: (id, подпись)
CATEGORIES = [
    ("all", "All"),
    (Category.COFFEE.value, "Coffee"),
    (Category.COLD.value, "Cold Drinks"),
    (Category.FOOD.value, "Food"),
    (Category.PASTRIES.value, "Pastries"),
]

EVENTS = [
    {
        "id": 1,
        "title": "Sunday Set",
        "description": "Live DJ every Sunday 2-6 PM",
        "image": "🎵",
        "date": "Every Sunday",
    },
    {
        "id": 2,
        "title": "Coffee Cupping",
        "description": "Learn about specialty coffee",
        "image": "☕",
        "date": "First Saturday of Month",
    },
]

# Категории, для которых на экране позиции предлагается выбор размера
SIZED_CATEGORIES = {Category.COFFEE, Category.COLD, Category.FEATURED}

_ITEMS_BY_ID = {item.id: item for item in [*MENU_ITEMS, *FEATURED_ITEMS]}
_LOCATIONS_BY_ID = {location.id: location for location in LOCATIONS}


def get_item(item_id: int) -> MenuItem:
    try:
        return _ITEMS_BY_ID[item_id]
    except KeyError:
        raise NotFoundError(f"Menu item {item_id} not found") from None


def get_location(location_id: str) -> Location:
    try:
        return _LOCATIONS_BY_ID[location_id]
    except KeyError:
        raise NotFoundError(f"Location {location_id!r} not found") from None


def filter_menu(category: str = "all", query: str = "") -> List[MenuItem]:
    """Позиции меню по вкладке категории и подстроке названия (без учёта регистра)."""
    needle = query.strip().lower()
    return [
        item
        for item in MENU_ITEMS
        if (category == "all" or item.category.value == category) and needle in item.name.lower()
    ]


def favorite_items(favorites: Iterable[int]) -> List[MenuItem]:
    """Избранные позиции в порядке меню; неизвестные id пропускаются."""
    wanted = set(favorites)
    return [item for item in [*MENU_ITEMS, *FEATURED_ITEMS] if item.id in wanted]


def items_by_category() -> dict[Category, List[MenuItem]]:
    grouped: dict[Category, List[MenuItem]] = {}
    for item in MENU_ITEMS:
        grouped.setdefault(item.category, []).append(item)
    return grouped


def is_sized(item: MenuItem) -> bool:
    """Предлагается ли для позиции выбор размера и молока."""
    return item.category in SIZED_CATEGORIES
