#!/usr/bin/env python3
"""Вывести меню кафе с ценами по размерам."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from cafe import catalog  # noqa: E402
from cafe.config import CURRENCY  # noqa: E402
from cafe.models import SIZE_DELTAS  # noqa: E402


def print_items(items: list) -> int:
    """Вывести позиции; для напитков — цены по размерам."""
    count = 0
    for item in items:
        count += 1
        print(f"\n[{item.id}] {item.image} {item.name} ({item.category.value})")
        if item.description:
            print(f"    {item.description}")
        if item.category in catalog.SIZED_CATEGORIES:
            for size, delta in SIZE_DELTAS.items():
                print(f"    - {size.value}: {CURRENCY} {item.price + delta}")
        else:
            print(f"    - Цена: {CURRENCY} {item.price}")
    return count


def main() -> None:
    parser = argparse.ArgumentParser(description="Вывести меню кафе Birdies")
    parser.add_argument(
        "-c",
        "--category",
        default="all",
        choices=[cat_id for cat_id, _ in catalog.CATEGORIES],
        help="Категория меню (по умолчанию: all)",
    )
    parser.add_argument("-q", "--query", default="", help="Подстрока названия")
    parser.add_argument("--featured", action="store_true", help="Показать сезонные позиции")
    parser.add_argument("--locations", action="store_true", help="Показать точки самовывоза")
    args = parser.parse_args()

    if args.locations:
        for location in catalog.LOCATIONS:
            print(f"{location.id} | {location.name} | {location.address}")
        return

    items = catalog.FEATURED_ITEMS if args.featured else catalog.filter_menu(args.category, args.query)
    count = print_items(items)
    if count == 0:
        print("Позиции не найдены.", file=sys.stderr)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
