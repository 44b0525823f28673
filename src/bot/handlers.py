"""Обработчики команд и сообщений Telegram-бота."""

from __future__ import annotations

import json
import logging
import os

from aiogram import F, Router
from aiogram.filters import Command, CommandStart
from aiogram.types import KeyboardButton, Message, ReplyKeyboardMarkup, WebAppInfo

from cafe import catalog
from cafe.config import CURRENCY, STARS_PER_CURRENCY, STARS_PER_REWARD
from cafe.loyalty import stars_earned
from cafe.models import money


logger = logging.getLogger(__name__)

router = Router()

# URL мини-приложения
WEBAPP_URL = os.getenv("WEBAPP_URL", "https://your-domain.com/webapp")

CATEGORY_TITLES = dict(catalog.CATEGORIES)


def order_keyboard() -> ReplyKeyboardMarkup:
    """Кнопка для открытия мини-приложения."""
    return ReplyKeyboardMarkup(
        keyboard=[
            [KeyboardButton(
                text="☕ Order at Birdies",
                web_app=WebAppInfo(url=WEBAPP_URL)
            )]
        ],
        resize_keyboard=True,
    )


def format_menu() -> str:
    """Текст меню по категориям."""
    parts = []
    for category, items in catalog.items_by_category().items():
        parts.append(f"<b>{CATEGORY_TITLES.get(category.value, category.value)}</b>")
        for item in items:
            parts.append(f"{item.image} {item.name} — {CURRENCY} {item.price}")
        parts.append("")
    parts.append("<b>Featured</b>")
    for item in catalog.FEATURED_ITEMS:
        parts.append(f"{item.image} {item.name} — {CURRENCY} {item.price} [{item.tag}]")
    return "\n".join(parts)


def format_order_created(data: dict) -> str:
    """Подтверждение заказа по данным из мини-приложения."""
    total = money(data.get("total", 0))
    earned = data.get("starsEarned")
    if earned is None:
        earned = stars_earned(total)
    order_number = data.get("orderNumber") or data.get("order_id")
    location = data.get("location") or "—"
    pickup = data.get("pickupTime") or "ASAP"
    return (
        f"✅ Order placed!\n\n"
        f"📋 Order number: {order_number}\n"
        f"📍 Pickup: {location}, {pickup}\n"
        f"💰 Total: {CURRENCY} {total:.2f}\n"
        f"⭐ You earned {earned} stars!"
    )


@router.message(CommandStart())
async def cmd_start(message: Message) -> None:
    """Обработчик команды /start."""
    user = message.from_user
    if not user:
        return

    welcome_text = (
        f"Hi, {user.first_name or 'there'}! 🦜\n\n"
        "Welcome to Birdies. Open the menu below to order ahead "
        "and pick up at DIFC, JBR or Downtown."
    )
    await message.answer(welcome_text, reply_markup=order_keyboard())


@router.message(Command("menu"))
async def cmd_menu(message: Message) -> None:
    """Показать меню и кнопку заказа."""
    await message.answer(format_menu(), reply_markup=order_keyboard())


@router.message(Command("stars"))
async def cmd_stars(message: Message) -> None:
    """Правила бонусной программы."""
    await message.answer(
        f"⭐ Earn 1 star for every {CURRENCY} {STARS_PER_CURRENCY} you spend.\n"
        f"🎁 Every {STARS_PER_REWARD} stars unlock a reward.\n\n"
        "Your balance is shown in the app."
    )


@router.message(F.web_app_data)
async def handle_webapp_data(message: Message) -> None:
    """Обработка данных из мини-приложения."""
    try:
        data = json.loads(message.web_app_data.data)
    except json.JSONDecodeError:
        logger.warning("Некорректные данные мини-приложения: %r", message.web_app_data.data)
        await message.answer("❌ Could not read data from the app.")
        return
    if not isinstance(data, dict):
        logger.warning("Данные мини-приложения не являются объектом: %r", data)
        await message.answer("❌ Could not read data from the app.")
        return

    action = data.get("action")
    if action == "order_created":
        try:
            text = format_order_created(data)
        except ArithmeticError:
            logger.warning("Некорректная сумма заказа: %r", data.get("total"))
            await message.answer("❌ Could not read the order details from the app.")
            return
        await message.answer(text)
    elif action == "error":
        error_msg = data.get("message", "Something went wrong")
        await message.answer(f"❌ Error: {error_msg}")
    else:
        logger.info("Неизвестное действие мини-приложения: %r", action)
