"""Синхронизация профиля с хранилищем документов.

Синхронизация «по мере возможности»: ошибка чтения даёт профиль по
умолчанию, ошибка записи логируется, а локальное состояние сессии
остаётся источником истины.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from .models import UserProfile


logger = logging.getLogger(__name__)


class ProfileStore(Protocol):
    async def load_profile(self, uid: str) -> Optional[dict]:
        """Документ профиля или None, если его нет."""

    async def save_profile(self, uid: str, updates: dict) -> None:
        """Upsert с объединением: поля вне updates не меняются."""


class OrderStore(Protocol):
    async def create_order(self, record: dict) -> str:
        """Сохранить запись заказа, вернуть её id."""

    async def list_orders(self, uid: str) -> list[dict]:
        """Записи заказов пользователя, от старых к новым."""


class ProfileSync:
    """Обёртка над ProfileStore, которая никогда не роняет сессию."""

    def __init__(self, store: ProfileStore) -> None:
        self._store = store

    async def load(self, uid: str, email: str) -> UserProfile:
        try:
            data = await self._store.load_profile(uid)
        except Exception:
            logger.exception("Не удалось загрузить профиль %s, используем значения по умолчанию", uid)
            return UserProfile.default(uid, email)
        if data is None:
            logger.info("Профиль %s не найден, используем значения по умолчанию", uid)
            return UserProfile.default(uid, email)
        return UserProfile.from_document(uid, email, data)

    async def save(self, uid: str, email: str, updates: dict) -> bool:
        """Сохранить изменённые поля. Возвращает False при ошибке записи."""
        try:
            await self._store.save_profile(uid, {"email": email, **updates})
        except Exception:
            logger.exception("Не удалось сохранить профиль %s: %s", uid, sorted(updates))
            return False
        logger.debug("Профиль %s сохранён: %s", uid, sorted(updates))
        return True
