"""Локальный провайдер учётных записей поверх SQLite."""

from __future__ import annotations

import logging
import re
import sqlite3
from typing import Callable, List, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from cafe.config import MIN_PASSWORD_LENGTH
from cafe.controller import IdentityListener
from cafe.errors import IdentityError
from cafe.models import Identity

from .db import SqliteStore


logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class LocalIdentityProvider:
    """Регистрация, вход и выход с оповещением подписчиков о смене пользователя.

    Один экземпляр соответствует одному клиенту приложения.
    """

    def __init__(self, store: SqliteStore) -> None:
        self._store = store
        self._listeners: List[IdentityListener] = []
        self.current: Optional[Identity] = None

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _notify(self) -> None:
        for listener in list(self._listeners):
            await listener(self.current)

    async def create_account(self, email: str, password: str) -> Identity:
        email = email.strip()
        if not EMAIL_RE.match(email):
            raise IdentityError("invalid_email")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise IdentityError("weak_password")

        try:
            uid = await self._store.create_account(email, generate_password_hash(password))
        except sqlite3.IntegrityError:
            raise IdentityError("email_in_use") from None

        logger.info("Создана учётная запись %s", email)
        self.current = Identity(uid, email.lower())
        await self._notify()
        return self.current

    async def sign_in(self, email: str, password: str) -> Identity:
        email = email.strip()
        if not EMAIL_RE.match(email):
            raise IdentityError("invalid_email")
        account = await self._store.get_account(email)
        if account is None:
            raise IdentityError("not_found")
        if not check_password_hash(account["password_hash"], password):
            raise IdentityError("wrong_password")

        self.current = Identity(account["uid"], account["email"])
        await self._notify()
        return self.current

    async def sign_out(self) -> None:
        self.current = None
        await self._notify()
