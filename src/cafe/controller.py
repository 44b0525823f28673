"""Контроллер приложения: вход/выход и текущая сессия заказа."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional, Protocol

from .config import MIN_PASSWORD_LENGTH
from .errors import IdentityError
from .models import Identity, Preferences, utc_now
from .router import Screen, resolve_screen
from .session import OrderSession
from .sync import OrderStore, ProfileStore


logger = logging.getLogger(__name__)

IdentityListener = Callable[[Optional[Identity]], Awaitable[None]]


class IdentityProvider(Protocol):
    async def create_account(self, email: str, password: str) -> Identity: ...

    async def sign_in(self, email: str, password: str) -> Identity: ...

    async def sign_out(self) -> None: ...

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]: ...


class CafeApp:
    """Владелец сессии. При смене пользователя всё локальное состояние заменяется."""

    def __init__(self, identity: IdentityProvider, profile_store: ProfileStore, order_store: OrderStore) -> None:
        self._identity = identity
        self._profile_store = profile_store
        self._order_store = order_store
        self.session: Optional[OrderSession] = None
        self.auth_mode = Screen.LOGIN.value
        self._unsubscribe = identity.subscribe(self._on_identity_changed)

    async def _on_identity_changed(self, identity: Optional[Identity]) -> None:
        if identity is None:
            logger.info("Пользователь вышел")
            self.session = None
            return
        logger.info("Пользователь вошёл: %s", identity.email)
        session = OrderSession(identity.uid, identity.email, self._profile_store, self._order_store)
        await session.start()
        self.session = session

    @property
    def user(self) -> Optional[Identity]:
        if self.session is None:
            return None
        return Identity(self.session.uid, self.session.email)

    async def sign_up(self, email: str, password: str, confirm_password: str, name: str = "") -> OrderSession:
        if password != confirm_password:
            raise IdentityError("password_mismatch")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise IdentityError("weak_password", f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        identity = await self._identity.create_account(email, password)
        profile = self.session.profile
        profile.name = name or None
        document = profile.to_document()
        document["createdAt"] = utc_now().isoformat()
        try:
            await self._profile_store.save_profile(identity.uid, document)
        except Exception:
            logger.exception("Не удалось создать документ профиля %s", identity.uid)
        return self.session

    async def sign_in(self, email: str, password: str) -> OrderSession:
        await self._identity.sign_in(email, password)
        return self.session

    async def sign_out(self) -> None:
        await self._identity.sign_out()

    def require_session(self) -> OrderSession:
        if self.session is None:
            raise IdentityError("not_signed_in")
        return self.session

    def screen(self, requested: Optional[str] = None) -> Screen:
        session = self.session
        if session is None:
            return resolve_screen(False, False, False, requested, self.auth_mode)
        return resolve_screen(
            True,
            session.profile.has_completed_onboarding,
            session.selected_location is not None,
            requested,
        )

    async def complete_onboarding(self, milk: str, diet: str, allergies: list[str]) -> None:
        await self.require_session().complete_onboarding(Preferences(milk, diet, list(allergies)))

    def close(self) -> None:
        self._unsubscribe()
