"""Исключения доменного ядра кафе."""

from __future__ import annotations

from typing import Optional


class CafeError(Exception):
    """Базовое исключение приложения."""

    status_code: int = 400

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class ValidationError(CafeError):
    """Некорректные данные от пользователя, переход заблокирован локально."""


class EmptyCartError(ValidationError):
    """Оформление заказа с пустой корзиной."""

    def __init__(self) -> None:
        super().__init__("Your cart is empty")


class MissingContactError(ValidationError):
    """Не заполнены обязательные контактные поля."""

    def __init__(self, fields: list[str]) -> None:
        self.fields = fields
        super().__init__(f"Please fill in: {', '.join(fields)}")


class NotFoundError(CafeError):
    status_code = 404


class InvalidTransitionError(CafeError):
    """Переход между экранами заказа недопустим из текущего состояния."""

    status_code = 409

    def __init__(self, current: str, action: str) -> None:
        self.current = current
        self.action = action
        super().__init__(f"Cannot {action} while in {current}")


IDENTITY_MESSAGES = {
    "email_in_use": "An account with this email already exists",
    "invalid_email": "Invalid email address",
    "weak_password": "Password is too weak",
    "not_found": "No account found with this email",
    "wrong_password": "Incorrect password",
    "password_mismatch": "Passwords do not match",
    "not_signed_in": "Please sign in first",
}


class IdentityError(CafeError):
    """Ошибка провайдера учётных записей с понятным пользователю текстом."""

    status_code = 401

    def __init__(self, code: str, message: Optional[str] = None) -> None:
        self.code = code
        super().__init__(message or IDENTITY_MESSAGES.get(code, "Authentication failed. Please try again."))


class OrderPlacementError(CafeError):
    """Не удалось записать заказ в хранилище."""

    status_code = 502
