"""Модуль работы с базой данных."""

from . import db
from .auth import LocalIdentityProvider
from .db import SqliteStore

__all__ = ["db", "LocalIdentityProvider", "SqliteStore"]
