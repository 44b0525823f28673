"""Работа с базой данных SQLite."""

from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import Optional

import aiosqlite

from cafe.config import DB_PATH
from cafe.models import utc_now


class SqliteStore:
    """Локальное хранилище профилей, заказов и учётных записей.

    Профиль хранится как JSON-документ, сохранение объединяет поля
    с уже записанными.
    """

    def __init__(self, db_path: Path | str = DB_PATH) -> None:
        self.db_path = Path(db_path)

    async def init_db(self) -> None:
        """Инициализировать базу данных."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        async with aiosqlite.connect(self.db_path) as db:
            # Учётные записи
            await db.execute("""
                CREATE TABLE IF NOT EXISTS accounts (
                    uid TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            # Профили пользователей
            await db.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    uid TEXT PRIMARY KEY,
                    document TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            # Таблица заказов
            await db.execute("""
                CREATE TABLE IF NOT EXISTS orders (
                    order_id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    order_number TEXT NOT NULL,
                    record_json TEXT NOT NULL,
                    total REAL NOT NULL,
                    status TEXT NOT NULL DEFAULT 'placed',
                    created_at TEXT NOT NULL
                )
            """)

            await db.commit()

    async def load_profile(self, uid: str) -> Optional[dict]:
        """Получить документ профиля по uid."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM users WHERE uid = ?", (uid,)
            ) as cursor:
                row = await cursor.fetchone()
                if not row:
                    return None
                document = json.loads(row["document"])
                document["createdAt"] = row["created_at"]
                document["updatedAt"] = row["updated_at"]
                return document

    async def save_profile(self, uid: str, updates: dict) -> None:
        """Создать или дополнить документ профиля."""
        now = utc_now().isoformat()
        updates = {key: value for key, value in updates.items() if key not in ("createdAt", "updatedAt")}
        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute(
                "SELECT document FROM users WHERE uid = ?", (uid,)
            ) as cursor:
                row = await cursor.fetchone()

            if row:
                document = json.loads(row[0])
                document.update(updates)
                await db.execute(
                    "UPDATE users SET document = ?, updated_at = ? WHERE uid = ?",
                    (json.dumps(document, ensure_ascii=False), now, uid),
                )
            else:
                await db.execute(
                    """INSERT INTO users (uid, document, created_at, updated_at)
                       VALUES (?, ?, ?, ?)""",
                    (uid, json.dumps(updates, ensure_ascii=False), now, now),
                )
            await db.commit()

    async def create_order(self, record: dict) -> str:
        """Сохранить заказ, вернуть сгенерированный id."""
        order_id = uuid.uuid4().hex
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """INSERT INTO orders
                   (order_id, user_id, order_number, record_json, total, status, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (
                    order_id,
                    record["userId"],
                    record["orderNumber"],
                    json.dumps(record, ensure_ascii=False),
                    record["total"],
                    record.get("status", "placed"),
                    record.get("createdAt") or utc_now().isoformat(),
                ),
            )
            await db.commit()
        return order_id

    async def list_orders(self, uid: str) -> list[dict]:
        """Заказы пользователя в порядке оформления."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT order_id, record_json FROM orders WHERE user_id = ? ORDER BY created_at, rowid",
                (uid,),
            ) as cursor:
                rows = await cursor.fetchall()
        return [{"id": row["order_id"], **json.loads(row["record_json"])} for row in rows]

    async def get_account(self, email: str) -> Optional[dict]:
        """Учётная запись по email (без учёта регистра)."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM accounts WHERE email = ?", (email.lower(),)
            ) as cursor:
                row = await cursor.fetchone()
                return dict(row) if row else None

    async def create_account(self, email: str, password_hash: str) -> str:
        """Создать учётную запись. sqlite3.IntegrityError, если email занят."""
        uid = uuid.uuid4().hex
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """INSERT INTO accounts (uid, email, password_hash, created_at)
                   VALUES (?, ?, ?, ?)""",
                (uid, email.lower(), password_hash, utc_now().isoformat()),
            )
            await db.commit()
        return uid
