"""Pytest fixtures for cafe tests."""

import asyncio
import copy
import tempfile
from decimal import Decimal
from pathlib import Path

import pytest

from cafe.models import Category, MenuItem
from cafe.session import OrderSession
from database import SqliteStore


class MemoryStore:
    """In-memory profile/order store with switchable failures."""

    def __init__(self):
        self.profiles = {}
        self.orders = []
        self.calls = []
        self.fail_load = False
        self.fail_save = False
        self.fail_order = False
        self.order_delay = 0

    async def load_profile(self, uid):
        self.calls.append(("load_profile", uid))
        if self.fail_load:
            raise RuntimeError("load failed")
        profile = self.profiles.get(uid)
        return copy.deepcopy(profile) if profile is not None else None

    async def save_profile(self, uid, updates):
        self.calls.append(("save_profile", uid, copy.deepcopy(updates)))
        if self.fail_save:
            raise RuntimeError("save failed")
        self.profiles.setdefault(uid, {}).update(copy.deepcopy(updates))

    async def create_order(self, record):
        self.calls.append(("create_order", record["orderNumber"]))
        if self.order_delay:
            await asyncio.sleep(self.order_delay)
        if self.fail_order:
            raise RuntimeError("order write failed")
        self.orders.append(record)
        return f"order-{len(self.orders)}"

    async def list_orders(self, uid):
        return [record for record in self.orders if record["userId"] == uid]


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
async def sqlite_store(temp_dir):
    store = SqliteStore(temp_dir / "cafe.db")
    await store.init_db()
    return store


@pytest.fixture
def flat_white():
    return MenuItem(3, "Flat White", Category.COFFEE, Decimal("18"), "Smooth microfoam", "☕")


@pytest.fixture
def croissant():
    return MenuItem(11, "Croissant", Category.PASTRIES, Decimal("12"), "Buttery and flaky", "🥐")


@pytest.fixture
async def session(memory_store):
    """Started session for a user who completed onboarding."""
    memory_store.profiles["u1"] = {
        "email": "ava@example.com",
        "hasCompletedOnboarding": True,
        "preferences": {"milk": "Oat", "diet": "Vegan", "allergies": ["Nuts"]},
        "favorites": [2],
        "stars": 7,
    }
    order_session = OrderSession("u1", "ava@example.com", memory_store, memory_store)
    await order_session.start()
    return order_session
