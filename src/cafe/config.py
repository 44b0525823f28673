"""Настройки приложения из .env / переменных окружения."""

from __future__ import annotations

import logging
import os
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv


ROOT_DIR = Path(__file__).resolve().parents[2]

load_dotenv(ROOT_DIR / ".env")

CURRENCY = "AED"
TAX_RATE = Decimal("0.05")
# 1 звезда за каждые 10 AED
STARS_PER_CURRENCY = 10
STARS_PER_REWARD = 50
ORDER_NUMBER_PREFIX = "BC"
MIN_PASSWORD_LENGTH = 6

DB_PATH = Path(os.getenv("CAFE_DB_PATH", str(ROOT_DIR / "data" / "cafe.db")))

# local — SQLite, remote — REST-хранилище документов
BACKEND = os.getenv("CAFE_BACKEND", "local")

LOG_LEVEL = os.getenv("CAFE_LOG_LEVEL", "INFO")


def setup_logging(level: str | None = None) -> None:
    """Базовая настройка логирования для точек входа."""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
