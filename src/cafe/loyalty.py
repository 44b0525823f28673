"""Бонусная программа: начисление звёзд и прогресс до награды."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal

from .config import STARS_PER_CURRENCY, STARS_PER_REWARD


def stars_earned(total: Decimal) -> int:
    """1 звезда за каждые полные 10 единиц валюты."""
    if total <= 0:
        return 0
    return math.floor(Decimal(total) / STARS_PER_CURRENCY)


@dataclass(frozen=True)
class RewardProgress:
    stars: int
    toward_next: int
    remaining: int
    percent: int


def reward_progress(stars: int) -> RewardProgress:
    toward = stars % STARS_PER_REWARD
    return RewardProgress(
        stars=stars,
        toward_next=toward,
        remaining=STARS_PER_REWARD - toward,
        percent=toward * 100 // STARS_PER_REWARD,
    )
