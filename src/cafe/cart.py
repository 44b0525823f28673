"""Корзина: строки заказа и расчёт суммы."""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import List, Optional, Tuple

from .config import TAX_RATE
from .models import CartLine, Customization, MenuItem, snapshot_lines


class Cart:
    """Упорядоченный список строк корзины.

    Инвариант: у каждой строки quantity >= 1. Установка количества <= 0
    удаляет строку, а не считается ошибкой.
    """

    def __init__(self) -> None:
        self._lines: List[CartLine] = []

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def get_line(self, line_id: str) -> Optional[CartLine]:
        return next((line for line in self._lines if line.line_id == line_id), None)

    def add_line(self, item: MenuItem, customization: Optional[Customization] = None, quantity: int = 1) -> CartLine:
        if quantity < 1:
            raise ValueError("quantity must be at least 1")
        line = CartLine(
            line_id=uuid.uuid4().hex,
            item=item,
            customization=customization or Customization(),
            quantity=quantity,
        )
        self._lines.append(line)
        return line

    def remove_line(self, line_id: str) -> bool:
        """Удалить строку. Возвращает False, если строки нет."""
        line = self.get_line(line_id)
        if line is None:
            return False
        self._lines.remove(line)
        return True

    def set_quantity(self, line_id: str, quantity: int) -> bool:
        if quantity <= 0:
            return self.remove_line(line_id)
        line = self.get_line(line_id)
        if line is None:
            return False
        line.quantity = quantity
        return True

    def subtotal(self) -> Decimal:
        return sum((line.price for line in self._lines), Decimal("0"))

    def tax(self) -> Decimal:
        return self.subtotal() * TAX_RATE

    def total(self) -> Decimal:
        return self.subtotal() + self.tax()

    def clear(self) -> None:
        self._lines.clear()

    def snapshot(self) -> List[CartLine]:
        """Копия строк для заказа: последующие правки корзины её не затрагивают."""
        return snapshot_lines(self._lines)

    def __len__(self) -> int:
        return len(self._lines)
