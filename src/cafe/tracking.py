"""Этапы отслеживания заказа для экрана статуса.

Событий с кухни нет, поэтому этапы статичны: размещён и подтверждён
завершены, готовится — текущий, готов к выдаче — впереди.
"""

from __future__ import annotations

from .models import Order, OrderStatus


STAGES = [
    (OrderStatus.PLACED, "Order Placed"),
    (OrderStatus.CONFIRMED, "Order Confirmed"),
    (OrderStatus.PREPARING, "Preparing"),
    (OrderStatus.READY, "Ready for Pickup"),
]

DISPLAY_STATUS = OrderStatus.PREPARING


def tracking_stages() -> list[dict]:
    active_index = [status for status, _ in STAGES].index(DISPLAY_STATUS)
    return [
        {
            "id": index + 1,
            "status": status.value,
            "label": label,
            "completed": index < active_index,
            "active": index == active_index,
        }
        for index, (status, label) in enumerate(STAGES)
    ]


def tracking_summary(order: Order) -> dict:
    return {
        "orderNumber": order.order_number,
        "location": order.location.name,
        "pickupTime": order.pickup_time,
        "total": float(order.total),
        "stages": tracking_stages(),
        "items": [
            {"name": line.item.name, "quantity": line.quantity, "price": float(line.price)}
            for line in order.items
        ],
    }
