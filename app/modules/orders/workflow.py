"""Order status state machine."""
from enum import Enum
from typing import Optional

from app.core.errors import ValidationError
from app.modules.orders.schemas import OrderStatus

FULFILMENT_SEQUENCE = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
)
TERMINAL_STATES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


class Actor(str, Enum):
    PURCHASER = "purchaser"
    SUPPLIER = "supplier"


def next_status(current: OrderStatus) -> Optional[OrderStatus]:
    """Next step on the fulfilment path, or None from a terminal state"""
    current = OrderStatus(current)
    if current in TERMINAL_STATES:
        return None
    index = FULFILMENT_SEQUENCE.index(current)
    return FULFILMENT_SEQUENCE[index + 1]


def can_cancel(current: OrderStatus) -> bool:
    return OrderStatus(current) == OrderStatus.PENDING


def validate_transition(actor: Actor, current: OrderStatus, target: OrderStatus) -> None:
    """Raise ValidationError unless `actor` may move an order from `current` to `target`.

    The supplier advances one step at a time; the purchaser may only cancel,
    and only while the order is pending.
    """
    current = OrderStatus(current)
    target = OrderStatus(target)
    if current in TERMINAL_STATES:
        raise ValidationError(f"Order is already {current.value}")
    if Actor(actor) == Actor.SUPPLIER:
        expected = next_status(current)
        if target != expected:
            raise ValidationError(
                f"Supplier can only move a {current.value} order to {expected.value}, not {target.value}"
            )
        return
    if target != OrderStatus.CANCELLED:
        raise ValidationError("Purchasers can only cancel orders")
    if not can_cancel(current):
        raise ValidationError(f"Order can no longer be cancelled (status is {current.value})")
