"""
Order status transitions

    pending -> approved -> processing -> shipped -> delivered
    cancelled is reachable from every non-terminal status

delivered and cancelled are terminal. Each change is recorded as an
OrderStatusChange row in the same transaction as the status update.
"""

from typing import Dict, FrozenSet, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wholesale.core.exceptions import PersistenceError, PolicyViolation, ValidationError
from wholesale.core.logging_config import get_logger
from wholesale.models.order import Order, OrderStatusChange, ORDER_STATUSES

logger = get_logger(__name__)

ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "pending": frozenset({"approved", "cancelled"}),
    "approved": frozenset({"processing", "cancelled"}),
    "processing": frozenset({"shipped", "cancelled"}),
    "shipped": frozenset({"delivered", "cancelled"}),
    "delivered": frozenset(),
    "cancelled": frozenset(),
}


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


async def change_order_status(
    db: AsyncSession,
    order: Order,
    new_status: str,
    notes: Optional[str] = None) -> Order:
    """Move an order to new_status if the transition is allowed"""
    if new_status not in ORDER_STATUSES:
        raise ValidationError("Invalid status", status=new_status)

    order_id = order.id
    current = order.status
    if not can_transition(current, new_status):
        raise PolicyViolation(
            "invalid_transition",
            f"Cannot change order status from {current} to {new_status}",
            order_id=order_id,
            from_status=current,
            to_status=new_status,
        )

    try:
        order.status = new_status
        db.add(OrderStatusChange(order_id=order_id, from_status=current, to_status=new_status, notes=notes))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Status change of order {order_id} rolled back: {e}")
        raise PersistenceError("Order status could not be saved", order_id=order_id) from e

    logger.info(f"Order {order.order_number}: {current} -> {new_status}")
    return order
