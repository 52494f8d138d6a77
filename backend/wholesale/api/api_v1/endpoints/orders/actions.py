"""
Administrative order actions
- all orders, with the buyer
- status change along the order lifecycle
"""

from typing import Any, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import and_, select, func
from sqlalchemy.ext.asyncio import AsyncSession

from wholesale.api.deps import require_admin
from wholesale.core.deps import get_db
from wholesale.core.exceptions import NotFoundError, ValidationError
from wholesale.models.order import Order, ORDER_STATUSES
from wholesale.models.order_item import OrderItem
from wholesale.models.retailer_account import RetailerAccount
from wholesale.schemas.order import (
    AdminOrderListResponse, AdminOrderSummary, OrderResponse, OrderStatusUpdate
)
from wholesale.services.order_status import change_order_status

from .core import build_order_response, build_order_summary, load_order

router = APIRouter()

@router.get("/", response_model=AdminOrderListResponse, dependencies=[Depends(require_admin)])
async def list_all_orders(
    *,
    db: AsyncSession = Depends(get_db),
    status: Optional[str] = Query(None, description="Only orders in this status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100)) -> Any:
    """Every account's orders, newest first (admin)"""
    if status is not None and status not in ORDER_STATUSES:
        raise ValidationError("Invalid status", status=status)

    count_query = select(func.count(Order.id))
    item_count = func.count(OrderItem.id).label("item_count")
    query = (
        select(Order, RetailerAccount.business_name, RetailerAccount.email, item_count)
        .join(RetailerAccount, Order.account_id == RetailerAccount.id)
        .outerjoin(OrderItem, OrderItem.order_id == Order.id)
    )

    conditions = []
    if status:
        conditions.append(Order.status == status)
    if conditions:
        count_query = count_query.where(and_(*conditions))
        query = query.where(and_(*conditions))

    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    query = (
        query
        .group_by(Order.id, RetailerAccount.business_name, RetailerAccount.email)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    result = await db.execute(query)

    return AdminOrderListResponse(
        data=[
            AdminOrderSummary(
                **build_order_summary(order, count).model_dump(),
                account_id=order.account_id,
                business_name=business_name,
                email=email,
            )
            for order, business_name, email, count in result.all()
        ],
        total=total,
        page=page,
        limit=limit
    )

@router.patch("/{order_id}/status", response_model=OrderResponse, dependencies=[Depends(require_admin)])
async def update_order_status(
    *,
    db: AsyncSession = Depends(get_db),
    order_id: int,
    status_in: OrderStatusUpdate) -> Any:
    """Change an order's status (admin)"""
    order = await load_order(db, order_id)
    if not order:
        raise NotFoundError("Order not found", order_id=order_id)

    await change_order_status(db, order, status_in.status, status_in.notes)

    order = await load_order(db, order_id)
    return build_order_response(order)
