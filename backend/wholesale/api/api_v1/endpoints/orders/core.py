"""
Order query and response helpers
- base queries with eager loading
- response building
"""

from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from wholesale.models.order import Order
from wholesale.models.retailer_account import RetailerAccount
from wholesale.schemas.order import (
    AccountSummary, OrderSummary, OrderResponse, OrderItemResponse, OrderStatusChangeResponse
)


def build_order_summary(order: Order, item_count: int) -> OrderSummary:
    """List row for an order"""
    return OrderSummary(
        id=order.id,
        order_number=order.order_number,
        status=order.status,
        payment_terms=order.payment_terms,
        subtotal=float(order.subtotal or 0),
        tax_amount=float(order.tax_amount or 0),
        shipping_amount=float(order.shipping_amount or 0),
        total_amount=float(order.total_amount or 0),
        notes=order.notes,
        item_count=item_count,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def build_account_summary(account: RetailerAccount) -> AccountSummary:
    return AccountSummary(
        id=account.id,
        email=account.email,
        business_name=account.business_name,
        contact_person=account.contact_person,
        status=account.status,
        credit_limit=float(account.credit_limit or 0),
    )


def build_order_response(order: Order, account: Optional[RetailerAccount] = None) -> OrderResponse:
    """Order detail with items and status trail; account details only when given"""
    summary = build_order_summary(order, len(order.items))
    return OrderResponse(
        **summary.model_dump(),
        account_id=order.account_id,
        account=build_account_summary(account) if account is not None else None,
        items=[
            OrderItemResponse(
                id=item.id,
                product_id=item.product_id,
                sku=item.sku,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price=float(item.unit_price),
                tier_applied=item.tier_applied,
                subtotal=float(item.subtotal),
            )
            for item in order.items
        ],
        status_changes=[OrderStatusChangeResponse.model_validate(change) for change in order.status_changes],
    )


def base_order_query():
    """Order query with items and status trail loaded"""
    return select(Order).options(
        selectinload(Order.items),
        selectinload(Order.status_changes),
    )


async def load_order(db: AsyncSession, order_id: int) -> Optional[Order]:
    """Load an order with its relations, refreshing anything already in the session"""
    result = await db.execute(
        base_order_query()
        .where(Order.id == order_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()
