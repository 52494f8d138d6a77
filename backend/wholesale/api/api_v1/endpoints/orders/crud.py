"""
Order placement and retrieval
- place order
- my orders
- order detail
- quick reorder
"""

from typing import Any, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from wholesale.api.deps import get_current_account, get_coordinator, get_order_reader
from wholesale.core.deps import get_db
from wholesale.core.exceptions import NotFoundError
from wholesale.models.order import Order
from wholesale.models.order_item import OrderItem
from wholesale.models.product import Product
from wholesale.models.retailer_account import RetailerAccount
from wholesale.schemas.order import (
    OrderCreate, OrderCreatedResponse, OrderListResponse, OrderResponse, ReorderItem
)
from wholesale.services.assembler import assemble_order
from wholesale.services.transaction import TransactionCoordinator

from .core import build_order_summary, build_order_response, load_order

router = APIRouter()

@router.post("/", response_model=OrderCreatedResponse, status_code=201)
async def create_order(
    *,
    db: AsyncSession = Depends(get_db),
    account: RetailerAccount = Depends(get_current_account),
    coordinator: TransactionCoordinator = Depends(get_coordinator),
    order_in: OrderCreate) -> Any:
    """Price the cart and commit the order"""
    assembled = await assemble_order(db, order_in.items)
    committed = await coordinator.commit(
        db, account, assembled,
        payment_terms=order_in.payment_terms,
        notes=order_in.notes
    )
    return OrderCreatedResponse(
        order_id=committed.order_id,
        order_number=committed.order_number,
        total_amount=float(committed.total_amount)
    )

@router.get("/my-orders", response_model=OrderListResponse)
async def list_my_orders(
    *,
    db: AsyncSession = Depends(get_db),
    account: RetailerAccount = Depends(get_current_account),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100)) -> Any:
    """Caller's orders, newest first"""
    total_result = await db.execute(
        select(func.count(Order.id)).where(Order.account_id == account.id)
    )
    total = total_result.scalar() or 0

    item_count = func.count(OrderItem.id).label("item_count")
    query = (
        select(Order, item_count)
        .outerjoin(OrderItem, OrderItem.order_id == Order.id)
        .where(Order.account_id == account.id)
        .group_by(Order.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    result = await db.execute(query)

    return OrderListResponse(
        data=[build_order_summary(order, count) for order, count in result.all()],
        total=total,
        page=page,
        limit=limit
    )

@router.get("/reorder/last", response_model=List[ReorderItem])
async def get_reorder_items(
    *,
    db: AsyncSession = Depends(get_db),
    account: RetailerAccount = Depends(get_current_account)) -> Any:
    """Lines of the caller's most recent non-cancelled order"""
    result = await db.execute(
        select(Order.id)
        .where(Order.account_id == account.id, Order.status != "cancelled")
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(1)
    )
    last_order_id = result.scalar_one_or_none()
    if last_order_id is None:
        raise NotFoundError("No previous orders found")

    rows = await db.execute(
        select(OrderItem.product_id, OrderItem.quantity, Product.sku, Product.name, Product.moq, Product.base_price)
        .join(Product, OrderItem.product_id == Product.id)
        .where(OrderItem.order_id == last_order_id)
        .order_by(OrderItem.id)
    )
    return [
        ReorderItem(
            product_id=row.product_id,
            quantity=row.quantity,
            sku=row.sku,
            name=row.name,
            moq=row.moq,
            base_price=float(row.base_price)
        )
        for row in rows
    ]

@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    *,
    db: AsyncSession = Depends(get_db),
    reader: Optional[RetailerAccount] = Depends(get_order_reader),
    order_id: int) -> Any:
    """Order detail for its owner; admins may read any order and also get the account"""
    order = await load_order(db, order_id)
    if not order:
        raise NotFoundError("Order not found", order_id=order_id)
    if reader is None:
        owner = await db.get(RetailerAccount, order.account_id)
        return build_order_response(order, owner)
    if order.account_id != reader.id:
        raise HTTPException(status_code=403, detail="Access denied")
    return build_order_response(order)
