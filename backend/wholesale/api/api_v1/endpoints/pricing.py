"""Pricing preview API - prices carts without placing orders"""

from typing import Any
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from wholesale.api.deps import get_current_account
from wholesale.core.deps import get_db
from wholesale.schemas.pricing import (
    PriceCalculateRequest, PricedLine, CartTotalRequest, CartTotalResponse
)
from wholesale.services.assembler import OrderItemDraft, preview_cart, quote_line

router = APIRouter(dependencies=[Depends(get_current_account)])

def build_priced_line(draft: OrderItemDraft) -> PricedLine:
    return PricedLine(
        product_id=draft.product_id,
        sku=draft.sku,
        name=draft.product_name,
        quantity=draft.quantity,
        unit_price=float(draft.unit_price),
        subtotal=float(draft.subtotal),
        tier_applied=draft.tier_applied,
        moq=draft.moq,
        moq_met=draft.quantity >= draft.moq
    )

@router.post("/calculate", response_model=PricedLine)
async def calculate_price(
    *,
    db: AsyncSession = Depends(get_db),
    request_in: PriceCalculateRequest) -> Any:
    """Unit price and subtotal for one product at a quantity"""
    draft = await quote_line(db, request_in.product_id, request_in.quantity)
    return build_priced_line(draft)

@router.post("/cart-total", response_model=CartTotalResponse)
async def calculate_cart_total(
    *,
    db: AsyncSession = Depends(get_db),
    cart_in: CartTotalRequest) -> Any:
    """Cart preview; lines with errors are reported and left out of the total"""
    preview = await preview_cart(db, cart_in.items)
    response = CartTotalResponse(
        items=[build_priced_line(draft) for draft in preview.items],
        errors=preview.errors,
        subtotal=float(preview.subtotal),
        tax_amount=float(preview.tax_amount),
        shipping_amount=float(preview.shipping_amount),
        total=float(preview.total_amount)
    )
    if preview.errors:
        return JSONResponse(
            status_code=400,
            content={"message": "Some items have errors", **response.model_dump()}
        )
    return response
