"""Pricing preview schemas"""
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field

from wholesale.schemas.order import CartLineIn


class PriceCalculateRequest(BaseModel):
    product_id: Optional[int] = Field(None, description="Product id")
    quantity: Optional[int] = Field(None, description="Quantity")


class PricedLine(BaseModel):
    product_id: int
    sku: str
    name: str
    quantity: int
    unit_price: float
    subtotal: float
    tier_applied: Optional[int] = None
    moq: int
    moq_met: bool = True


class CartTotalRequest(BaseModel):
    items: Optional[List[CartLineIn]] = None


class CartTotalResponse(BaseModel):
    items: List[PricedLine]
    errors: List[Dict[str, Any]] = []
    subtotal: float
    tax_amount: float = 0
    shipping_amount: float = 0
    total: float
