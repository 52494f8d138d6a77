"""Order schemas"""
from typing import Optional, List
from pydantic import BaseModel, Field
from datetime import datetime


# ===== Cart =====
class CartLineIn(BaseModel):
    """Cart line - presence and range are checked by the assembler"""
    product_id: Optional[int] = Field(None, description="Product id")
    quantity: Optional[int] = Field(None, description="Quantity")


class OrderCreate(BaseModel):
    """Place an order"""
    items: Optional[List[CartLineIn]] = Field(None, description="Cart lines")
    payment_terms: str = Field("pay_now", description="pay_now / credit_net_30 / credit_net_60")
    notes: Optional[str] = Field(None, description="Notes")


class OrderCreatedResponse(BaseModel):
    message: str = "Order created successfully"
    order_id: int
    order_number: str
    total_amount: float


# ===== Items =====
class OrderItemResponse(BaseModel):
    id: int
    product_id: int
    sku: str
    product_name: str
    quantity: int
    unit_price: float
    tier_applied: Optional[int] = None
    subtotal: float

    class Config:
        from_attributes = True


class OrderStatusChangeResponse(BaseModel):
    from_status: Optional[str] = None
    to_status: str
    notes: Optional[str] = None
    changed_at: datetime

    class Config:
        from_attributes = True


# ===== Accounts =====
class AccountSummary(BaseModel):
    """Owning account, shown to admins"""
    id: int
    email: str
    business_name: str
    contact_person: Optional[str] = None
    status: str
    credit_limit: float

    class Config:
        from_attributes = True


# ===== Orders =====
class OrderSummary(BaseModel):
    """Order list row"""
    id: int
    order_number: str
    status: str
    payment_terms: str
    subtotal: float
    tax_amount: float
    shipping_amount: float
    total_amount: float
    notes: Optional[str] = None
    item_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None


class OrderResponse(OrderSummary):
    """Order detail"""
    account_id: int
    items: List[OrderItemResponse] = []
    status_changes: List[OrderStatusChangeResponse] = []
    account: Optional[AccountSummary] = None  # admin only


class OrderListResponse(BaseModel):
    data: List[OrderSummary]
    total: int
    page: int
    limit: int


class AdminOrderSummary(OrderSummary):
    """Order list row with the buyer"""
    account_id: int
    business_name: str
    email: str


class AdminOrderListResponse(BaseModel):
    data: List[AdminOrderSummary]
    total: int
    page: int
    limit: int


class OrderStatusUpdate(BaseModel):
    """Administrative status change"""
    status: str = Field(..., description="New status")
    notes: Optional[str] = Field(None, description="Notes")


class ReorderItem(BaseModel):
    """Line of the last order, with current catalog data"""
    product_id: int
    quantity: int
    sku: str
    name: str
    moq: int
    base_price: float
