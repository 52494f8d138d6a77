"""Credit ledger schemas"""
from datetime import datetime
from typing import Optional, List, Any
from pydantic import BaseModel, Field


class CreditSummaryResponse(BaseModel):
    credit_limit: float
    credit_balance: float
    available_credit: float  # floored at zero


class LedgerEntryResponse(BaseModel):
    id: int
    order_id: Optional[int] = None
    transaction_type: str
    amount: float
    balance_after: float
    description: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class LedgerListResponse(BaseModel):
    data: List[LedgerEntryResponse]


class PaymentCreate(BaseModel):
    """Record a payment; the amount is range-checked by the ledger service"""
    amount: Any = Field(..., description="Amount paid")
    description: Optional[str] = Field(None, description="Reference / notes")
