"""Credit API - balance, ledger history and payments"""

from typing import Any
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from wholesale.api.deps import get_current_account, require_admin
from wholesale.core.deps import get_db
from wholesale.core.exceptions import NotFoundError
from wholesale.models.retailer_account import RetailerAccount
from wholesale.schemas.credit import (
    CreditSummaryResponse, LedgerEntryResponse, LedgerListResponse, PaymentCreate
)
from wholesale.services.account_locks import AccountLockRegistry, get_account_locks
from wholesale.services.credit import get_credit_summary
from wholesale.services.ledger import list_ledger_entries, record_payment

router = APIRouter()

@router.get("/summary", response_model=CreditSummaryResponse)
async def read_credit_summary(
    *,
    db: AsyncSession = Depends(get_db),
    account: RetailerAccount = Depends(get_current_account)) -> Any:
    """Credit limit, outstanding balance and available credit"""
    summary = await get_credit_summary(db, account)
    return CreditSummaryResponse(
        credit_limit=float(summary.credit_limit),
        credit_balance=float(summary.balance),
        available_credit=float(summary.available_credit)
    )

@router.get("/ledger", response_model=LedgerListResponse)
async def read_ledger(
    *,
    db: AsyncSession = Depends(get_db),
    account: RetailerAccount = Depends(get_current_account),
    limit: int = Query(50, ge=1, le=200)) -> Any:
    """Ledger entries, newest first"""
    entries = await list_ledger_entries(db, account.id, limit=limit)
    return LedgerListResponse(data=[LedgerEntryResponse.model_validate(entry) for entry in entries])

@router.post(
    "/accounts/{account_id}/payments",
    response_model=LedgerEntryResponse,
    status_code=201,
    dependencies=[Depends(require_admin)]
)
async def create_payment(
    *,
    db: AsyncSession = Depends(get_db),
    locks: AccountLockRegistry = Depends(get_account_locks),
    account_id: int,
    payment_in: PaymentCreate) -> Any:
    """Record a payment received from an account (admin)"""
    account = await db.get(RetailerAccount, account_id)
    if not account:
        raise NotFoundError("Account not found", account_id=account_id)
    entry = await record_payment(db, locks, account, payment_in.amount, payment_in.description)
    return LedgerEntryResponse.model_validate(entry)
