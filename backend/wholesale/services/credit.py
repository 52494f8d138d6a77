"""
Credit ledger evaluation

balance          = sum(credit_purchase) - sum(payment)
available credit = credit_limit - balance

The enforcement check uses the raw available credit, which is negative when
an account is already over its limit. Only the display summary floors it at
zero. All reads run inside the caller's session so they see the same
transaction as the writes that follow.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from wholesale.core.money import ZERO, to_money
from wholesale.models.credit_ledger import CreditLedgerEntry
from wholesale.models.retailer_account import RetailerAccount


@dataclass(frozen=True)
class CreditSummary:
    credit_limit: Decimal
    balance: Decimal
    available_credit: Decimal


async def get_balance(db: AsyncSession, account_id: int) -> Decimal:
    """Outstanding balance of an account"""
    signed_amount = case(
        (CreditLedgerEntry.transaction_type == "credit_purchase", CreditLedgerEntry.amount),
        (CreditLedgerEntry.transaction_type == "payment", -CreditLedgerEntry.amount),
        else_=0,
    )
    result = await db.execute(
        select(func.coalesce(func.sum(signed_amount), 0))
        .where(CreditLedgerEntry.account_id == account_id)
    )
    return to_money(result.scalar())


async def get_available_credit(db: AsyncSession, account: RetailerAccount) -> Decimal:
    """credit_limit - balance, not floored"""
    balance = await get_balance(db, account.id)
    return to_money(account.credit_limit) - balance


async def get_credit_summary(db: AsyncSession, account: RetailerAccount) -> CreditSummary:
    """Credit figures for display"""
    balance = await get_balance(db, account.id)
    credit_limit = to_money(account.credit_limit)
    available = credit_limit - balance
    return CreditSummary(
        credit_limit=credit_limit,
        balance=balance,
        available_credit=available if available > ZERO else ZERO,
    )
