"""Ledger writes outside of order commits - payments received"""

from decimal import Decimal, InvalidOperation
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wholesale.core.exceptions import PersistenceError, PolicyViolation, WholesaleError
from wholesale.core.logging_config import get_logger
from wholesale.core.money import ZERO, to_money
from wholesale.models.credit_ledger import CreditLedgerEntry
from wholesale.models.retailer_account import RetailerAccount
from wholesale.services.account_locks import AccountLockRegistry
from wholesale.services.credit import get_balance
from wholesale.services.transaction import lock_account_row

logger = get_logger(__name__)


async def record_payment(
    db: AsyncSession,
    locks: AccountLockRegistry,
    account: RetailerAccount,
    amount,
    description: Optional[str] = None) -> CreditLedgerEntry:
    """
    Append a payment entry; balance_after = balance - amount

    Runs under the same per-account lock as credit order commits so the
    running balance snapshot stays consistent.
    """
    try:
        amount = to_money(amount)
    except (InvalidOperation, ValueError, TypeError):
        raise PolicyViolation("invalid_amount", "Payment amount must be a number", amount=str(amount))
    if not amount.is_finite() or amount <= ZERO:
        raise PolicyViolation("invalid_amount", "Payment amount must be positive", amount=amount)

    account_id = account.id
    async with locks.hold(account_id):
        try:
            await lock_account_row(db, account_id)
            balance = await get_balance(db, account_id)
            entry = CreditLedgerEntry(
                account_id=account_id,
                transaction_type="payment",
                amount=amount,
                balance_after=balance - amount,
                description=description or "Payment received",
            )
            db.add(entry)
            await db.commit()
        except WholesaleError:
            await db.rollback()
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Payment for account {account_id} rolled back: {e}")
            raise PersistenceError("Payment could not be saved", account_id=account_id) from e
        except Exception:
            await db.rollback()
            logger.exception(f"Unexpected error recording payment for account {account_id}, rolled back")
            raise

    logger.info(f"💰 Payment {amount} recorded for account {account_id}, balance {entry.balance_after}")
    return entry


async def list_ledger_entries(db: AsyncSession, account_id: int, limit: int = 50) -> List[CreditLedgerEntry]:
    """Newest entries first"""
    result = await db.execute(
        select(CreditLedgerEntry)
        .where(CreditLedgerEntry.account_id == account_id)
        .order_by(CreditLedgerEntry.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
