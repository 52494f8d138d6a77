"""
Order commit transaction

Commit steps, all inside one database transaction:
1. credit terms: re-check available credit against the order total
2. allocate a unique order number
3. insert the order header (pending) and its creation step
4. insert the order items
5. credit terms: append a credit_purchase ledger entry
6. commit

Steps 1 to 6 run under the account's lock (plus a row lock on the account
where the database supports SELECT ... FOR UPDATE), so two commits for the
same account cannot both pass the credit check. Any storage failure rolls
back every write and surfaces as PersistenceError.
"""

import secrets
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wholesale.core.config import settings
from wholesale.core.exceptions import (
    NotFoundError, PersistenceError, PolicyViolation, ValidationError, WholesaleError
)
from wholesale.core.logging_config import get_logger
from wholesale.core.money import to_money
from wholesale.models.credit_ledger import CreditLedgerEntry
from wholesale.models.order import Order, OrderStatusChange, PAYMENT_TERMS
from wholesale.models.order_item import OrderItem
from wholesale.models.retailer_account import RetailerAccount
from wholesale.services.account_locks import AccountLockRegistry
from wholesale.services.assembler import AssembledOrder, OrderItemDraft
from wholesale.services.credit import get_balance

logger = get_logger(__name__)


@dataclass(frozen=True)
class CommittedOrder:
    order_id: int
    order_number: str
    total_amount: Decimal


async def generate_order_number(db: AsyncSession, account_id: int) -> str:
    """ORD-<yyyymmddHHMMSS>-<account id>-<random hex>, checked against existing orders"""
    prefix = settings.ORDER_NUMBER_PREFIX
    for _ in range(settings.ORDER_NUMBER_MAX_ATTEMPTS):
        stamp = datetime.utcnow().strftime("%Y%m%d%H%M%S")
        candidate = f"{prefix}-{stamp}-{account_id}-{secrets.token_hex(3).upper()}"
        result = await db.execute(select(Order.id).where(Order.order_number == candidate))
        if result.scalar_one_or_none() is None:
            return candidate
    raise PersistenceError("Could not allocate a unique order number", account_id=account_id)


async def lock_account_row(db: AsyncSession, account_id: int) -> Decimal:
    """Lock the account row for this transaction and return its current credit limit"""
    result = await db.execute(
        select(RetailerAccount.credit_limit)
        .where(RetailerAccount.id == account_id)
        .with_for_update()
    )
    row = result.first()
    if row is None:
        raise NotFoundError(f"Account {account_id} not found", account_id=account_id)
    return to_money(row[0])


class TransactionCoordinator:
    """Commits assembled orders atomically"""

    def __init__(self, locks: AccountLockRegistry):
        self.locks = locks

    async def commit(
        self,
        db: AsyncSession,
        account: RetailerAccount,
        assembled: AssembledOrder,
        payment_terms: str = "pay_now",
        notes: Optional[str] = None) -> CommittedOrder:
        """Persist order, items and (credit terms) ledger entry, all or nothing"""
        if payment_terms not in PAYMENT_TERMS:
            raise ValidationError(f"Invalid payment terms: {payment_terms}", payment_terms=payment_terms)
        if not assembled.items:
            raise ValidationError("Items required")

        if payment_terms == "pay_now":
            return await self._commit(db, account, assembled, payment_terms, notes)

        async with self.locks.hold(account.id):
            return await self._commit(db, account, assembled, payment_terms, notes)

    async def _commit(
        self,
        db: AsyncSession,
        account: RetailerAccount,
        assembled: AssembledOrder,
        payment_terms: str,
        notes: Optional[str]) -> CommittedOrder:
        account_id = account.id
        is_credit = payment_terms != "pay_now"
        total_amount = to_money(assembled.total_amount)

        try:
            balance = None
            if is_credit:
                credit_limit = await lock_account_row(db, account_id)
                balance = await get_balance(db, account_id)
                available_credit = credit_limit - balance
                if total_amount > available_credit:
                    raise PolicyViolation(
                        "credit_exceeded",
                        "Credit limit exceeded",
                        available_credit=available_credit,
                        order_total=total_amount,
                    )

            order_number = await generate_order_number(db, account_id)
            order = Order(
                order_number=order_number,
                account_id=account_id,
                status="pending",
                payment_terms=payment_terms,
                subtotal=to_money(assembled.subtotal),
                tax_amount=to_money(assembled.tax_amount),
                shipping_amount=to_money(assembled.shipping_amount),
                total_amount=total_amount,
                notes=notes or None,
            )
            db.add(order)
            await db.flush()  # order.id

            db.add(OrderStatusChange(order_id=order.id, from_status=None, to_status="pending", notes="Order placed"))

            await self._persist_items(db, order, assembled.items)

            if is_credit:
                await self._append_credit_purchase(db, account_id, order, balance)

            await db.commit()
        except WholesaleError as e:
            await db.rollback()
            logger.info(f"Order for account {account_id} rejected: {e.to_dict()}")
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Order for account {account_id} rolled back: {e}")
            raise PersistenceError("Order could not be saved, nothing was written", account_id=account_id) from e
        except Exception:
            await db.rollback()
            logger.exception(f"Unexpected error committing order for account {account_id}, rolled back")
            raise

        logger.info(f"✅ Order {order_number} committed: account {account_id}, {payment_terms}, total {total_amount}")
        return CommittedOrder(order_id=order.id, order_number=order_number, total_amount=total_amount)

    async def _persist_items(self, db: AsyncSession, order: Order, drafts: Iterable[OrderItemDraft]) -> None:
        for draft in drafts:
            db.add(OrderItem(
                order_id=order.id,
                product_id=draft.product_id,
                sku=draft.sku,
                product_name=draft.product_name,
                quantity=draft.quantity,
                unit_price=draft.unit_price,
                tier_applied=draft.tier_applied,
                subtotal=draft.subtotal,
            ))
        await db.flush()

    async def _append_credit_purchase(
        self, db: AsyncSession, account_id: int, order: Order, balance: Decimal) -> CreditLedgerEntry:
        entry = CreditLedgerEntry(
            account_id=account_id,
            order_id=order.id,
            transaction_type="credit_purchase",
            amount=order.total_amount,
            balance_after=balance + order.total_amount,
            description=f"Order {order.order_number}",
        )
        db.add(entry)
        await db.flush()
        return entry
