"""
API access dependencies

Tokens are issued by the session service in front of this API; requests
arrive here with the caller's account id in X-Account-Id. Only approved
accounts may use the ordering endpoints. Back-office calls carry
X-Admin-Token instead.
"""
from typing import Optional
from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from wholesale.core.config import settings
from wholesale.core.deps import get_db
from wholesale.models.retailer_account import RetailerAccount
from wholesale.services.account_locks import AccountLockRegistry, get_account_locks
from wholesale.services.transaction import TransactionCoordinator


async def get_current_account(
    db: AsyncSession = Depends(get_db),
    x_account_id: Optional[int] = Header(None)) -> RetailerAccount:
    """Caller's account; 401 if unknown, 403 if not approved"""
    if x_account_id is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    account = await db.get(RetailerAccount, x_account_id)
    if not account:
        raise HTTPException(status_code=401, detail="Unknown account")
    if not account.is_approved:
        raise HTTPException(status_code=403, detail="Account is not approved")
    return account


async def require_admin(x_admin_token: Optional[str] = Header(None)) -> None:
    if x_admin_token != settings.ADMIN_TOKEN:
        raise HTTPException(status_code=403, detail="Admin access required")


async def get_order_reader(
    db: AsyncSession = Depends(get_db),
    x_account_id: Optional[int] = Header(None),
    x_admin_token: Optional[str] = Header(None)) -> Optional[RetailerAccount]:
    """
    Who is reading an order

    Returns None for an admin (X-Admin-Token present and valid), otherwise
    the calling account, checked like get_current_account.
    """
    if x_admin_token is not None:
        await require_admin(x_admin_token)
        return None
    return await get_current_account(db, x_account_id)


def get_coordinator(locks: AccountLockRegistry = Depends(get_account_locks)) -> TransactionCoordinator:
    return TransactionCoordinator(locks)
