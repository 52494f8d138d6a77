"""
Per-account serialization of credit commits

Checking available credit and appending the ledger entry must not interleave
with another commit for the same account, otherwise two orders can both see
enough credit and together exceed the limit. Each account id maps to one
asyncio.Lock; different accounts never wait on each other. A lock is dropped
from the registry once nobody holds or waits for it.

The registry lives in process memory, so it serializes commits within one
worker process only. Running several workers against one database relies
on the SELECT ... FOR UPDATE row lock taken by the commit, which SQLite
ignores: deploy on SQLite with a single worker.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

from wholesale.core.config import settings
from wholesale.core.exceptions import PersistenceError
from wholesale.core.logging_config import get_logger

logger = get_logger(__name__)


class AccountLockRegistry:
    """asyncio.Lock per account id"""

    def __init__(self, timeout: float = None):
        self.timeout = settings.CREDIT_LOCK_TIMEOUT_SECONDS if timeout is None else timeout
        self._locks: Dict[int, asyncio.Lock] = {}
        # tasks holding or waiting for each lock
        self._users: Dict[int, int] = {}

    def __contains__(self, account_id: int) -> bool:
        return account_id in self._locks

    def _checkout(self, account_id: int) -> asyncio.Lock:
        lock = self._locks.get(account_id)
        if lock is None:
            lock = self._locks[account_id] = asyncio.Lock()
        self._users[account_id] = self._users.get(account_id, 0) + 1
        return lock

    def _checkin(self, account_id: int) -> None:
        remaining = self._users[account_id] - 1
        if remaining:
            self._users[account_id] = remaining
        else:
            del self._users[account_id]
            del self._locks[account_id]

    @asynccontextmanager
    async def hold(self, account_id: int) -> AsyncIterator[None]:
        """Hold the account's lock; a timeout is a retryable PersistenceError"""
        lock = self._checkout(account_id)
        try:
            try:
                await asyncio.wait_for(lock.acquire(), timeout=self.timeout)
            except asyncio.TimeoutError:
                logger.warning(f"Timed out waiting for account {account_id} lock")
                raise PersistenceError(
                    "Another order for this account is being processed, please retry",
                    account_id=account_id,
                )
            try:
                yield
            finally:
                lock.release()
        finally:
            self._checkin(account_id)


# Registry used by the application process
account_locks = AccountLockRegistry()


def get_account_locks() -> AccountLockRegistry:
    """Lock registry dependency"""
    return account_locks
