import asyncio
from sqlalchemy.ext.asyncio import AsyncEngine

from wholesale.db.session import engine as default_engine
from wholesale.db.base import Base

# Import every model so its table is registered on Base.metadata
from wholesale.models import (  # noqa: F401
    RetailerAccount, Product, PricingTier, Order, OrderItem,
    OrderStatusChange, CreditLedgerEntry
)


async def ensure_tables_exist(engine: AsyncEngine = None) -> None:
    """
    Create missing tables (called at application start-up)
    """
    async with (engine or default_engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


if __name__ == "__main__":
    asyncio.run(ensure_tables_exist())
