from decimal import Decimal

import pytest

from wholesale.db.init_db import ensure_tables_exist
from wholesale.db.session import create_engine, create_session_factory
from wholesale.models import CreditLedgerEntry, PricingTier, Product, RetailerAccount
from wholesale.services.account_locks import AccountLockRegistry


@pytest.fixture
async def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'wholesale_test.db'}")
    await ensure_tables_exist(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def locks():
    return AccountLockRegistry(timeout=5)


@pytest.fixture
def make_account(session_factory):
    counter = {"n": 0}

    async def _make(credit_limit="1000.00", status="approved"):
        counter["n"] += 1
        async with session_factory() as session:
            account = RetailerAccount(
                email=f"buyer{counter['n']}@example.com",
                business_name=f"Corner Store {counter['n']}",
                status=status,
                credit_limit=Decimal(credit_limit),
            )
            session.add(account)
            await session.commit()
            return account

    return _make


@pytest.fixture
def make_product(session_factory):
    counter = {"n": 0}

    async def _make(base_price="10.00", moq=1, tiers=(), sku=None, is_active=True):
        counter["n"] += 1
        async with session_factory() as session:
            product = Product(
                sku=sku or f"SKU-{counter['n']:04d}",
                name=f"Product {counter['n']}",
                moq=moq,
                base_price=Decimal(base_price),
                is_active=is_active,
            )
            for min_quantity, max_quantity, price in tiers:
                product.tiers.append(
                    PricingTier(min_quantity=min_quantity, max_quantity=max_quantity, price=Decimal(price))
                )
            session.add(product)
            await session.commit()
            return product

    return _make


@pytest.fixture
def add_ledger_entry(session_factory):
    async def _add(account_id, transaction_type, amount, balance_after):
        async with session_factory() as session:
            session.add(CreditLedgerEntry(
                account_id=account_id,
                transaction_type=transaction_type,
                amount=Decimal(amount),
                balance_after=Decimal(balance_after),
                description="seed",
            ))
            await session.commit()

    return _add
