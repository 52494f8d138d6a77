"""
Retail account model - the buyer side of every order

Registration and approval are handled by the account-management service;
the ordering core only reads credit_limit and status.
"""

from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, DateTime, DECIMAL
from sqlalchemy.orm import relationship
from wholesale.db.base import Base


class RetailerAccount(Base):
    """Retail account with a credit limit"""
    __tablename__ = "retailer_accounts"

    id = Column(Integer, primary_key=True, index=True)

    email = Column(String(255), unique=True, nullable=False, index=True, comment="Login email")
    business_name = Column(String(255), nullable=False, comment="Trading name")
    contact_person = Column(String(255), comment="Contact person")

    # pending: awaiting approval
    # approved: may place orders
    # rejected: registration refused
    status = Column(String(20), nullable=False, default="pending", index=True, comment="Approval status")

    # Ceiling for outstanding credit purchases
    credit_limit = Column(DECIMAL(15, 2), nullable=False, default=Decimal("0.00"), comment="Credit limit")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Orders and ledger entries go with the account
    orders = relationship("Order", back_populates="account", cascade="all, delete-orphan", passive_deletes=True)
    ledger_entries = relationship(
        "CreditLedgerEntry", back_populates="account", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self):
        return f"<RetailerAccount {self.id}: {self.business_name} ({self.status})>"

    @property
    def is_approved(self) -> bool:
        return self.status == "approved"
