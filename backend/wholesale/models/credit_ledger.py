"""
Credit ledger model - append-only record of charges and payments

Balance rules:
- credit order committed -> credit_purchase (account owes more)
- payment received -> payment (account owes less)
- adjustment entries are informational and not part of the balance sum

balance_after is the running balance snapshot written with the entry, it is
never recomputed.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, DECIMAL
from sqlalchemy.orm import relationship
from wholesale.db.base import Base

TRANSACTION_TYPES = ("credit_purchase", "payment", "adjustment")


class CreditLedgerEntry(Base):
    """Ledger entry"""
    __tablename__ = "credit_ledger_entries"

    id = Column(Integer, primary_key=True, index=True)

    account_id = Column(
        Integer, ForeignKey("retailer_accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True, index=True)

    transaction_type = Column(String(20), nullable=False, index=True, comment="Entry type")

    amount = Column(DECIMAL(15, 2), nullable=False, comment="Amount")
    balance_after = Column(DECIMAL(15, 2), nullable=False, comment="Outstanding balance after this entry")

    description = Column(Text, comment="Description")

    created_at = Column(DateTime, default=datetime.utcnow)

    account = relationship("RetailerAccount", back_populates="ledger_entries")
    order = relationship("Order")

    def __repr__(self):
        return f"<CreditLedgerEntry {self.transaction_type}: {self.account_id} {self.amount} -> {self.balance_after}>"
