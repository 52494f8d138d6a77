"""
Order header model

Orders are created once, in pending status, by the ordering transaction.
Later status changes come from administrative actions and are recorded in
OrderStatusChange. Orders are never deleted on their own; they go with
their account.
"""

from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, DECIMAL
from sqlalchemy.orm import relationship
from wholesale.db.base import Base

ORDER_STATUSES = ("pending", "approved", "processing", "shipped", "delivered", "cancelled")

# pay_now is billed immediately; the credit terms are charged to the ledger
PAYMENT_TERMS = ("pay_now", "credit_net_30", "credit_net_60")


class Order(Base):
    """Order header"""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)

    # Format: ORD-<yyyymmddHHMMSS>-<account id>-<random hex>
    order_number = Column(String(50), unique=True, nullable=False, index=True, comment="Order number")

    account_id = Column(
        Integer, ForeignKey("retailer_accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )

    status = Column(String(20), nullable=False, default="pending", index=True, comment="Order status")
    payment_terms = Column(String(20), nullable=False, default="pay_now", comment="Payment terms")

    # === Amounts ===
    subtotal = Column(DECIMAL(15, 2), nullable=False, default=Decimal("0.00"), comment="Sum of line subtotals")
    tax_amount = Column(DECIMAL(15, 2), default=Decimal("0.00"), comment="Tax")
    shipping_amount = Column(DECIMAL(15, 2), default=Decimal("0.00"), comment="Shipping")
    total_amount = Column(DECIMAL(15, 2), nullable=False, default=Decimal("0.00"), comment="Total")

    notes = Column(Text, comment="Notes")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    account = relationship("RetailerAccount", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan", passive_deletes=True)
    status_changes = relationship(
        "OrderStatusChange", back_populates="order", cascade="all, delete-orphan",
        passive_deletes=True, order_by="OrderStatusChange.id"
    )

    def __repr__(self):
        return f"<Order {self.order_number} ({self.payment_terms}: {self.status})>"

    @property
    def is_credit(self) -> bool:
        """Charged to the credit ledger"""
        return self.payment_terms != "pay_now"


class OrderStatusChange(Base):
    """One step in an order's lifecycle"""
    __tablename__ = "order_status_changes"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)

    # NULL for the creation step
    from_status = Column(String(20), comment="Previous status")
    to_status = Column(String(20), nullable=False, comment="New status")
    notes = Column(Text, comment="Notes")

    changed_at = Column(DateTime, default=datetime.utcnow, comment="Time of change")

    order = relationship("Order", back_populates="status_changes")

    def __repr__(self):
        return f"<OrderStatusChange {self.order_id}: {self.from_status} -> {self.to_status}>"
