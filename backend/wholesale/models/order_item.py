"""
Order line model

Product data is snapshotted at commit time (sku, name, unit price, tier)
so an order keeps showing what was actually bought after the catalog
changes.
"""

from decimal import Decimal
from sqlalchemy import Column, Integer, String, ForeignKey, DECIMAL
from sqlalchemy.orm import relationship
from wholesale.db.base import Base


class OrderItem(Base):
    """One product line of an order"""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)

    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    # === Snapshot ===
    sku = Column(String(100), nullable=False, comment="SKU at commit time")
    product_name = Column(String(255), nullable=False, comment="Product name at commit time")

    quantity = Column(Integer, nullable=False, comment="Quantity")
    unit_price = Column(DECIMAL(15, 2), nullable=False, default=Decimal("0.00"), comment="Resolved unit price")

    # Tier id that produced unit_price, NULL when the base price applied.
    # Deliberately not a foreign key: tiers may be edited or removed later.
    tier_applied = Column(Integer, nullable=True, comment="Pricing tier id")

    # quantity * unit_price
    subtotal = Column(DECIMAL(15, 2), nullable=False, default=Decimal("0.00"), comment="Line subtotal")

    order = relationship("Order", back_populates="items")
    product = relationship("Product")

    def __repr__(self):
        return f"<OrderItem {self.sku} x {self.quantity} @ {self.unit_price}>"
