"""
Catalog models - products and their quantity price tiers

Owned by the catalog service; the ordering core reads them only.
Order items snapshot sku, name and price so later catalog edits do not
change historical orders.
"""

from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, DECIMAL, CheckConstraint
from sqlalchemy.orm import relationship
from wholesale.db.base import Base


class Product(Base):
    """Catalog product"""
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("moq >= 1", name="ck_product_moq_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)

    sku = Column(String(100), unique=True, nullable=False, index=True, comment="Stock keeping unit")
    name = Column(String(255), nullable=False, comment="Product name")
    description = Column(Text, comment="Description")
    unit = Column(String(50), default="unit", comment="Selling unit")

    # Minimum order quantity per order line
    moq = Column(Integer, nullable=False, default=1, comment="Minimum order quantity")

    # Price when no tier matches
    base_price = Column(DECIMAL(15, 2), nullable=False, comment="Base unit price")

    is_active = Column(Boolean, default=True, comment="Orderable")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tiers = relationship(
        "PricingTier", back_populates="product", cascade="all, delete-orphan", order_by="PricingTier.min_quantity"
    )

    def __repr__(self):
        return f"<Product {self.sku}: {self.name} moq={self.moq} @ {self.base_price}>"


class PricingTier(Base):
    """Quantity tier - applies when min_quantity <= quantity <= max_quantity

    max_quantity NULL means the tier is unbounded above.
    """
    __tablename__ = "pricing_tiers"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)

    min_quantity = Column(Integer, nullable=False, comment="Smallest quantity in the tier")
    max_quantity = Column(Integer, nullable=True, comment="Largest quantity in the tier, NULL = unbounded")
    price = Column(DECIMAL(15, 2), nullable=False, default=Decimal("0.00"), comment="Unit price in the tier")

    product = relationship("Product", back_populates="tiers")

    def __repr__(self):
        upper = self.max_quantity if self.max_quantity is not None else "∞"
        return f"<PricingTier {self.product_id} [{self.min_quantity}, {upper}] @ {self.price}>"

    def covers(self, quantity: int) -> bool:
        """Whether quantity falls inside this tier"""
        if quantity < self.min_quantity:
            return False
        return self.max_quantity is None or self.max_quantity >= quantity
