"""
Quantity tier pricing

A product's unit price depends on the ordered quantity. Among the tiers whose
[min_quantity, max_quantity] range contains the quantity, the one with the
greatest min_quantity wins; when several tiers share that min_quantity the
lowest tier id wins. Without a matching tier the product's base price applies.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from wholesale.core.exceptions import PolicyViolation
from wholesale.core.money import to_money
from wholesale.models.product import Product, PricingTier


@dataclass(frozen=True)
class PriceResolution:
    """Unit price for a quantity and the tier that produced it"""
    unit_price: Decimal
    tier_id: Optional[int] = None


def select_tier(tiers: Iterable[PricingTier], quantity: int) -> Optional[PricingTier]:
    """Best matching tier for quantity, or None"""
    candidates = [tier for tier in tiers if tier.covers(quantity)]
    if not candidates:
        return None
    # Greatest min_quantity first, then the earliest defined tier
    return min(candidates, key=lambda tier: (-tier.min_quantity, tier.id if tier.id is not None else 0))


def check_moq(product: Product, quantity: int) -> None:
    """Raise below_moq when quantity is under the product's minimum"""
    if quantity < product.moq:
        raise PolicyViolation(
            "below_moq",
            f"Product {product.sku} requires minimum {product.moq} units",
            product_id=product.id,
            sku=product.sku,
            moq=product.moq,
            quantity=quantity,
        )


def resolve_unit_price(product: Product, quantity: int) -> PriceResolution:
    """
    Effective unit price of product at quantity

    product.tiers must already be loaded. Pure: reads the product only.
    """
    check_moq(product, quantity)

    tier = select_tier(product.tiers, quantity)
    if tier is None:
        return PriceResolution(unit_price=to_money(product.base_price))
    return PriceResolution(unit_price=to_money(tier.price), tier_id=tier.id)
