"""
Order assembly

Turns a cart of (product_id, quantity) lines into priced item drafts:
- every line must name a product and a positive integer quantity
  no larger than settings.MAX_LINE_QUANTITY
- the product must exist and be active
- the quantity must meet the product's MOQ
- the unit price comes from the tier resolver

Tax and shipping are fixed at zero; total = subtotal + tax + shipping, and
the total must fit the DECIMAL(15, 2) money columns.
The same code backs the pricing preview, which collects per-line errors
instead of failing on the first one.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from wholesale.core.config import settings
from wholesale.core.exceptions import NotFoundError, PolicyViolation, ValidationError
from wholesale.core.logging_config import get_logger
from wholesale.core.money import MAX_AMOUNT, ZERO, to_money
from wholesale.models.product import Product
from wholesale.services.pricing import resolve_unit_price

logger = get_logger(__name__)

# SQLite INTEGER range
MAX_ROW_ID = 2 ** 63 - 1


@dataclass(frozen=True)
class CartLine:
    product_id: int
    quantity: int


@dataclass
class OrderItemDraft:
    """A priced line, ready to be persisted as an OrderItem"""
    product_id: int
    sku: str
    product_name: str
    quantity: int
    unit_price: Decimal
    tier_applied: Optional[int]
    subtotal: Decimal
    moq: int = 1


@dataclass
class AssembledOrder:
    items: List[OrderItemDraft]
    subtotal: Decimal
    tax_amount: Decimal = ZERO
    shipping_amount: Decimal = ZERO

    @property
    def total_amount(self) -> Decimal:
        return self.subtotal + self.tax_amount + self.shipping_amount


@dataclass
class CartPreview:
    items: List[OrderItemDraft] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)
    subtotal: Decimal = ZERO
    tax_amount: Decimal = ZERO
    shipping_amount: Decimal = ZERO

    @property
    def total_amount(self) -> Decimal:
        return self.subtotal + self.tax_amount + self.shipping_amount


def _field(line: Any, name: str) -> Any:
    if isinstance(line, dict):
        return line.get(name)
    return getattr(line, name, None)


def _positive_int(value: Any) -> bool:
    # bool is an int subclass; True is not a quantity
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def normalize_cart(lines: Optional[Iterable[Any]]) -> List[CartLine]:
    """Validate raw cart lines (mappings or objects with product_id/quantity)"""
    if lines is None or isinstance(lines, (str, bytes, dict)):
        raise ValidationError("Items required")
    cart = []
    for index, line in enumerate(lines):
        product_id = _field(line, "product_id")
        quantity = _field(line, "quantity")
        if not _positive_int(product_id) or product_id > MAX_ROW_ID:
            raise ValidationError(f"Line {index + 1}: product_id is required", line=index)
        if not _positive_int(quantity):
            raise ValidationError(
                f"Line {index + 1}: quantity must be a positive integer", line=index, product_id=product_id
            )
        if quantity > settings.MAX_LINE_QUANTITY:
            raise ValidationError(
                f"Line {index + 1}: quantity exceeds {settings.MAX_LINE_QUANTITY}",
                line=index,
                product_id=product_id,
                max_quantity=settings.MAX_LINE_QUANTITY,
            )
        cart.append(CartLine(product_id=product_id, quantity=quantity))
    if not cart:
        raise ValidationError("Items required")
    return cart


async def load_products(db: AsyncSession, product_ids: Iterable[int]) -> Dict[int, Product]:
    """Active products with their tiers, keyed by id"""
    ids = set(product_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(Product)
        .options(selectinload(Product.tiers))
        .where(Product.id.in_(ids), Product.is_active.is_(True))
    )
    return {product.id: product for product in result.scalars().all()}


def price_line(product: Product, quantity: int) -> OrderItemDraft:
    """Price one line; raises below_moq"""
    resolution = resolve_unit_price(product, quantity)
    return OrderItemDraft(
        product_id=product.id,
        sku=product.sku,
        product_name=product.name,
        quantity=quantity,
        unit_price=resolution.unit_price,
        tier_applied=resolution.tier_id,
        subtotal=to_money(resolution.unit_price * quantity),
        moq=product.moq,
    )


async def assemble_order(db: AsyncSession, lines: Iterable[Any]) -> AssembledOrder:
    """
    Validate and price a cart

    Raises ValidationError, NotFoundError or PolicyViolation(below_moq) on
    the first offending line.
    """
    cart = normalize_cart(lines)
    products = await load_products(db, (line.product_id for line in cart))

    items: List[OrderItemDraft] = []
    subtotal = ZERO
    for line in cart:
        product = products.get(line.product_id)
        if product is None:
            raise NotFoundError(f"Product {line.product_id} not found", product_id=line.product_id)

        draft = price_line(product, line.quantity)
        items.append(draft)
        subtotal += draft.subtotal

    if subtotal > MAX_AMOUNT:
        raise ValidationError("Order total is too large", subtotal=subtotal, max_amount=MAX_AMOUNT)

    logger.debug(f"Assembled {len(items)} lines, subtotal {subtotal}")
    return AssembledOrder(items=items, subtotal=subtotal)


async def quote_line(db: AsyncSession, product_id: int, quantity: int) -> OrderItemDraft:
    """Price preview for a single product"""
    cart = normalize_cart([{"product_id": product_id, "quantity": quantity}])
    products = await load_products(db, [product_id])
    product = products.get(product_id)
    if product is None:
        raise NotFoundError(f"Product {product_id} not found", product_id=product_id)
    return price_line(product, cart[0].quantity)


async def preview_cart(db: AsyncSession, lines: Iterable[Any]) -> CartPreview:
    """
    Price a cart for display without committing anything

    Unknown products and MOQ shortfalls are collected in errors; the
    remaining lines are still priced.
    """
    cart = normalize_cart(lines)
    products = await load_products(db, (line.product_id for line in cart))

    preview = CartPreview()
    for line in cart:
        product = products.get(line.product_id)
        if product is None:
            preview.errors.append({
                "product_id": line.product_id,
                "reason": "not_found",
                "message": "Product not found",
            })
            continue
        try:
            draft = price_line(product, line.quantity)
        except PolicyViolation as e:
            error = e.to_dict()
            error.pop("kind", None)
            preview.errors.append(error)
            continue
        preview.items.append(draft)
        preview.subtotal += draft.subtotal
    return preview
