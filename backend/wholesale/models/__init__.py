# Ordering data models

from wholesale.models.retailer_account import RetailerAccount
from wholesale.models.product import Product, PricingTier
from wholesale.models.order import Order, OrderStatusChange, ORDER_STATUSES, PAYMENT_TERMS
from wholesale.models.order_item import OrderItem
from wholesale.models.credit_ledger import CreditLedgerEntry, TRANSACTION_TYPES

__all__ = [
    "RetailerAccount",
    "Product",
    "PricingTier",
    "Order",
    "OrderStatusChange",
    "OrderItem",
    "CreditLedgerEntry",
    "ORDER_STATUSES",
    "PAYMENT_TERMS",
    "TRANSACTION_TYPES",
]
