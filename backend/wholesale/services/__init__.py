"""
Ordering services

- pricing: quantity tier resolution
- credit: balance and available credit
- assembler: cart validation and pricing
- transaction: atomic order commit
- ledger: payments
- order_status: status transitions
"""
