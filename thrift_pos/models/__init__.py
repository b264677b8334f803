# ==============================================================================
# MODELS LAYER - Domain entities
# ==============================================================================
# SQLAlchemy mappings for every table plus the money/time helpers shared by
# repositories and services.
# ==============================================================================

from .entities import (
    Base,
    Category,
    Supplier,
    Lot,
    Product,
    Sale,
    SaleItem,
    Operator,
    PaymentMethod,
    PAYMENT_METHOD_LABELS,
    new_id,
    to_money,
    utcnow,
)

__all__ = [
    'Base',

    # Reference data
    'Category',
    'Supplier',

    # Inventory
    'Lot',
    'Product',

    # Sales
    'Sale',
    'SaleItem',
    'PaymentMethod',
    'PAYMENT_METHOD_LABELS',

    # Login
    'Operator',

    # Helpers
    'new_id',
    'to_money',
    'utcnow',
]
