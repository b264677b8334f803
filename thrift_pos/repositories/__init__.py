# ==============================================================================
# REPOSITORY LAYER - Data access
# ==============================================================================
# All SQL lives here. Services only talk to these classes and never build
# queries themselves.
#
# LAYOUT:
# ├── interfaces.py          → barcode lookup protocol (allocator)
# ├── base.py                → Database (engine + scoped session), BaseRepository
# ├── catalog_repository.py  → category, supplier
# ├── lot_repository.py      → lot
# ├── product_repository.py  → product (+ barcode existence lookup)
# ├── sales_repository.py    → sale, sale_item, dashboard aggregates
# └── operator_repository.py → operator (login)
# ==============================================================================

from .interfaces import IBarcodeLookup

from .base import BaseRepository, Database
from .catalog_repository import CategoryRepository, SupplierRepository
from .lot_repository import LotRepository
from .product_repository import ProductRepository
from .sales_repository import SalesRepository
from .operator_repository import OperatorRepository

__all__ = [
    # Interfaces
    'IBarcodeLookup',

    # Base
    'BaseRepository',
    'Database',

    # Implementations
    'CategoryRepository',
    'SupplierRepository',
    'LotRepository',
    'ProductRepository',
    'SalesRepository',
    'OperatorRepository',
]
