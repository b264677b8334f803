# ==============================================================================
# SERVICE LAYER - Business rules
# ==============================================================================
# Routes call services; services call repositories and decide where each
# transaction starts and ends. Services never build SQL.
#
# LAYOUT:
# ├── barcode_service.py   → identifier hasher, barcode allocator
# ├── catalog_service.py   → categories, suppliers
# ├── lot_service.py       → lots and their cost per item
# ├── inventory_service.py → products, stock additions, scan lookup
# ├── cart_service.py      → checkout cart (Flask session)
# ├── payment_service.py   → subtotal, payment validation, change
# ├── sales_service.py     → atomic sale completion
# ├── stats_service.py     → dashboard figures
# ├── label_service.py     → printable barcode label sheets (PDF)
# └── user_service.py      → operators, login
# ==============================================================================

from thrift_pos.services.barcode_service import (
    BarcodeAllocator,
    hash_identifier,
    looks_like_barcode,
)
from thrift_pos.services.catalog_service import CatalogService
from thrift_pos.services.lot_service import LotService, compute_lot_costs, summarize_lot
from thrift_pos.services.inventory_service import InventoryService, ScanResult, StockUpdateResult
from thrift_pos.services.cart_service import CartService
from thrift_pos.services.payment_service import PaymentResult, compute_subtotal, validate_payment
from thrift_pos.services.sales_service import SalesService
from thrift_pos.services.stats_service import StatsService, percent_change
from thrift_pos.services.label_service import Label, LabelService, render_label_sheet
from thrift_pos.services.user_service import OperatorSession, UserService

__all__ = [
    'BarcodeAllocator',
    'hash_identifier',
    'looks_like_barcode',
    'CatalogService',
    'LotService',
    'compute_lot_costs',
    'summarize_lot',
    'InventoryService',
    'ScanResult',
    'StockUpdateResult',
    'CartService',
    'PaymentResult',
    'compute_subtotal',
    'validate_payment',
    'SalesService',
    'StatsService',
    'percent_change',
    'Label',
    'LabelService',
    'render_label_sheet',
    'OperatorSession',
    'UserService',
]
