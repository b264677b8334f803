# ==============================================================================
# REPOSITORY INTERFACES
# ==============================================================================
# The barcode allocator depends on this protocol rather than on
# ProductRepository, so its tests can hand it a small in-memory fake.
# ==============================================================================

from typing import Protocol, runtime_checkable


@runtime_checkable
class IBarcodeLookup(Protocol):
    """Existence check used by the barcode allocator."""

    def barcode_exists(self, barcode: str, excluding_product_id: str) -> bool:
        """True when a product other than excluding_product_id has the barcode."""
        ...
