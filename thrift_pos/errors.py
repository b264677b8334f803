# ==============================================================================
# ERRORS
# ==============================================================================
# Services raise these exceptions; routes turn them into a flash message
# (pages) or {"ok": False, "error": ...} with the status code (JSON API).
# ==============================================================================

from decimal import Decimal


class PosError(Exception):
    """Base error carrying a user-facing message and an HTTP status."""

    status_code = 400
    default_message = "The request could not be completed."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {"ok": False, "error": self.message}


class ValidationError(PosError):
    status_code = 400
    default_message = "Invalid data."


class NotFoundError(PosError):
    status_code = 404
    default_message = "Not found."


class BarcodeNotFoundError(NotFoundError):
    """The query looks like a barcode but no product carries it."""

    def __init__(self, barcode):
        self.barcode = barcode
        super().__init__(f'Barcode "{barcode}" is not in inventory.')

    def to_dict(self):
        data = super().to_dict()
        data["kind"] = "barcode"
        return data


class NoSearchResultsError(NotFoundError):
    """Free-text search with no matching product."""

    def __init__(self, query):
        self.query = query
        super().__init__(f'No products match "{query}".')

    def to_dict(self):
        data = super().to_dict()
        data["kind"] = "search"
        return data


class ConflictError(PosError):
    status_code = 409
    default_message = "Conflict with existing data."


class DuplicateBarcodeError(ConflictError):
    def __init__(self, barcode=None):
        self.barcode = barcode
        if barcode:
            message = f'Barcode "{barcode}" is already used by another product.'
        else:
            message = "Barcode is already used by another product."
        super().__init__(message)


class LotCapacityError(ConflictError):
    default_message = "This lot already holds its declared number of items."


class InUseError(ConflictError):
    default_message = "This record is still referenced and cannot be deleted."


class InsufficientStockError(ConflictError):
    def __init__(self, product_name, requested, available):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Not enough stock for {product_name}. "
            f"Requested: {requested}, available: {available}"
        )


class InsufficientPaymentError(PosError):
    status_code = 400

    def __init__(self, amount_paid, total):
        self.amount_paid = Decimal(amount_paid)
        self.total = Decimal(total)
        self.shortfall = self.total - self.amount_paid
        super().__init__(
            f"Amount paid ({self.amount_paid:,.2f}) is less than total "
            f"({self.total:,.2f}). Short by {self.shortfall:,.2f}."
        )

    def to_dict(self):
        data = super().to_dict()
        data["shortfall"] = float(self.shortfall)
        return data


class StorageError(PosError):
    """Database failure; the operator retries the action."""

    status_code = 503
    default_message = "Could not save changes. Please try again."
