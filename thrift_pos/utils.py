# ==============================================================================
# INPUT HELPERS
# ==============================================================================
# Conversions for values arriving from forms and JSON. They raise
# ValidationError with a readable message instead of returning garbage.
# ==============================================================================

from decimal import Decimal, InvalidOperation

from thrift_pos.errors import ValidationError
from thrift_pos.models import to_money


# Upper bound for counts and quantities typed into a form
MAX_QUANTITY = 1_000_000


def parse_int(value, field, minimum=None, maximum=MAX_QUANTITY):
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a whole number.")
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a whole number.")
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field} must be at least {minimum}.")
    if maximum is not None and number > maximum:
        raise ValidationError(f"{field} must be at most {maximum:,}.")
    return number


def parse_money(value, field, allow_negative=False):
    if value is None or (isinstance(value, str) and not value.strip()) or isinstance(value, bool):
        raise ValidationError(f"{field} is required.")
    try:
        amount = to_money(value)
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number.")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number.")
    if not allow_negative and amount < Decimal("0"):
        raise ValidationError(f"{field} cannot be negative.")
    return amount


def clean_text(value, field=None, required=False, max_length=None):
    text = (value or "").strip() if isinstance(value, str) or value is None else str(value).strip()
    if required and not text:
        raise ValidationError(f"{field} is required.")
    if max_length and len(text) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters.")
    return text or None


def format_money(amount, symbol="฿"):
    return f"{symbol}{Decimal(amount or 0):,.2f}"
