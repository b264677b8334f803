# ==============================================================================
# PAYMENT SERVICE
# ==============================================================================
# Sale totals and payment checks done before a sale is written.
#
# RULE: cash must cover the subtotal; the difference is returned as change.
# PromptPay and Khon La Khrueng are always taken for the exact subtotal.
# ==============================================================================

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Mapping

from thrift_pos.errors import InsufficientPaymentError, ValidationError
from thrift_pos.models import PaymentMethod, to_money
from thrift_pos.utils import parse_money


@dataclass(frozen=True)
class PaymentResult:
    method: PaymentMethod
    subtotal: Decimal
    amount_paid: Decimal
    change: Decimal

    def to_dict(self):
        return {
            "payment_method": self.method.value,
            "subtotal": float(self.subtotal),
            "amount_paid": float(self.amount_paid),
            "change": float(self.change),
        }


def _line_value(line: Any, key: str):
    if isinstance(line, Mapping):
        return line.get(key)
    return getattr(line, key)


def compute_subtotal(lines: Iterable[Any]) -> Decimal:
    """
    Sum of unit_price * quantity over cart lines.

    Args:
        lines: dicts or objects with unit_price and quantity

    Returns:
        Subtotal rounded to cents
    """
    total = Decimal("0.00")
    for line in lines:
        total += to_money(_line_value(line, "unit_price")) * int(_line_value(line, "quantity"))
    return to_money(total)


def parse_payment_method(value) -> PaymentMethod:
    method = PaymentMethod.parse(value)
    if method is None:
        raise ValidationError("Choose a payment method: cash, PromptPay or Khon La Khrueng.")
    return method


def validate_payment(method, subtotal, amount_paid=None) -> PaymentResult:
    """
    Checks the amount tendered for a sale.

    Args:
        method: PaymentMethod or its value
        subtotal: Sale subtotal
        amount_paid: Cash tendered (required for cash only)

    Returns:
        PaymentResult with the paid amount and change

    Raises:
        ValidationError: unknown method or missing cash amount
        InsufficientPaymentError: cash below the subtotal
    """
    method = parse_payment_method(method)
    subtotal = to_money(subtotal)

    if method is not PaymentMethod.CASH:
        return PaymentResult(method, subtotal, subtotal, Decimal("0.00"))

    paid = parse_money(amount_paid, "Amount received")
    if paid < subtotal:
        raise InsufficientPaymentError(paid, subtotal)
    return PaymentResult(method, subtotal, paid, paid - subtotal)
