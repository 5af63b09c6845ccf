"""Processing-fee computation.

Pure functions: no I/O, no repository access. ``method`` is anything exposing
``fee_type`` and ``fee_value`` (normally a PaymentMethod aggregate). Amounts
are integer minor currency units, percentage fees are basis points, and the
result is rounded half-up to a whole minor unit.
"""

from decimal import ROUND_HALF_UP, Decimal

from checkout.payment_method.payment_method import BASIS_POINTS_PER_UNIT, FeeType


def compute_fee(method, subtotal: int) -> int:
    """Return the processing fee for ``subtotal`` under ``method``.

    No method means no fee. The result is never negative.
    """
    if method is None:
        return 0

    fee_value = max(int(method.fee_value or 0), 0)
    fee_type = FeeType(method.fee_type)

    if fee_type == FeeType.FIXED:
        return fee_value

    base = max(int(subtotal), 0)
    fee = Decimal(base) * Decimal(fee_value) / Decimal(BASIS_POINTS_PER_UNIT)
    return int(fee.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def total_with_fee(method, subtotal: int) -> tuple[int, int]:
    """Return ``(fee, total)`` where ``total == subtotal + fee``."""
    fee = compute_fee(method, subtotal)
    return fee, subtotal + fee
