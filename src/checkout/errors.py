"""Checkout error taxonomy.

Errors raised by the orchestration layer (CheckoutOrchestrator and
VerificationHandler) and by the gateway adapters. Domain-rule violations
inside aggregates keep using ``protean.exceptions.ValidationError``.

Every error carries a stable ``kind`` string for API clients, a
``retryable`` flag, and the current Order when one exists so callers can
route the customer back to the cart or to a retry.
"""


class CheckoutError(Exception):
    """Base class for all checkout failures."""

    kind = "checkout_error"
    retryable = False

    def __init__(self, message: str, order=None, **metadata) -> None:
        super().__init__(message)
        self.message = message
        self.order = order
        self.metadata = metadata

    def with_order(self, order):
        """Attach the order the failure happened on and return self."""
        self.order = order
        return self


# ---------------------------------------------------------------------------
# Validation: raised before any order is mutated
# ---------------------------------------------------------------------------
class CheckoutValidationError(CheckoutError):
    kind = "validation_error"


class EmptyCart(CheckoutValidationError):
    kind = "empty_cart"

    def __init__(self) -> None:
        super().__init__("Cart is empty")


class PaymentMethodNotFound(CheckoutValidationError):
    kind = "payment_method_not_found"

    def __init__(self, code: str) -> None:
        super().__init__(f"Payment method '{code}' is not available", code=code)


class AmountOutOfRange(CheckoutValidationError):
    kind = "amount_out_of_range"

    def __init__(self, amount: int, minimum: int | None, maximum: int | None) -> None:
        if minimum is not None and amount < minimum:
            message = f"Order amount {amount} is below the minimum of {minimum} for this payment method"
        else:
            message = f"Order amount {amount} exceeds the maximum of {maximum} for this payment method"
        super().__init__(message, amount=amount, minimum=minimum, maximum=maximum)


class InvalidReference(CheckoutValidationError):
    kind = "invalid_reference"

    def __init__(self, reference: str | None) -> None:
        super().__init__("Missing or malformed payment reference", reference=reference)


# ---------------------------------------------------------------------------
# Gateway
# ---------------------------------------------------------------------------
class GatewayError(CheckoutError):
    kind = "gateway_error"


class GatewayUnavailable(GatewayError):
    """Transport failure, timeout, rate limiting or a 5xx from the provider."""

    kind = "gateway_unavailable"
    retryable = True


class GatewayRejected(GatewayError):
    """The provider refused the request (4xx or an unsuccessful response body)."""

    kind = "gateway_rejected"


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------
class OrderNotFound(CheckoutError):
    kind = "order_not_found"

    def __init__(self, reference: str) -> None:
        super().__init__(f"No order found for reference '{reference}'", reference=reference)
