"""Domain events for the Order aggregate.

Versioned, immutable facts about an order's payment lifecycle. Every event
carries the order reference, the only identifier shared with the payment
gateway.
"""

from protean.fields import DateTime, Identifier, Integer, String

from checkout.domain import checkout


@checkout.event(part_of="Order")
class OrderPlaced:
    """A cart was turned into an order awaiting payment."""

    __version__ = 1

    order_id = Identifier(required=True)
    reference = String(required=True)
    customer_id = String()
    payment_method_code = String(required=True)
    payment_method_kind = String(required=True)
    subtotal = Integer(required=True)
    processing_fee = Integer(required=True)
    total = Integer(required=True)
    currency = String(required=True)
    placed_at = DateTime(required=True)


@checkout.event(part_of="Order")
class PaymentSessionOpened:
    """The hosted payment page was initialized for the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    reference = String(required=True)
    access_code = String()
    opened_at = DateTime(required=True)


@checkout.event(part_of="Order")
class CashOnDeliveryConfirmed:
    """A cash-on-delivery order was accepted; payment is collected on delivery."""

    __version__ = 1

    order_id = Identifier(required=True)
    reference = String(required=True)
    total = Integer(required=True)
    confirmed_at = DateTime(required=True)


@checkout.event(part_of="Order")
class PaymentVerified:
    """The gateway confirmed the payment."""

    __version__ = 1

    order_id = Identifier(required=True)
    reference = String(required=True)
    amount = Integer(required=True)
    gateway_message = String()
    paid_at = DateTime(required=True)


@checkout.event(part_of="Order")
class PaymentFailed:
    """The payment attempt failed or was abandoned."""

    __version__ = 1

    order_id = Identifier(required=True)
    reference = String(required=True)
    reason = String(required=True)
    gateway_message = String()
    failed_at = DateTime(required=True)


@checkout.event(part_of="Order")
class BankTransferConfirmed:
    """An operator matched an incoming bank transfer to the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    reference = String(required=True)
    amount = Integer(required=True)
    confirmed_by = String()
    confirmed_at = DateTime(required=True)
