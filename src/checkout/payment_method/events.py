"""Domain events for the PaymentMethod aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from checkout.domain import checkout


@checkout.event(part_of="PaymentMethod")
class PaymentMethodRegistered:
    """A payment method was added to the catalog."""

    __version__ = 1

    payment_method_id = Identifier(required=True)
    code = String(required=True)
    kind = String(required=True)
    fee_type = String(required=True)
    fee_value = Integer(required=True)
    registered_at = DateTime(required=True)


@checkout.event(part_of="PaymentMethod")
class PaymentMethodFeesUpdated:
    """Fee configuration or order-amount bounds changed."""

    __version__ = 1

    payment_method_id = Identifier(required=True)
    code = String(required=True)
    fee_type = String(required=True)
    fee_value = Integer(required=True)
    min_order_amount = Integer()
    max_order_amount = Integer()
    updated_at = DateTime(required=True)


@checkout.event(part_of="PaymentMethod")
class PaymentMethodActivated:
    __version__ = 1

    payment_method_id = Identifier(required=True)
    code = String(required=True)
    activated_at = DateTime(required=True)


@checkout.event(part_of="PaymentMethod")
class PaymentMethodDeactivated:
    __version__ = 1

    payment_method_id = Identifier(required=True)
    code = String(required=True)
    deactivated_at = DateTime(required=True)
