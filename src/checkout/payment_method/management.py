"""Payment-method administration — commands and handlers.

Registering a method, changing its fee configuration and offering or
withdrawing it. Also installs the storefront defaults on an empty store.
"""

from protean import handle
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.errors import PaymentMethodNotFound
from checkout.payment_method.payment_method import FeeType, PaymentMethod, PaymentMethodKind
from checkout.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PAYMENT_METHODS = (
    {
        "code": "card_paystack",
        "name": "Card Payment",
        "description": "Pay securely with your debit or credit card",
        "kind": PaymentMethodKind.HOSTED_CARD.value,
        "fee_type": FeeType.PERCENTAGE.value,
        "fee_value": 150,
        "position": 1,
        "icon": "credit-card",
    },
    {
        "code": "bank_transfer",
        "name": "Bank Transfer",
        "description": "Transfer to our bank account and send the receipt",
        "kind": PaymentMethodKind.BANK_TRANSFER.value,
        "fee_type": FeeType.FIXED.value,
        "fee_value": 0,
        "position": 2,
        "icon": "building-columns",
    },
    {
        "code": "cod",
        "name": "Cash on Delivery",
        "description": "Pay when your order arrives",
        "kind": PaymentMethodKind.CASH_ON_DELIVERY.value,
        "fee_type": FeeType.FIXED.value,
        "fee_value": 0,
        "position": 3,
        "icon": "truck",
    },
)


@checkout.command(part_of="PaymentMethod")
class RegisterPaymentMethod:
    code = String(required=True, max_length=50)
    name = String(required=True, max_length=100)
    kind = String(required=True, choices=PaymentMethodKind)
    description = String(max_length=500)
    fee_type = String(choices=FeeType, default=FeeType.FIXED.value)
    fee_value = Integer(default=0, min_value=0)
    min_order_amount = Integer(min_value=0)
    max_order_amount = Integer(min_value=0)
    position = Integer(default=0)
    icon = String(max_length=50)


@checkout.command(part_of="PaymentMethod")
class UpdatePaymentMethodFees:
    code = String(required=True, max_length=50)
    fee_type = String(required=True, choices=FeeType)
    fee_value = Integer(required=True, min_value=0)
    min_order_amount = Integer(min_value=0)
    max_order_amount = Integer(min_value=0)


@checkout.command(part_of="PaymentMethod")
class TogglePaymentMethod:
    code = String(required=True, max_length=50)


def _method_by_code(code):
    # Inactive methods are reachable here, unlike through the catalog.
    method = current_domain.repository_for(PaymentMethod).find_by_code(code)
    if method is None:
        raise PaymentMethodNotFound(code)
    return method


@checkout.command_handler(part_of=PaymentMethod)
class PaymentMethodCommandHandler:
    @handle(RegisterPaymentMethod)
    def register_payment_method(self, command):
        method = PaymentMethod.register(
            code=command.code,
            name=command.name,
            kind=command.kind,
            description=command.description,
            fee_type=command.fee_type or FeeType.FIXED.value,
            fee_value=command.fee_value or 0,
            min_order_amount=command.min_order_amount,
            max_order_amount=command.max_order_amount,
            position=command.position or 0,
            icon=command.icon,
        )
        current_domain.repository_for(PaymentMethod).add(method)
        logger.info("payment_method_registered", method_code=method.code, kind=method.kind)
        return str(method.id)

    @handle(UpdatePaymentMethodFees)
    def update_payment_method_fees(self, command):
        method = _method_by_code(command.code)
        method.update_fees(
            fee_type=command.fee_type,
            fee_value=command.fee_value,
            min_order_amount=command.min_order_amount,
            max_order_amount=command.max_order_amount,
        )
        current_domain.repository_for(PaymentMethod).add(method)
        logger.info(
            "payment_method_fees_updated",
            method_code=method.code,
            fee_type=method.fee_type,
            fee_value=method.fee_value,
        )
        return str(method.id)

    @handle(TogglePaymentMethod)
    def toggle_payment_method(self, command):
        method = _method_by_code(command.code)
        method.toggle()
        current_domain.repository_for(PaymentMethod).add(method)
        logger.info("payment_method_toggled", method_code=method.code, active=method.active)
        return str(method.id)


def seed_default_payment_methods() -> int:
    """Install the default methods when the store holds none. Returns how many were added."""
    repo = current_domain.repository_for(PaymentMethod)
    if repo.find_all():
        return 0

    for definition in DEFAULT_PAYMENT_METHODS:
        repo.add(PaymentMethod.register(**definition))

    logger.info("payment_methods_seeded", count=len(DEFAULT_PAYMENT_METHODS))
    return len(DEFAULT_PAYMENT_METHODS)
