"""PaymentMethod aggregate (CQRS) — payment-method configuration.

Inert configuration read by the checkout: which methods are offered, how
each one charges its processing fee, and the order-amount bounds it accepts.
Amounts are integer minor currency units; percentage fees are integer basis
points (150 == 1.5%).
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Integer, String

from checkout.domain import checkout
from checkout.payment_method.events import (
    PaymentMethodActivated,
    PaymentMethodDeactivated,
    PaymentMethodFeesUpdated,
    PaymentMethodRegistered,
)


class PaymentMethodKind(Enum):
    HOSTED_CARD = "hosted_card"
    BANK_TRANSFER = "bank_transfer"
    CASH_ON_DELIVERY = "cash_on_delivery"


class FeeType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


BASIS_POINTS_PER_UNIT = 10_000


@checkout.aggregate
class PaymentMethod:
    code = String(required=True, max_length=50, unique=True)
    name = String(required=True, max_length=100)
    description = String(max_length=500)
    kind = String(required=True, choices=PaymentMethodKind)
    requires_redirect = Boolean(default=False)
    fee_type = String(choices=FeeType, default=FeeType.FIXED.value)
    fee_value = Integer(default=0, min_value=0)
    min_order_amount = Integer(min_value=0)
    max_order_amount = Integer(min_value=0)
    active = Boolean(default=True)
    position = Integer(default=0)
    icon = String(max_length=50)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def redirect_flag_must_match_kind(self):
        expects_redirect = self.kind == PaymentMethodKind.HOSTED_CARD.value
        if bool(self.requires_redirect) != expects_redirect:
            raise ValidationError(
                {"requires_redirect": ["Only hosted card methods redirect to the payment gateway"]}
            )

    @invariant.post
    def amount_bounds_must_be_ordered(self):
        if (
            self.min_order_amount is not None
            and self.max_order_amount is not None
            and self.min_order_amount > self.max_order_amount
        ):
            raise ValidationError({"min_order_amount": ["Minimum order amount cannot exceed the maximum"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def register(
        cls,
        code,
        name,
        kind,
        fee_type=FeeType.FIXED.value,
        fee_value=0,
        description=None,
        min_order_amount=None,
        max_order_amount=None,
        position=0,
        icon=None,
        active=True,
    ):
        kind_value = PaymentMethodKind(kind).value
        now = datetime.now(UTC)
        method = cls(
            code=code,
            name=name,
            description=description,
            kind=kind_value,
            requires_redirect=kind_value == PaymentMethodKind.HOSTED_CARD.value,
            fee_type=FeeType(fee_type).value,
            fee_value=fee_value,
            min_order_amount=min_order_amount,
            max_order_amount=max_order_amount,
            active=active,
            position=position,
            icon=icon,
            created_at=now,
            updated_at=now,
        )
        method.raise_(
            PaymentMethodRegistered(
                payment_method_id=str(method.id),
                code=code,
                kind=kind_value,
                fee_type=method.fee_type,
                fee_value=fee_value,
                registered_at=now,
            )
        )
        return method

    @property
    def method_kind(self) -> PaymentMethodKind:
        return PaymentMethodKind(self.kind)

    # -------------------------------------------------------------------
    # Bounds
    # -------------------------------------------------------------------
    def accepts_amount(self, amount: int) -> bool:
        """Whether an order subtotal falls within this method's bounds."""
        if self.min_order_amount is not None and amount < self.min_order_amount:
            return False
        if self.max_order_amount is not None and amount > self.max_order_amount:
            return False
        return True

    # -------------------------------------------------------------------
    # Administration
    # -------------------------------------------------------------------
    def update_fees(self, fee_type, fee_value, min_order_amount=None, max_order_amount=None):
        if fee_value < 0:
            raise ValidationError({"fee_value": ["Processing fee cannot be negative"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.fee_type = FeeType(fee_type).value
            self.fee_value = fee_value
            self.min_order_amount = min_order_amount
            self.max_order_amount = max_order_amount
            self.updated_at = now

        self.raise_(
            PaymentMethodFeesUpdated(
                payment_method_id=str(self.id),
                code=self.code,
                fee_type=self.fee_type,
                fee_value=fee_value,
                min_order_amount=min_order_amount,
                max_order_amount=max_order_amount,
                updated_at=now,
            )
        )

    def toggle(self):
        """Flip the method between offered and withdrawn."""
        if self.active:
            self.deactivate()
        else:
            self.activate()

    def activate(self):
        if self.active:
            raise ValidationError({"active": ["Payment method is already active"]})
        self.active = True
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(PaymentMethodActivated(payment_method_id=str(self.id), code=self.code, activated_at=now))

    def deactivate(self):
        if not self.active:
            raise ValidationError({"active": ["Payment method is already inactive"]})
        self.active = False
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(PaymentMethodDeactivated(payment_method_id=str(self.id), code=self.code, deactivated_at=now))
