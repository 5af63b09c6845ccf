"""Order aggregate (CQRS) — one checkout transaction.

An order tracks fulfilment (``status``) and money (``payment_status``)
independently. Together they form the order's state:

    (pending, pending)     created, no payment action yet
                           bank-transfer orders wait here for an operator
    (processing, pending)  cash on delivery accepted, payment at the door
    (completed, paid)      hosted card payment verified by the gateway
    (failed, failed)       gateway refused, abandoned or never initialized
    (processing, paid)     bank transfer confirmed by an operator

Every transition leaves (pending, pending); all other states are terminal
here. Amounts are integer minor currency units, priced once at creation.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Integer, String, Text, ValueObject

from checkout.domain import checkout
from checkout.order.events import (
    BankTransferConfirmed,
    CashOnDeliveryConfirmed,
    OrderPlaced,
    PaymentFailed,
    PaymentSessionOpened,
    PaymentVerified,
)
from checkout.payment_method.payment_method import PaymentMethodKind


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class OrderState(Enum):
    """The legal (status, payment_status) pairs."""

    PENDING = (OrderStatus.PENDING.value, PaymentStatus.PENDING.value)
    AWAITING_DELIVERY_PAYMENT = (OrderStatus.PROCESSING.value, PaymentStatus.PENDING.value)
    PAID = (OrderStatus.COMPLETED.value, PaymentStatus.PAID.value)
    FAILED = (OrderStatus.FAILED.value, PaymentStatus.FAILED.value)
    TRANSFER_CONFIRMED = (OrderStatus.PROCESSING.value, PaymentStatus.PAID.value)

    @property
    def status(self) -> str:
        return self.value[0]

    @property
    def payment_status(self) -> str:
        return self.value[1]

    def describe(self) -> str:
        return f"({self.status}, {self.payment_status})"


_VALID_TRANSITIONS = {
    OrderState.PENDING: {
        OrderState.AWAITING_DELIVERY_PAYMENT,
        OrderState.PAID,
        OrderState.FAILED,
        OrderState.TRANSFER_CONFIRMED,
    },
    OrderState.AWAITING_DELIVERY_PAYMENT: set(),  # Collection happens outside checkout
    OrderState.PAID: set(),  # Terminal
    OrderState.FAILED: set(),  # Terminal
    OrderState.TRANSFER_CONFIRMED: set(),  # Terminal
}

# Which payment methods may reach each state
_ALLOWED_KINDS = {
    OrderState.AWAITING_DELIVERY_PAYMENT: {PaymentMethodKind.CASH_ON_DELIVERY},
    OrderState.PAID: {PaymentMethodKind.HOSTED_CARD},
    OrderState.FAILED: set(PaymentMethodKind),
    OrderState.TRANSFER_CONFIRMED: {PaymentMethodKind.BANK_TRANSFER},
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@checkout.value_object(part_of="Order")
class OrderPricing:
    """Subtotal, processing fee and total in minor units, locked at checkout."""

    subtotal = Integer(required=True, min_value=0)
    processing_fee = Integer(required=True, min_value=0)
    total = Integer(required=True, min_value=0)
    currency = String(max_length=3, default="NGN")

    @invariant.post
    def total_must_be_subtotal_plus_fee(self):
        if self.total != self.subtotal + self.processing_fee:
            raise ValidationError({"total": ["Total must equal subtotal plus processing fee"]})


@checkout.value_object(part_of="Order")
class CustomerDetails:
    """Who placed the order, as captured at checkout time."""

    name = String(max_length=200)
    email = String(required=True, max_length=254)
    phone = String(max_length=30)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@checkout.entity(part_of="Order")
class OrderItem:
    """A cart line frozen into the order."""

    product_id = String(required=True, max_length=100)
    name = String(required=True, max_length=255)
    unit_price = Integer(required=True, min_value=0)
    quantity = Integer(required=True, min_value=1)

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@checkout.aggregate
class Order:
    reference = String(required=True, max_length=100, unique=True)
    customer_id = String(max_length=100)
    cart_id = String(max_length=100)
    items = HasMany(OrderItem)
    pricing = ValueObject(OrderPricing, required=True)
    payment_method_code = String(required=True, max_length=50)
    payment_method_kind = String(required=True, choices=PaymentMethodKind)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    delivery_address_ref = String(max_length=255)
    delivery_method = String(max_length=50)
    customer = ValueObject(CustomerDetails)
    access_code = String(max_length=255)
    redirect_url = String(max_length=1000)
    gateway_message = Text()
    failure_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()
    paid_at = DateTime()

    @invariant.post
    def state_must_be_a_known_pair(self):
        try:
            OrderState((self.status, self.payment_status))
        except ValueError:
            raise ValidationError(
                {"status": [f"Unknown order state ({self.status}, {self.payment_status})"]}
            ) from None

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        reference,
        items_data,
        processing_fee,
        currency,
        payment_method,
        customer,
        customer_id=None,
        cart_id=None,
        delivery_address_ref=None,
        delivery_method=None,
    ):
        """Create an order in (pending, pending).

        Args:
            reference: Correlation key shared with the gateway.
            items_data: List of dicts with product_id, name, unit_price, quantity.
            processing_fee: Fee in minor units, already computed for the method.
            currency: ISO currency code.
            payment_method: The resolved PaymentMethod.
            customer: Dict with name, email, phone.
            cart_id: Owner of the cart to empty once payment is settled.
        """
        items = [OrderItem(**item) for item in items_data]
        subtotal = sum(item.line_total for item in items)
        now = datetime.now(UTC)

        order = cls(
            reference=reference,
            customer_id=str(customer_id) if customer_id else None,
            cart_id=cart_id,
            items=items,
            pricing=OrderPricing(
                subtotal=subtotal,
                processing_fee=processing_fee,
                total=subtotal + processing_fee,
                currency=currency,
            ),
            payment_method_code=payment_method.code,
            payment_method_kind=payment_method.kind,
            delivery_address_ref=delivery_address_ref,
            delivery_method=delivery_method,
            customer=CustomerDetails(**customer),
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                reference=reference,
                customer_id=order.customer_id,
                payment_method_code=order.payment_method_code,
                payment_method_kind=order.payment_method_kind,
                subtotal=subtotal,
                processing_fee=processing_fee,
                total=order.pricing.total,
                currency=currency,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------
    @property
    def state(self) -> OrderState:
        return OrderState((self.status, self.payment_status))

    @property
    def method_kind(self) -> PaymentMethodKind:
        return PaymentMethodKind(self.payment_method_kind)

    @property
    def is_terminal(self) -> bool:
        return not _VALID_TRANSITIONS[self.state]

    @property
    def awaiting_bank_transfer(self) -> bool:
        return self.method_kind == PaymentMethodKind.BANK_TRANSFER and self.state == OrderState.PENDING

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target: OrderState) -> None:
        current = self.state
        if target not in _VALID_TRANSITIONS[current]:
            raise ValidationError({"status": [f"Cannot transition from {current.describe()} to {target.describe()}"]})
        if self.method_kind not in _ALLOWED_KINDS[target]:
            raise ValidationError(
                {"status": [f"A {self.payment_method_kind} order cannot move to {target.describe()}"]}
            )

    def _enter(self, target: OrderState, **changes) -> datetime:
        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = target.status
            self.payment_status = target.payment_status
            for field_name, value in changes.items():
                setattr(self, field_name, value)
            self.updated_at = now
        return now

    def transition_to(self, target: OrderState, **details) -> None:
        """Move the order to ``target`` through the matching named transition."""
        if target == OrderState.AWAITING_DELIVERY_PAYMENT:
            self.confirm_cash_on_delivery()
        elif target == OrderState.PAID:
            self.record_payment_verified(gateway_message=details.get("gateway_message"))
        elif target == OrderState.FAILED:
            self.record_payment_failure(
                reason=details.get("reason") or "Payment failed",
                gateway_message=details.get("gateway_message"),
            )
        elif target == OrderState.TRANSFER_CONFIRMED:
            self.confirm_bank_transfer(confirmed_by=details.get("confirmed_by"))
        else:
            raise ValidationError({"status": [f"Orders cannot move back to {target.describe()}"]})

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def record_payment_session(self, access_code, redirect_url):
        """Remember the hosted payment page so it is never initialized twice."""
        if self.method_kind != PaymentMethodKind.HOSTED_CARD:
            raise ValidationError({"access_code": ["Only hosted card orders open a payment session"]})
        if self.state != OrderState.PENDING:
            raise ValidationError({"status": ["Payment session can only be opened on a pending order"]})
        if self.redirect_url:
            raise ValidationError({"redirect_url": ["A payment session is already open for this order"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.access_code = access_code
            self.redirect_url = redirect_url
            self.updated_at = now
        self.raise_(
            PaymentSessionOpened(
                order_id=str(self.id),
                reference=self.reference,
                access_code=access_code,
                opened_at=now,
            )
        )

    def confirm_cash_on_delivery(self):
        self._assert_can_transition(OrderState.AWAITING_DELIVERY_PAYMENT)
        now = self._enter(OrderState.AWAITING_DELIVERY_PAYMENT)
        self.raise_(
            CashOnDeliveryConfirmed(
                order_id=str(self.id),
                reference=self.reference,
                total=self.pricing.total,
                confirmed_at=now,
            )
        )

    def record_payment_verified(self, gateway_message=None):
        self._assert_can_transition(OrderState.PAID)
        now = datetime.now(UTC)
        self._enter(OrderState.PAID, gateway_message=gateway_message, paid_at=now)
        self.raise_(
            PaymentVerified(
                order_id=str(self.id),
                reference=self.reference,
                amount=self.pricing.total,
                gateway_message=gateway_message,
                paid_at=now,
            )
        )

    def record_payment_failure(self, reason, gateway_message=None):
        self._assert_can_transition(OrderState.FAILED)
        now = self._enter(OrderState.FAILED, failure_reason=reason[:500], gateway_message=gateway_message)
        self.raise_(
            PaymentFailed(
                order_id=str(self.id),
                reference=self.reference,
                reason=self.failure_reason,
                gateway_message=gateway_message,
                failed_at=now,
            )
        )

    def confirm_bank_transfer(self, confirmed_by=None):
        self._assert_can_transition(OrderState.TRANSFER_CONFIRMED)
        now = datetime.now(UTC)
        self._enter(OrderState.TRANSFER_CONFIRMED, paid_at=now)
        self.raise_(
            BankTransferConfirmed(
                order_id=str(self.id),
                reference=self.reference,
                amount=self.pricing.total,
                confirmed_by=confirmed_by,
                confirmed_at=now,
            )
        )
