"""Checkout orchestration — turns a cart into an order and starts payment.

The order is always committed in (pending, pending) before the gateway is
told about its reference, so a fast gateway callback can always find it.
What happens next depends on the payment method kind:

    hosted card       open a hosted payment session and redirect the customer
    bank transfer     stay pending and show the account to pay into
    cash on delivery  accept the order now and empty the cart
"""

from typing import assert_never

from protean.exceptions import ValidationError

from checkout.cart import get_cart_service
from checkout.cart.port import Cart, CartService
from checkout.errors import AmountOutOfRange, EmptyCart, GatewayError, OrderNotFound
from checkout.flow.requests import CustomerInfo, DeliveryDetails
from checkout.flow.results import BankTransferInstructions, CheckoutResult, NextAction
from checkout.gateway import get_gateway
from checkout.gateway.port import PaymentGateway
from checkout.order.order import Order, OrderState
from checkout.order.reference import generate_reference
from checkout.payment_method.catalog import PaymentMethodCatalog
from checkout.payment_method.fees import compute_fee
from checkout.payment_method.payment_method import PaymentMethod, PaymentMethodKind
from checkout.settings import CheckoutSettings, get_settings
from checkout.store import get_order_store
from checkout.store.port import OrderStore
from checkout.utils.logging import get_logger

logger = get_logger(__name__)

REDIRECT_MESSAGE = "Redirecting you to our secure payment page to complete your payment."
BANK_TRANSFER_MESSAGE = (
    "Your order has been placed successfully! Please complete the bank transfer using the details provided."
)
CASH_ON_DELIVERY_MESSAGE = "Your order has been placed successfully! You will pay on delivery."


class CheckoutOrchestrator:
    def __init__(
        self,
        catalog: PaymentMethodCatalog | None = None,
        store: OrderStore | None = None,
        gateway: PaymentGateway | None = None,
        cart_service: CartService | None = None,
        settings: CheckoutSettings | None = None,
    ) -> None:
        self.catalog = catalog or PaymentMethodCatalog()
        self.store = store or get_order_store()
        self.gateway = gateway or get_gateway()
        self.cart_service = cart_service or get_cart_service()
        self.settings = settings or get_settings()

    # -------------------------------------------------------------------
    # Submit
    # -------------------------------------------------------------------
    def submit(
        self,
        cart: Cart,
        method_code: str,
        customer: CustomerInfo,
        delivery: DeliveryDetails | None = None,
        customer_id: str | None = None,
    ) -> CheckoutResult:
        """Place an order for ``cart`` and start payment with ``method_code``.

        Validation failures raise before any order exists. Gateway failures
        while opening a hosted payment session mark the new order failed and
        are re-raised carrying that order.
        """
        if cart.is_empty:
            raise EmptyCart()

        method = self.catalog.get_by_code(method_code)
        subtotal = cart.subtotal
        if not method.accepts_amount(subtotal):
            raise AmountOutOfRange(subtotal, method.min_order_amount, method.max_order_amount)

        order = self._place_order(cart, method, customer, delivery or DeliveryDetails(), customer_id)

        kind = method.method_kind
        if kind is PaymentMethodKind.HOSTED_CARD:
            return self._start_hosted_payment(order)
        elif kind is PaymentMethodKind.BANK_TRANSFER:
            return self._await_bank_transfer(order)
        elif kind is PaymentMethodKind.CASH_ON_DELIVERY:
            return self._accept_cash_on_delivery(order)
        else:
            assert_never(kind)

    def _place_order(
        self,
        cart: Cart,
        method: PaymentMethod,
        customer: CustomerInfo,
        delivery: DeliveryDetails,
        customer_id: str | None,
    ) -> Order:
        order = Order.place(
            reference=generate_reference(self.settings.reference_prefix),
            items_data=[
                {
                    "product_id": line.product_id,
                    "name": line.name,
                    "unit_price": line.unit_price,
                    "quantity": line.quantity,
                }
                for line in cart.lines
            ],
            processing_fee=compute_fee(method, cart.subtotal),
            currency=self.settings.currency,
            payment_method=method,
            customer=customer.as_dict(),
            customer_id=customer_id,
            cart_id=cart.owner_id,
            delivery_address_ref=delivery.address_ref,
            delivery_method=delivery.method,
        )
        self.store.create(order)
        logger.info(
            "order_placed",
            reference=order.reference,
            order_id=str(order.id),
            method_code=method.code,
            subtotal=order.pricing.subtotal,
            processing_fee=order.pricing.processing_fee,
            total=order.pricing.total,
        )
        return order

    def _start_hosted_payment(self, order: Order) -> CheckoutResult:
        try:
            session = self.gateway.initialize(
                email=order.customer.email,
                amount_minor_units=order.pricing.total,
                reference=order.reference,
                callback_url=self.settings.callback_url,
            )
        except GatewayError as exc:
            logger.warning(
                "payment_initialization_failed",
                reference=order.reference,
                error=exc.kind,
                detail=exc.message,
            )
            change = self.store.update_status(
                order.id,
                expected=OrderState.PENDING,
                target=OrderState.FAILED,
                reason=f"Payment initialization failed: {exc.message}",
            )
            raise exc.with_order(change.order) from None

        order = self.store.record_payment_session(order.id, session.access_code, session.redirect_url)
        return CheckoutResult(
            order=order,
            next_action=NextAction.REDIRECT,
            message=REDIRECT_MESSAGE,
            redirect_url=session.redirect_url,
            access_code=session.access_code,
        )

    def _await_bank_transfer(self, order: Order) -> CheckoutResult:
        return CheckoutResult(
            order=order,
            next_action=NextAction.BANK_TRANSFER,
            message=BANK_TRANSFER_MESSAGE,
            bank_transfer=BankTransferInstructions.for_order(order, self.settings.bank_account),
        )

    def _accept_cash_on_delivery(self, order: Order) -> CheckoutResult:
        change = self.store.update_status(
            order.id,
            expected=OrderState.PENDING,
            target=OrderState.AWAITING_DELIVERY_PAYMENT,
        )
        if change.applied:
            self.cart_service.clear(order.cart_id)
        return CheckoutResult(order=change.order, next_action=NextAction.CONFIRMED, message=CASH_ON_DELIVERY_MESSAGE)

    # -------------------------------------------------------------------
    # Resume
    # -------------------------------------------------------------------
    def resume_payment(self, reference: str) -> CheckoutResult:
        """Send the customer back to the payment page already opened for ``reference``.

        The gateway is never asked to initialize the same reference twice.
        """
        order = self.store.find_by_reference(reference)
        if order is None:
            raise OrderNotFound(reference)
        if order.method_kind != PaymentMethodKind.HOSTED_CARD:
            raise ValidationError({"reference": ["Only card payments can be resumed"]})
        if order.state != OrderState.PENDING or not order.redirect_url:
            raise ValidationError({"reference": [f"Order {reference} has no open payment session"]})

        return CheckoutResult(
            order=order,
            next_action=NextAction.REDIRECT,
            message=REDIRECT_MESSAGE,
            redirect_url=order.redirect_url,
            access_code=order.access_code,
        )
