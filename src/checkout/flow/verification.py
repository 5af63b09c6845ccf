"""Verification of hosted payments when the customer returns from the gateway.

Safe to call any number of times for the same reference: an order that has
already left (pending, pending) is returned as it is without asking the
gateway again, and status changes are compare-and-set so concurrent
callbacks settle the order exactly once.
"""

from checkout.cart import get_cart_service
from checkout.cart.port import CartService
from checkout.errors import GatewayError, InvalidReference, OrderNotFound
from checkout.flow.results import VerificationOutcome, VerificationResult
from checkout.gateway import get_gateway
from checkout.gateway.port import PaymentGateway, VerifyResult
from checkout.order.order import Order, OrderState
from checkout.order.reference import is_valid_reference
from checkout.payment_method.payment_method import PaymentMethodKind
from checkout.store import get_order_store
from checkout.store.port import OrderStore
from checkout.utils.logging import get_logger

logger = get_logger(__name__)

MESSAGES = {
    VerificationOutcome.VERIFIED: "Payment successful! Your order has been confirmed.",
    VerificationOutcome.FAILED: "Payment was not successful. Please try again or choose another payment method.",
    VerificationOutcome.PENDING: "Your payment is still being processed. Please check back shortly.",
}

AWAITING_OFFLINE_PAYMENT_MESSAGE = "This order is awaiting payment confirmation from the store."


def _final_message(order: Order) -> str:
    state = order.state
    if state == OrderState.PAID:
        return MESSAGES[VerificationOutcome.VERIFIED]
    if state == OrderState.FAILED:
        return MESSAGES[VerificationOutcome.FAILED]
    return f"Order {order.reference} is {state.status}, payment {state.payment_status}."


class VerificationHandler:
    def __init__(
        self,
        store: OrderStore | None = None,
        gateway: PaymentGateway | None = None,
        cart_service: CartService | None = None,
    ) -> None:
        self.store = store or get_order_store()
        self.gateway = gateway or get_gateway()
        self.cart_service = cart_service or get_cart_service()

    def handle_return(self, reference: str | None) -> VerificationResult:
        if not is_valid_reference(reference):
            logger.warning("verification_rejected_reference", reference=reference)
            raise InvalidReference(reference)

        order = self.store.find_by_reference(reference)
        if order is None:
            logger.warning("verification_unknown_reference", reference=reference)
            raise OrderNotFound(reference)

        if order.state != OrderState.PENDING:
            return self._already_final(order)

        if order.method_kind != PaymentMethodKind.HOSTED_CARD:
            # Nothing to ask the gateway about; an operator settles these.
            return VerificationResult(
                order=order,
                outcome=VerificationOutcome.PENDING,
                message=AWAITING_OFFLINE_PAYMENT_MESSAGE,
            )

        try:
            result = self.gateway.verify(reference)
        except GatewayError as exc:
            logger.warning(
                "payment_verification_unavailable",
                reference=reference,
                error=exc.kind,
                detail=exc.message,
            )
            raise exc.with_order(order) from None

        if result.succeeded and result.amount_minor_units == order.pricing.total:
            return self._settle(order, OrderState.PAID, VerificationOutcome.VERIFIED, result)

        if result.succeeded:
            logger.warning(
                "payment_amount_mismatch",
                reference=reference,
                expected=order.pricing.total,
                received=result.amount_minor_units,
            )
            return self._settle(
                order,
                OrderState.FAILED,
                VerificationOutcome.FAILED,
                result,
                reason=f"Paid amount {result.amount_minor_units} does not match order total {order.pricing.total}",
            )

        if result.failed:
            return self._settle(
                order,
                OrderState.FAILED,
                VerificationOutcome.FAILED,
                result,
                reason=f"Payment {result.provider_status}",
            )

        logger.info("payment_still_pending", reference=reference, provider_status=result.provider_status)
        return VerificationResult(
            order=order,
            outcome=VerificationOutcome.PENDING,
            message=MESSAGES[VerificationOutcome.PENDING],
        )

    def _settle(
        self,
        order: Order,
        target: OrderState,
        outcome: VerificationOutcome,
        result: VerifyResult,
        reason: str | None = None,
    ) -> VerificationResult:
        change = self.store.update_status(
            order.id,
            expected=OrderState.PENDING,
            target=target,
            reason=reason,
            gateway_message=result.gateway_message,
        )
        if not change.applied:
            return self._already_final(change.order)

        if target == OrderState.PAID:
            self.cart_service.clear(change.order.cart_id)

        logger.info(
            "payment_verified" if target == OrderState.PAID else "payment_failed",
            reference=order.reference,
            provider_status=result.provider_status,
            outcome=outcome.value,
        )
        return VerificationResult(order=change.order, outcome=outcome, message=MESSAGES[outcome])

    def _already_final(self, order: Order) -> VerificationResult:
        return VerificationResult(
            order=order,
            outcome=VerificationOutcome.ALREADY_FINAL,
            message=_final_message(order),
        )
