"""Tests for VerificationHandler.handle_return."""

import pytest
from checkout.errors import GatewayRejected, GatewayUnavailable, InvalidReference, OrderNotFound
from checkout.flow.orchestrator import CheckoutOrchestrator
from checkout.flow.results import VerificationOutcome
from checkout.flow.verification import VerificationHandler
from checkout.order.order import Order, OrderState
from checkout.store import get_order_store
from protean import current_domain


@pytest.fixture
def card_order(default_methods, make_cart, customer):
    result = CheckoutOrchestrator().submit(make_cart(10_000, owner_id="cart-card"), "card_paystack", customer)
    return result.order


@pytest.fixture
def handler():
    return VerificationHandler()


class TestSuccessfulPayment:
    def test_completes_order(self, handler, card_order):
        result = handler.handle_return(card_order.reference)

        assert result.outcome == VerificationOutcome.VERIFIED
        assert result.order.state == OrderState.PAID
        assert result.order.gateway_message == "Approved"
        assert result.message == "Payment successful! Your order has been confirmed."
        assert get_order_store().find_by_reference(card_order.reference).state == OrderState.PAID

    def test_clears_cart(self, handler, card_order, cart_service):
        handler.handle_return(card_order.reference)
        assert cart_service.cleared == ["cart-card"]

    def test_second_return_is_a_no_op(self, handler, card_order, cart_service, gateway):
        first = handler.handle_return(card_order.reference)
        second = handler.handle_return(card_order.reference)

        assert first.order.state == OrderState.PAID
        assert second.order.state == OrderState.PAID
        assert second.outcome == VerificationOutcome.ALREADY_FINAL
        assert cart_service.clear_count("cart-card") == 1
        assert len(gateway.calls_to("verify")) == 1


class TestFailedPayment:
    @pytest.mark.parametrize("provider_status", ["failed", "abandoned", "reversed"])
    def test_negative_statuses_fail_order(self, handler, card_order, gateway, cart_service, provider_status):
        gateway.configure(verify_status=provider_status, gateway_message="Declined by issuer")

        result = handler.handle_return(card_order.reference)

        assert result.outcome == VerificationOutcome.FAILED
        assert result.order.state == OrderState.FAILED
        assert result.order.gateway_message == "Declined by issuer"
        assert provider_status in result.order.failure_reason
        assert cart_service.cleared == []

    def test_amount_mismatch_fails_order(self, handler, card_order, gateway):
        gateway.report_amount(card_order.reference, 100)

        result = handler.handle_return(card_order.reference)

        assert result.outcome == VerificationOutcome.FAILED
        assert result.order.state == OrderState.FAILED
        assert "does not match" in result.order.failure_reason


class TestPendingPayment:
    @pytest.mark.parametrize("provider_status", ["ongoing", "pending", "processing", "queued", "mystery"])
    def test_in_progress_statuses_keep_order_pending(self, handler, card_order, gateway, provider_status):
        gateway.configure(verify_status=provider_status)

        result = handler.handle_return(card_order.reference)

        assert result.outcome == VerificationOutcome.PENDING
        assert get_order_store().find_by_reference(card_order.reference).state == OrderState.PENDING

    def test_pending_order_is_verified_on_a_later_return(self, handler, card_order, gateway):
        gateway.configure(verify_status="ongoing")
        handler.handle_return(card_order.reference)

        gateway.configure(verify_status="success")
        result = handler.handle_return(card_order.reference)

        assert result.outcome == VerificationOutcome.VERIFIED
        assert len(gateway.calls_to("verify")) == 2

    def test_bank_transfer_is_not_sent_to_gateway(self, handler, default_methods, make_cart, customer, gateway):
        order = CheckoutOrchestrator().submit(make_cart(10_000), "bank_transfer", customer).order

        result = handler.handle_return(order.reference)

        assert result.outcome == VerificationOutcome.PENDING
        assert gateway.calls_to("verify") == []


class TestGatewayErrors:
    def test_unavailable_keeps_order_pending(self, handler, card_order, gateway):
        gateway.configure(verify_failure="unavailable")

        with pytest.raises(GatewayUnavailable) as exc:
            handler.handle_return(card_order.reference)

        assert exc.value.retryable is True
        assert exc.value.order.reference == card_order.reference
        assert get_order_store().find_by_reference(card_order.reference).state == OrderState.PENDING

    def test_rejected_keeps_order_pending(self, handler, card_order, gateway):
        gateway.configure(verify_failure="rejected")

        with pytest.raises(GatewayRejected):
            handler.handle_return(card_order.reference)

        assert get_order_store().find_by_reference(card_order.reference).state == OrderState.PENDING

    def test_retry_after_outage_succeeds(self, handler, card_order, gateway):
        gateway.configure(verify_failure="unavailable")
        with pytest.raises(GatewayUnavailable):
            handler.handle_return(card_order.reference)

        gateway.configure()
        assert handler.handle_return(card_order.reference).outcome == VerificationOutcome.VERIFIED


class TestUnknownReferences:
    def test_unknown_reference_creates_nothing(self, handler, default_methods, gateway):
        with pytest.raises(OrderNotFound):
            handler.handle_return("mmart-1718000000000-0000000000000000")

        assert current_domain.repository_for(Order)._dao.query.all().items == []
        assert gateway.calls == []

    @pytest.mark.parametrize("reference", [None, "", "not-a-reference", "mmart-123"])
    def test_missing_or_malformed_reference(self, handler, reference):
        with pytest.raises(InvalidReference):
            handler.handle_return(reference)


class TestTerminalOrders:
    def test_failed_order_is_returned_unchanged(self, handler, default_methods, make_cart, customer, gateway):
        gateway.configure(initialize_failure="unavailable")
        with pytest.raises(GatewayUnavailable) as exc:
            CheckoutOrchestrator().submit(make_cart(10_000), "card_paystack", customer)
        gateway.configure()

        result = handler.handle_return(exc.value.order.reference)

        assert result.outcome == VerificationOutcome.ALREADY_FINAL
        assert result.order.state == OrderState.FAILED
        assert gateway.calls_to("verify") == []

    def test_cash_on_delivery_order_is_returned_unchanged(self, handler, default_methods, make_cart, customer):
        order = CheckoutOrchestrator().submit(make_cart(5_000), "cod", customer).order

        result = handler.handle_return(order.reference)

        assert result.outcome == VerificationOutcome.ALREADY_FINAL
        assert result.order.state == OrderState.AWAITING_DELIVERY_PAYMENT
