"""Shared BDD fixtures and step definitions for the checkout scenarios."""

import pytest
from checkout.cart.port import Cart
from checkout.errors import CheckoutError
from checkout.flow.orchestrator import CheckoutOrchestrator
from checkout.flow.verification import VerificationHandler
from checkout.order.order import Order
from checkout.payment_method.management import UpdatePaymentMethodFees, seed_default_payment_methods
from checkout.store import get_order_store
from protean import current_domain
from pytest_bdd import given, parsers, then, when


@pytest.fixture
def context():
    """Mutable scratchpad shared by the steps of one scenario."""
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("the store offers its default payment methods")
def _default_methods():
    seed_default_payment_methods()


@given(parsers.cfparse('the "{code}" method charges a fixed fee of {fee:d}'))
def _fixed_fee(code, fee):
    current_domain.process(
        UpdatePaymentMethodFees(code=code, fee_type="fixed", fee_value=fee),
        asynchronous=False,
    )


@given(parsers.cfparse("a cart with an item costing {price:d}"))
def _cart_with_item(context, make_cart, price):
    context["cart"] = make_cart(price, owner_id="cart-bdd")


@given("an empty cart")
def _empty_cart(context):
    context["cart"] = Cart(owner_id="cart-bdd")


@given("the payment gateway is unavailable")
def _gateway_unavailable(gateway):
    gateway.configure(initialize_failure="unavailable")


@given(parsers.cfparse('the payment gateway reports the payment as "{status}"'))
def _gateway_reports(gateway, status):
    gateway.configure(verify_status=status, gateway_message=f"Transaction {status}")


def _submit(context, customer, code):
    context["result"] = CheckoutOrchestrator().submit(context["cart"], code, customer)
    context["reference"] = context["result"].order.reference


@given(parsers.cfparse('the customer has checked out with "{code}"'))
def _checked_out(context, customer, code):
    _submit(context, customer, code)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the customer checks out with "{code}"'))
def _checks_out(context, customer, code):
    _submit(context, customer, code)


@when(parsers.cfparse('the customer tries to check out with "{code}"'))
def _tries_to_check_out(context, customer, code):
    try:
        _submit(context, customer, code)
    except CheckoutError as exc:
        context["error"] = exc
        if exc.order is not None:
            context["reference"] = exc.order.reference


@when("the customer returns from the payment page")
def _returns(context):
    context["verification"] = VerificationHandler().handle_return(context["reference"])


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
def _stored_order(context):
    return get_order_store().find_by_reference(context["reference"])


@then(parsers.cfparse("the order total is {total:d}"))
def _order_total(context, total):
    assert _stored_order(context).pricing.total == total


@then("the customer is redirected to the payment page")
def _redirected(context):
    assert context["result"].next_action.value == "redirect"
    assert context["result"].redirect_url


@then("the customer is shown the bank account to pay into")
def _bank_details(context):
    instructions = context["result"].bank_transfer
    assert instructions is not None
    assert instructions.reference == context["reference"]


@then(parsers.cfparse('the order is "{status}" with payment "{payment_status}"'))
def _order_state(context, status, payment_status):
    order = _stored_order(context)
    assert order.status == status
    assert order.payment_status == payment_status


@then("the cart is cleared")
def _cart_cleared(cart_service):
    assert "cart-bdd" in cart_service.cleared


@then("the cart is cleared once")
def _cart_cleared_once(cart_service):
    assert cart_service.clear_count("cart-bdd") == 1


@then("the cart was not cleared")
def _cart_not_cleared(cart_service):
    assert cart_service.cleared == []


@then("the payment gateway was not contacted")
def _gateway_untouched(gateway):
    assert gateway.calls == []


@then("the payment was verified once")
def _verified_once(gateway):
    assert len(gateway.calls_to("verify")) == 1


@then(parsers.cfparse('checkout fails with "{kind}"'))
def _checkout_fails(context, kind):
    assert context["error"].kind == kind


@then("no order exists")
def _no_order():
    assert current_domain.repository_for(Order)._dao.query.all().items == []
