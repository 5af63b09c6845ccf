"""FastAPI routes for the Checkout domain — payment methods, checkout and orders."""

import os
from datetime import datetime

from fastapi import APIRouter, HTTPException, Query
from protean.utils.globals import current_domain

from checkout.api.schemas import (
    CheckoutRequest,
    CheckoutResponse,
    ConfigureGatewayRequest,
    ConfirmBankTransferRequest,
    FeePreviewResponse,
    GatewayConfigResponse,
    OrderListResponse,
    OrderResponse,
    PaymentMethodResponse,
    RegisterPaymentMethodRequest,
    UpdateFeesRequest,
    VerificationResponse,
)
from checkout.cart.port import Cart, CartLine
from checkout.errors import OrderNotFound
from checkout.flow.orchestrator import CheckoutOrchestrator
from checkout.flow.requests import CustomerInfo, DeliveryDetails
from checkout.flow.verification import VerificationHandler
from checkout.gateway import get_gateway
from checkout.gateway.fake_adapter import FakeGateway
from checkout.order.bank_transfer import BankTransferConfirmation
from checkout.payment_method.catalog import PaymentMethodCatalog
from checkout.payment_method.management import (
    RegisterPaymentMethod,
    TogglePaymentMethod,
    UpdatePaymentMethodFees,
)
from checkout.payment_method.payment_method import PaymentMethod
from checkout.store import get_order_store
from checkout.store.port import MAX_PAGE_SIZE

# ---------------------------------------------------------------------------
# Payment Method Router
# ---------------------------------------------------------------------------
payment_method_router = APIRouter(prefix="/payment-methods", tags=["payment-methods"])


@payment_method_router.get("", response_model=list[PaymentMethodResponse])
async def list_payment_methods() -> list[PaymentMethodResponse]:
    """Payment methods currently offered at checkout, in display order."""
    return [PaymentMethodResponse.from_method(method) for method in PaymentMethodCatalog().list_active()]


@payment_method_router.get("/fee", response_model=FeePreviewResponse)
async def preview_fee(
    method_code: str = Query(..., min_length=1),
    amount: int = Query(..., ge=0),
) -> FeePreviewResponse:
    """Processing fee and total for an order amount with the given method."""
    return FeePreviewResponse(**PaymentMethodCatalog().preview_fee(method_code, amount))


@payment_method_router.post("", status_code=201, response_model=PaymentMethodResponse)
async def register_payment_method(body: RegisterPaymentMethodRequest) -> PaymentMethodResponse:
    command = RegisterPaymentMethod(
        code=body.code,
        name=body.name,
        kind=body.kind.value,
        description=body.description,
        fee_type=body.fee_type.value,
        fee_value=body.fee_value,
        min_order_amount=body.min_order_amount,
        max_order_amount=body.max_order_amount,
        position=body.position,
        icon=body.icon,
    )
    method_id = current_domain.process(command, asynchronous=False)
    return PaymentMethodResponse.from_method(current_domain.repository_for(PaymentMethod).get(method_id))


@payment_method_router.put("/{code}/fees", response_model=PaymentMethodResponse)
async def update_payment_method_fees(code: str, body: UpdateFeesRequest) -> PaymentMethodResponse:
    command = UpdatePaymentMethodFees(
        code=code,
        fee_type=body.fee_type.value,
        fee_value=body.fee_value,
        min_order_amount=body.min_order_amount,
        max_order_amount=body.max_order_amount,
    )
    method_id = current_domain.process(command, asynchronous=False)
    return PaymentMethodResponse.from_method(current_domain.repository_for(PaymentMethod).get(method_id))


@payment_method_router.put("/{code}/toggle", response_model=PaymentMethodResponse)
async def toggle_payment_method(code: str) -> PaymentMethodResponse:
    method_id = current_domain.process(TogglePaymentMethod(code=code), asynchronous=False)
    return PaymentMethodResponse.from_method(current_domain.repository_for(PaymentMethod).get(method_id))


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("", status_code=201, response_model=CheckoutResponse)
def submit_checkout(body: CheckoutRequest) -> CheckoutResponse:
    """Place an order for the cart and start payment with the chosen method."""
    cart = Cart(
        owner_id=body.cart_id,
        lines=tuple(
            CartLine(
                product_id=line.product_id,
                name=line.name,
                unit_price=line.unit_price,
                quantity=line.quantity,
            )
            for line in body.items
        ),
    )
    result = CheckoutOrchestrator().submit(
        cart=cart,
        method_code=body.payment_method_code,
        customer=CustomerInfo(email=body.customer.email, name=body.customer.name, phone=body.customer.phone),
        delivery=DeliveryDetails(address_ref=body.delivery.address_ref, method=body.delivery.method),
        customer_id=body.customer_id,
    )
    return CheckoutResponse.from_result(result)


@checkout_router.get("/verify", response_model=VerificationResponse)
def verify_payment(
    reference: str | None = Query(default=None),
    trxref: str | None = Query(default=None),
) -> VerificationResponse:
    """Return URL the payment gateway sends the customer back to."""
    result = VerificationHandler().handle_return(reference or trxref)
    return VerificationResponse(
        outcome=result.outcome.value,
        message=result.message,
        order=OrderResponse.from_order(result.order),
    )


@checkout_router.post("/{reference}/resume", response_model=CheckoutResponse)
def resume_payment(reference: str) -> CheckoutResponse:
    """Redirect details of the payment session already opened for an order."""
    return CheckoutResponse.from_result(CheckoutOrchestrator().resume_payment(reference))


@checkout_router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only)."""
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    try:
        gateway.configure(
            verify_status=body.verify_status,
            gateway_message=body.gateway_message,
            initialize_failure=body.initialize_failure,
            verify_failure=body.verify_failure,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return GatewayConfigResponse(
        verify_status=gateway.verify_status,
        gateway_message=gateway.gateway_message,
        initialize_failure=gateway.initialize_failure,
        verify_failure=gateway.verify_failure,
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=OrderListResponse)
async def list_orders(
    customer_id: str | None = Query(default=None),
    status: str | None = Query(default=None),
    payment_status: str | None = Query(default=None),
    created_from: datetime | None = Query(default=None),
    created_to: datetime | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=MAX_PAGE_SIZE),
    sort: str = Query(default="newest"),
) -> OrderListResponse:
    """Orders filtered by customer, status and creation date, one page at a time."""
    page_of_orders = get_order_store().list_orders(
        customer_id=customer_id,
        status=status,
        payment_status=payment_status,
        created_from=created_from,
        created_to=created_to,
        page=page,
        limit=limit,
        sort=sort,
    )
    return OrderListResponse.from_page(page_of_orders)


@order_router.get("/{reference}", response_model=OrderResponse)
async def get_order(reference: str) -> OrderResponse:
    order = get_order_store().find_by_reference(reference)
    if order is None:
        raise OrderNotFound(reference)
    return OrderResponse.from_order(order)


@order_router.put("/{reference}/bank-transfer/confirm", response_model=OrderResponse)
async def confirm_bank_transfer(reference: str, body: ConfirmBankTransferRequest) -> OrderResponse:
    """Mark a bank-transfer order as paid once the transfer has been matched."""
    order = BankTransferConfirmation().confirm(reference, confirmed_by=body.confirmed_by)
    return OrderResponse.from_order(order)
