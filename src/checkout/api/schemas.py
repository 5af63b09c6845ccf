"""Pydantic request/response schemas for the Checkout API.

These are external contracts (anti-corruption layer), separate from the
internal Protean aggregates and commands. Amounts are integer minor units.
"""

from dataclasses import asdict

from pydantic import BaseModel, Field

from checkout.payment_method.payment_method import FeeType, PaymentMethodKind


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class CartLineSchema(BaseModel):
    product_id: str
    name: str
    unit_price: int = Field(ge=0)
    quantity: int = Field(ge=1)


class CustomerSchema(BaseModel):
    email: str = Field(min_length=3, max_length=254)
    name: str | None = None
    phone: str | None = None


class DeliverySchema(BaseModel):
    address_ref: str | None = None
    method: str | None = None


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    cart_id: str
    items: list[CartLineSchema] = Field(default_factory=list)
    payment_method_code: str
    customer: CustomerSchema
    delivery: DeliverySchema = Field(default_factory=DeliverySchema)
    customer_id: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "cart_id": "cart-001",
                    "items": [{"product_id": "prod-001", "name": "Rice 5kg", "unit_price": 500000, "quantity": 2}],
                    "payment_method_code": "card_paystack",
                    "customer": {"email": "ada@example.com", "name": "Ada Obi", "phone": "08030000000"},
                    "delivery": {"address_ref": "addr-001", "method": "home_delivery"},
                    "customer_id": "cust-001",
                }
            ]
        }
    }


class RegisterPaymentMethodRequest(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=100)
    kind: PaymentMethodKind
    description: str | None = None
    fee_type: FeeType = FeeType.FIXED
    fee_value: int = Field(default=0, ge=0)
    min_order_amount: int | None = Field(default=None, ge=0)
    max_order_amount: int | None = Field(default=None, ge=0)
    position: int = 0
    icon: str | None = None


class UpdateFeesRequest(BaseModel):
    fee_type: FeeType
    fee_value: int = Field(ge=0)
    min_order_amount: int | None = Field(default=None, ge=0)
    max_order_amount: int | None = Field(default=None, ge=0)


class ConfirmBankTransferRequest(BaseModel):
    confirmed_by: str | None = None


class ConfigureGatewayRequest(BaseModel):
    verify_status: str = "success"
    gateway_message: str = "Approved"
    initialize_failure: str | None = None
    verify_failure: str | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class PaymentMethodResponse(BaseModel):
    code: str
    name: str
    description: str | None = None
    kind: str
    requires_redirect: bool
    fee_type: str
    fee_value: int
    min_order_amount: int | None = None
    max_order_amount: int | None = None
    active: bool
    position: int
    icon: str | None = None

    @classmethod
    def from_method(cls, method) -> "PaymentMethodResponse":
        return cls(
            code=method.code,
            name=method.name,
            description=method.description,
            kind=method.kind,
            requires_redirect=bool(method.requires_redirect),
            fee_type=method.fee_type,
            fee_value=method.fee_value,
            min_order_amount=method.min_order_amount,
            max_order_amount=method.max_order_amount,
            active=bool(method.active),
            position=method.position or 0,
            icon=method.icon,
        )


class FeePreviewResponse(BaseModel):
    method_code: str
    fee_type: str
    fee_value: int
    amount: int
    fee: int
    total: int


class OrderItemResponse(BaseModel):
    product_id: str
    name: str
    unit_price: int
    quantity: int


class OrderResponse(BaseModel):
    id: str
    reference: str
    customer_id: str | None = None
    status: str
    payment_status: str
    payment_method_code: str
    payment_method_kind: str
    subtotal: int
    processing_fee: int
    total: int
    currency: str
    items: list[OrderItemResponse]
    delivery_address_ref: str | None = None
    delivery_method: str | None = None
    gateway_message: str | None = None
    failure_reason: str | None = None
    awaiting_bank_transfer: bool

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        return cls(
            id=str(order.id),
            reference=order.reference,
            customer_id=order.customer_id,
            status=order.status,
            payment_status=order.payment_status,
            payment_method_code=order.payment_method_code,
            payment_method_kind=order.payment_method_kind,
            subtotal=order.pricing.subtotal,
            processing_fee=order.pricing.processing_fee,
            total=order.pricing.total,
            currency=order.pricing.currency,
            items=[
                OrderItemResponse(
                    product_id=item.product_id,
                    name=item.name,
                    unit_price=item.unit_price,
                    quantity=item.quantity,
                )
                for item in order.items
            ],
            delivery_address_ref=order.delivery_address_ref,
            delivery_method=order.delivery_method,
            gateway_message=order.gateway_message,
            failure_reason=order.failure_reason,
            awaiting_bank_transfer=order.awaiting_bank_transfer,
        )


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    total: int
    page: int
    limit: int
    has_next: bool

    @classmethod
    def from_page(cls, page) -> "OrderListResponse":
        return cls(
            items=[OrderResponse.from_order(order) for order in page.orders],
            total=page.total,
            page=page.page,
            limit=page.limit,
            has_next=page.has_next,
        )


class BankTransferResponse(BaseModel):
    bank_name: str
    account_name: str
    account_number: str
    amount: int
    currency: str
    reference: str
    whatsapp_number: str
    whatsapp_link: str


class CheckoutResponse(BaseModel):
    next_action: str
    message: str
    order: OrderResponse
    redirect_url: str | None = None
    access_code: str | None = None
    bank_transfer: BankTransferResponse | None = None

    @classmethod
    def from_result(cls, result) -> "CheckoutResponse":
        bank_transfer = None
        if result.bank_transfer is not None:
            bank_transfer = BankTransferResponse(**asdict(result.bank_transfer))
        return cls(
            next_action=result.next_action.value,
            message=result.message,
            order=OrderResponse.from_order(result.order),
            redirect_url=result.redirect_url,
            access_code=result.access_code,
            bank_transfer=bank_transfer,
        )


class VerificationResponse(BaseModel):
    outcome: str
    message: str
    order: OrderResponse


class ErrorResponse(BaseModel):
    error: str
    message: str
    order: OrderResponse | None = None


class GatewayConfigResponse(BaseModel):
    verify_status: str
    gateway_message: str
    initialize_failure: str | None = None
    verify_failure: str | None = None
