"""Maps checkout errors to JSON responses.

Every error body names a stable error kind and, when the failure happened
on an existing order, includes that order so clients can offer a retry.
Protean's own exceptions are handled by protean's FastAPI integration.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers as register_protean_exception_handlers

from checkout.api.schemas import ErrorResponse, OrderResponse
from checkout.errors import (
    CheckoutError,
    CheckoutValidationError,
    GatewayRejected,
    GatewayUnavailable,
    InvalidReference,
    OrderNotFound,
    PaymentMethodNotFound,
)


def status_code_for(exc: CheckoutError) -> int:
    if isinstance(exc, OrderNotFound | PaymentMethodNotFound):
        return 404
    if isinstance(exc, InvalidReference):
        return 400
    if isinstance(exc, CheckoutValidationError):
        return 422
    if isinstance(exc, GatewayUnavailable):
        return 503
    if isinstance(exc, GatewayRejected):
        return 502
    return 500


async def checkout_error_handler(request: Request, exc: CheckoutError) -> JSONResponse:  # noqa: ARG001
    body = ErrorResponse(
        error=exc.kind,
        message=exc.message,
        order=OrderResponse.from_order(exc.order) if exc.order is not None else None,
    )
    headers = {"Retry-After": "5"} if exc.retryable else None
    return JSONResponse(status_code=status_code_for(exc), content=body.model_dump(), headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    register_protean_exception_handlers(app)
    app.add_exception_handler(CheckoutError, checkout_error_handler)
