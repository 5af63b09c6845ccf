"""Checkout domain API package."""

from checkout.api.errors import register_exception_handlers
from checkout.api.routes import checkout_router, order_router, payment_method_router

__all__ = ["checkout_router", "order_router", "payment_method_router", "register_exception_handlers"]
