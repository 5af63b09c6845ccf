"""Checkout bounded context — Payment Orchestration and Order Lifecycle.

Turns a cart into a trackable order and drives it to a terminal state through
one of three payment paths: hosted-redirect card gateway, manual bank
transfer, or cash on delivery. Payment methods are configuration held in the
same context and read through the payment-method catalog.
"""

from protean.domain import Domain

from checkout.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

checkout = Domain(name="checkout")
