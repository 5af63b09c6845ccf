"""Manual bank-transfer confirmation.

Bank transfers have no automated verification. Customers send their receipt
to the store on WhatsApp and an operator confirms the matching order.

Confirmation goes straight through the order store rather than a command
handler: the compare-and-set has to be committed while the store lock is
held, and a handler's unit of work would only commit after the lock is gone.
"""

from protean.exceptions import ValidationError

from checkout.errors import OrderNotFound
from checkout.order.order import Order, OrderState
from checkout.store import get_order_store
from checkout.store.port import OrderStore
from checkout.utils.logging import get_logger

logger = get_logger(__name__)


class BankTransferConfirmation:
    def __init__(self, store: OrderStore | None = None) -> None:
        self.store = store or get_order_store()

    def confirm(self, reference: str, confirmed_by: str | None = None) -> Order:
        """Mark a bank-transfer order as paid after the transfer was received.

        Only one of several concurrent confirmations for the same order
        succeeds; the others raise ``ValidationError``.
        """
        order = self.store.find_by_reference(reference)
        if order is None:
            raise OrderNotFound(reference)
        if not order.awaiting_bank_transfer:
            raise ValidationError({"reference": [f"Order {order.reference} is not awaiting a bank transfer"]})

        change = self.store.update_status(
            order.id,
            expected=OrderState.PENDING,
            target=OrderState.TRANSFER_CONFIRMED,
            confirmed_by=confirmed_by,
        )
        if not change.applied:
            raise ValidationError({"reference": [f"Order {order.reference} was settled while being confirmed"]})

        logger.info("bank_transfer_confirmed", reference=order.reference, confirmed_by=confirmed_by)
        return change.order
