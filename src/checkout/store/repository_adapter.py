"""Order store backed by the protean repository for Order.

Each call runs outside any unit of work, so ``create`` is committed before
it returns. Read-modify-write sequences are serialized by a store-wide lock
that only ever covers repository access, never a gateway call.
"""

import threading
from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from checkout.errors import OrderNotFound
from checkout.order.order import Order, OrderState, OrderStatus, PaymentStatus
from checkout.order.repository import ORDER_SORTS
from checkout.store.port import MAX_PAGE_SIZE, OrderPage, OrderStore, StatusChange
from checkout.utils.logging import get_logger

logger = get_logger(__name__)


class RepositoryOrderStore(OrderStore):
    def __init__(self) -> None:
        self._lock = threading.Lock()

    @property
    def _repository(self):
        return current_domain.repository_for(Order)

    def create(self, order: Order) -> Order:
        with self._lock:
            self._repository.add(order)
        logger.info("order_created", order_id=str(order.id), reference=order.reference)
        return order

    def find_by_id(self, order_id: str) -> Order | None:
        try:
            return self._repository.get(order_id)
        except ObjectNotFoundError:
            return None

    def find_by_reference(self, reference: str) -> Order | None:
        return self._repository.find_by_reference(reference)

    def _load(self, order_id: str) -> Order:
        order = self.find_by_id(order_id)
        if order is None:
            raise OrderNotFound(str(order_id))
        return order

    def update_status(self, order_id: str, expected: OrderState, target: OrderState, **details) -> StatusChange:
        with self._lock:
            order = self._load(order_id)
            if order.state != expected:
                logger.info(
                    "order_status_unchanged",
                    reference=order.reference,
                    expected=expected.describe(),
                    actual=order.state.describe(),
                )
                return StatusChange(order=order, applied=False)

            order.transition_to(target, **details)
            self._repository.add(order)

        logger.info(
            "order_status_changed",
            reference=order.reference,
            from_state=expected.describe(),
            to_state=target.describe(),
        )
        return StatusChange(order=order, applied=True)

    def record_payment_session(self, order_id: str, access_code: str, redirect_url: str) -> Order:
        with self._lock:
            order = self._load(order_id)
            order.record_payment_session(access_code=access_code, redirect_url=redirect_url)
            self._repository.add(order)
        return order

    def list_orders(
        self,
        customer_id: str | None = None,
        status: str | None = None,
        payment_status: str | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
        page: int = 1,
        limit: int = 20,
        sort: str = "newest",
    ) -> OrderPage:
        errors = {}
        if status and status not in {item.value for item in OrderStatus}:
            errors["status"] = [f"Unknown order status '{status}'"]
        if payment_status and payment_status not in {item.value for item in PaymentStatus}:
            errors["payment_status"] = [f"Unknown payment status '{payment_status}'"]
        if sort not in ORDER_SORTS:
            errors["sort"] = [f"Sort must be one of {', '.join(ORDER_SORTS)}"]
        if page < 1:
            errors["page"] = ["Page numbers start at 1"]
        if not 1 <= limit <= MAX_PAGE_SIZE:
            errors["limit"] = [f"Limit must be between 1 and {MAX_PAGE_SIZE}"]
        if errors:
            raise ValidationError(errors)

        results = self._repository.search(
            customer_id=customer_id,
            status=status,
            payment_status=payment_status,
            created_from=_as_utc(created_from),
            created_to=_as_utc(created_to),
            sort=sort,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return OrderPage(orders=list(results.items), total=results.total, page=page, limit=limit)


def _as_utc(moment: datetime | None) -> datetime | None:
    # Orders are stamped in UTC; a naive bound is read as UTC too.
    if moment is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment
