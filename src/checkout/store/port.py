"""Order store port (abstract interface).

The only shared mutable resource of the checkout. Every mutation is a
single-order read-modify-write; status changes are compare-and-set so
duplicate or concurrent gateway callbacks apply at most once.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from checkout.order.order import Order, OrderState

MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class StatusChange:
    """Outcome of a compare-and-set status update."""

    order: Order
    applied: bool


@dataclass(frozen=True)
class OrderPage:
    """One page of an order listing."""

    orders: list[Order]
    total: int
    page: int
    limit: int

    @property
    def has_next(self) -> bool:
        return self.page * self.limit < self.total


class OrderStore(ABC):
    """Abstract order persistence interface."""

    @abstractmethod
    def create(self, order: Order) -> Order:
        """Persist a new order. It is visible to lookups once this returns."""
        ...

    @abstractmethod
    def find_by_id(self, order_id: str) -> Order | None: ...

    @abstractmethod
    def find_by_reference(self, reference: str) -> Order | None: ...

    @abstractmethod
    def update_status(self, order_id: str, expected: OrderState, target: OrderState, **details) -> StatusChange:
        """Move the order to ``target`` only if it is currently in ``expected``.

        ``details`` are passed to the transition (reason, gateway_message,
        confirmed_by). When the order is not in ``expected`` nothing changes
        and the stored order is returned with ``applied=False``.
        """
        ...

    @abstractmethod
    def record_payment_session(self, order_id: str, access_code: str, redirect_url: str) -> Order:
        """Store the gateway session opened for a pending hosted-card order."""
        ...

    @abstractmethod
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
        """Orders matching every filter given, ``limit`` per 1-indexed ``page``.

        ``sort`` is one of ``newest``, ``oldest``, ``total_desc`` or
        ``total_asc``. The ``created_*`` bounds are inclusive.
        """
        ...
