"""Cart collaborator port.

Carts are owned by another service. Checkout reads a snapshot of one and
only ever asks for it to be emptied once its contents have become a
confirmed order.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CartLine:
    product_id: str
    name: str
    unit_price: int
    quantity: int

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class Cart:
    """Cart contents at the moment the customer pressed "place order"."""

    owner_id: str
    lines: tuple[CartLine, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def subtotal(self) -> int:
        return sum(line.line_total for line in self.lines)


class CartService(ABC):
    @abstractmethod
    def clear(self, owner_id: str) -> None:
        """Empty the cart belonging to ``owner_id``."""
        ...
