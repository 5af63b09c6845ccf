"""In-process cart collaborator for development and testing."""

from checkout.cart.port import CartService
from checkout.utils.logging import get_logger

logger = get_logger(__name__)


class FakeCart(CartService):
    """Records clear requests instead of calling a cart service."""

    def __init__(self) -> None:
        self.cleared: list[str] = []

    def clear(self, owner_id: str) -> None:
        self.cleared.append(owner_id)
        logger.info("cart_cleared", owner_id=owner_id)

    def clear_count(self, owner_id: str) -> int:
        return self.cleared.count(owner_id)
