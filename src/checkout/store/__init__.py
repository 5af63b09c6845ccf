"""Order store factory.

Provides get_order_store() / set_order_store() to swap implementations.
Defaults to the store backed by the active domain's Order repository.
"""

from checkout.store.port import OrderStore
from checkout.store.repository_adapter import RepositoryOrderStore

_current_store: OrderStore | None = None


def get_order_store() -> OrderStore:
    global _current_store
    if _current_store is None:
        _current_store = RepositoryOrderStore()
    return _current_store


def set_order_store(store: OrderStore) -> None:
    """Override the active order store (useful for tests)."""
    global _current_store
    _current_store = store


def reset_order_store() -> None:
    global _current_store
    _current_store = None
