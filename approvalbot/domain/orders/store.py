from typing import Protocol

from approvalbot.core.errors import PersistenceFailure
from approvalbot.observability.tracing import log_event

from .entities import Order


class OrderBackend(Protocol):
    def load(self) -> dict[str, Order]:
        """Read every persisted order"""
        ...

    def save(self, orders: dict[str, Order]) -> None:
        """Atomically replace the persisted orders with ``orders``"""
        ...


class OrderStore:
    """
    Active orders keyed by id, backed by an ``OrderBackend``.

    Mutating methods only touch memory. Callers make a change durable with
    ``flush()``, which writes the full snapshot through the backend.
    """

    def __init__(self, backend: OrderBackend) -> None:
        self._backend = backend
        self._orders: dict[str, Order] = {}

    def load(self) -> int:
        try:
            orders = self._backend.load()
        except PersistenceFailure:
            raise
        except Exception as exc:
            raise PersistenceFailure(f"Unable to load orders: {exc}") from exc

        self._orders = dict(orders)
        log_event("store.loaded", orders=len(self._orders))
        return len(self._orders)

    def get(self, order_id: str) -> Order | None:
        return self._orders.get(order_id)

    def find(self, order_id: str) -> Order | None:
        """Exact lookup, falling back to a unique case-insensitive match."""
        order = self._orders.get(order_id)
        if order is not None:
            return order

        folded = order_id.casefold()
        matches = [o for key, o in self._orders.items() if key.casefold() == folded]
        return matches[0] if len(matches) == 1 else None

    def conflicts(self, order_id: str) -> bool:
        """Whether an active order already owns ``order_id``, ignoring case."""
        folded = order_id.casefold()
        return any(key.casefold() == folded for key in self._orders)

    def put(self, order: Order) -> None:
        self._orders[order.id] = order

    def delete(self, order_id: str) -> Order | None:
        return self._orders.pop(order_id, None)

    def snapshot(self) -> dict[str, Order]:
        return {order_id: order.copy() for order_id, order in self._orders.items()}

    def flush(self) -> None:
        try:
            self._backend.save(self.snapshot())
        except PersistenceFailure:
            raise
        except Exception as exc:
            raise PersistenceFailure(f"Unable to persist orders: {exc}") from exc

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._orders

    def __len__(self) -> int:
        return len(self._orders)
