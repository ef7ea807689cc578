from approvalbot.domain.orders.entities import Order


class InMemoryOrderBackend:
    def __init__(self, orders: dict[str, Order] | None = None):
        self._orders = {k: v.copy() for k, v in (orders or {}).items()}
        self.saves = 0

    def load(self) -> dict[str, Order]:
        return {k: v.copy() for k, v in self._orders.items()}

    def save(self, orders: dict[str, Order]) -> None:
        self._orders = {k: v.copy() for k, v in orders.items()}
        self.saves += 1
