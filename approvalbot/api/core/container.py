# --------------------------------
# DI container
# --------------------------------
from functools import lru_cache
from pathlib import Path

from approvalbot.config import Settings, settings as app_settings
from approvalbot.domain.orders import ApprovalEngine, OrderBackend, OrderStore
from approvalbot.infrastructure.callbacks import HttpCallbackDispatcher
from approvalbot.infrastructure.persistence import JsonFileOrderBackend, SqlOrderBackend
from approvalbot.infrastructure.transport import HttpGatewayTransport, MessagingTransport
from approvalbot.services.inbound import InboundRouter
from approvalbot.services.intake import OrderIntakeService


def build_backend(settings: Settings) -> OrderBackend:
    if settings.store_backend == "sql":
        return SqlOrderBackend.from_url(settings.database_url)
    return JsonFileOrderBackend(path=Path(settings.order_file))


class Container:
    def __init__(
        self,
        settings: Settings,
        *,
        backend: OrderBackend | None = None,
        transport: MessagingTransport | None = None,
        callbacks: HttpCallbackDispatcher | None = None,
    ):
        self._settings = settings
        self._store = OrderStore(backend or build_backend(settings))
        self._callbacks = callbacks or HttpCallbackDispatcher(timeout=settings.callback_timeout)
        self._transport = transport or HttpGatewayTransport(
            base_url=settings.gateway_base_url,
            api_key=settings.gateway_api_key,
        )
        self._engine = ApprovalEngine(
            store=self._store,
            callbacks=self._callbacks,
            settle_mixed=settings.settle_mixed_orders,
        )
        self._intake = OrderIntakeService(engine=self._engine, transport=self._transport)
        self._inbound = InboundRouter(engine=self._engine, transport=self._transport)

    def startup(self) -> None:
        """Load persisted orders, including ones left pending."""
        self._store.load()

    async def shutdown(self) -> None:
        await self._callbacks.aclose()

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def engine(self) -> ApprovalEngine:
        return self._engine

    @property
    def intake(self) -> OrderIntakeService:
        return self._intake

    @property
    def inbound(self) -> InboundRouter:
        return self._inbound

    @property
    def callbacks(self) -> HttpCallbackDispatcher:
        return self._callbacks


def get_settings() -> Settings:
    return app_settings


@lru_cache
def get_container() -> Container:
    return Container(get_settings())
