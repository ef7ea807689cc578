"""Order intake: deliver an approval request and register it.

Creation is all-or-nothing with respect to the store: every recipient is
messaged first, and the order is only registered and flushed once all sends
succeeded. Messages already sent before a failure are not recalled.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from approvalbot.core.errors import InvalidRequest, PersistenceFailure, TransportUnavailable
from approvalbot.domain import identity
from approvalbot.domain.orders import ApprovalEngine, Order, OrderHandle
from approvalbot.infrastructure.transport import ImageSource, MessagingTransport
from approvalbot.observability.tracing import log_event, new_trace_id


@dataclass(frozen=True)
class Attachments:
    identity: str | None = None
    flight_ticket: str | None = None
    hotel_ticket: str | None = None

    def ordered(self) -> list[tuple[str, str]]:
        """(value, caption) pairs in delivery order, skipping empty slots."""
        slots = [
            (self.identity, "🪪 Passport"),
            (self.flight_ticket, "✈️ Flight Ticket"),
            (self.hotel_ticket, "🏨 Hotel Ticket"),
        ]
        return [(value, caption) for value, caption in slots if value]


class OrderIntakeService:
    """Entry points consumed by the HTTP front door."""

    def __init__(self, *, engine: ApprovalEngine, transport: MessagingTransport) -> None:
        self._engine = engine
        self._transport = transport

    async def create_order(
        self,
        order_id: str | None,
        recipients: list[str] | None,
        message: str | None,
        attachments: Attachments | None = None,
        callback_url: str | None = None,
    ) -> OrderHandle:
        """Send an approval request to every recipient and register the order.

        Raises:
            InvalidRequest: Missing id/recipients/message, a malformed
                recipient, or an id that is already pending (in any letter case).
            TransportUnavailable: The messaging transport is not connected.
            TransportError: A send failed; nothing was registered.
            PersistenceFailure: The store could not be flushed; nothing was registered.
        """
        if not order_id or not recipients or not message:
            raise InvalidRequest("orderId, recipients and message are required")

        keys: list[str] = []
        for raw in recipients:
            key = identity.delivery_address(raw)
            if not identity.is_valid(key):
                raise InvalidRequest(f"Invalid recipient address: {raw!r}")
            if key not in keys:
                keys.append(key)

        if self._engine.store.conflicts(order_id):
            raise InvalidRequest(f"Order {order_id} is already pending")

        await self._require_ready()

        trace_id = new_trace_id()
        images = [
            (ImageSource.parse(value), caption)
            for value, caption in (attachments or Attachments()).ordered()
        ]
        log_event(
            "order.intake.start",
            trace_id=trace_id,
            order_id=order_id,
            recipients=keys,
            attachments=len(images),
        )

        try:
            for key in keys:
                await self._transport.send_text(key, message)
                for image, caption in images:
                    await self._transport.send_image(key, image, caption)
        except Exception as exc:
            log_event("order.intake.send_failed", trace_id=trace_id, order_id=order_id, error=str(exc))
            raise

        async with self._engine.lock:
            if self._engine.store.conflicts(order_id):
                raise InvalidRequest(f"Order {order_id} is already pending")

            self._engine.store.put(Order.new(order_id, keys, callback_url=callback_url))
            try:
                self._engine.store.flush()
            except PersistenceFailure as exc:
                self._engine.store.delete(order_id)
                log_event("order.intake.persistence_failed", trace_id=trace_id, order_id=order_id, error=str(exc))
                raise

        log_event("order.intake.registered", trace_id=trace_id, order_id=order_id)
        return OrderHandle(order_id=order_id, recipients=keys)

    async def send_message(self, to: str | None, text: str | None) -> dict[str, Any]:
        if not to or not text:
            raise InvalidRequest("to and text are required")

        address = identity.delivery_address(to)
        if not identity.is_valid(address):
            raise InvalidRequest(f"Invalid recipient address: {to!r}")

        await self._require_ready()
        await self._transport.send_text(address, text)
        log_event("message.sent", to=address)
        return {"success": True, "to": to, "text": text}

    async def get_status(self) -> dict[str, Any]:
        return {"connected": await self._transport.is_ready()}

    async def logout(self) -> None:
        await self._transport.logout()
        log_event("session.logout")

    async def _require_ready(self) -> None:
        if not await self._transport.is_ready():
            raise TransportUnavailable("Messaging transport is not connected")
