"""Route inbound chat events to the approval engine."""

from __future__ import annotations

from pydantic import BaseModel

from approvalbot.core.errors import TransportError, TransportUnavailable
from approvalbot.domain import identity
from approvalbot.domain.commands import Unrecognized, parse
from approvalbot.domain.orders import ApprovalEngine, ReplyOutcome
from approvalbot.infrastructure.transport import MessagingTransport
from approvalbot.observability.tracing import log_event, new_trace_id


class InboundMessage(BaseModel):
    """A chat message event as pushed by the messaging gateway."""

    sender: str
    text: str | None = None
    caption: str | None = None
    from_me: bool = False

    def body(self) -> str:
        for candidate in (self.text, self.caption):
            if candidate and candidate.strip():
                return candidate.strip()
        return ""


class InboundRouter:
    def __init__(self, *, engine: ApprovalEngine, transport: MessagingTransport) -> None:
        self._engine = engine
        self._transport = transport

    async def handle(self, event: InboundMessage) -> ReplyOutcome | None:
        """Process one inbound event.

        Events may arrive duplicated and in any order; repeated replies are
        absorbed by the engine's outcome checks.
        """
        if event.from_me:
            return None

        text = event.body()
        sender = identity.normalize(event.sender)
        if not text or not identity.is_valid(sender):
            return None

        trace_id = new_trace_id()
        intent = parse(text)
        if isinstance(intent, Unrecognized):
            log_event("inbound.unrecognized", trace_id=trace_id, sender=sender, text=text)
            return None

        outcome = await self._engine.apply_reply(intent.order_id, sender, intent, trace_id=trace_id)

        if outcome.ack_text:
            try:
                await self._transport.send_text(sender, outcome.ack_text)
            except (TransportError, TransportUnavailable) as exc:
                log_event("inbound.ack_failed", trace_id=trace_id, sender=sender, error=str(exc))

        return outcome
