"""Approval state machine.

Applies a recipient's parsed reply to an order:

    lookup -> membership -> first-answer check -> mutate -> settle -> flush

All reads and writes of the order store happen under one lock, so two
replies can never interleave their read-modify-persist sequence. The webhook
callback is scheduled only after the lock is released and the store is
durable; it runs detached and never affects the outcome.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from approvalbot.core.errors import PersistenceFailure
from approvalbot.domain import identity
from approvalbot.domain.commands import Action, Intent
from approvalbot.observability.tracing import log_event

from .entities import (
    CallbackPayload,
    Order,
    OrderStatus,
    ReplyOutcome,
    ReplyOutcomeKind,
    ResponseState,
    state_to_wire,
)
from .store import OrderStore


class CallbackNotifier(Protocol):
    def notify(self, callback_url: str, payload: CallbackPayload, *, trace_id: str | None = None) -> None:
        ...


def _ack_not_found(order_id: str) -> str:
    return f"❌ Order {order_id} not found."


def _ack_already_responded(order_id: str) -> str:
    return f"⚠️ You have already responded to order #{order_id}."


def _ack_applied(order_id: str, action: Action, reason: str | None) -> str:
    if action == Action.APPROVE:
        text = f"✅ You approved order #{order_id}"
    else:
        text = f"❌ You rejected order #{order_id}"
    if reason:
        text += f"\n📝 Reason: {reason}"
    return text


def _match_recipient(order: Order, key: str) -> str | None:
    if key in order.recipients:
        return key
    # Orders loaded from older files may carry keys in a non-canonical form.
    for stored in order.recipients:
        if identity.normalize(stored) == key:
            return stored
    return None


class ApprovalEngine:
    """Owns every mutation of the order store."""

    def __init__(
        self,
        *,
        store: OrderStore,
        callbacks: CallbackNotifier,
        settle_mixed: bool = True,
    ) -> None:
        self._store = store
        self._callbacks = callbacks
        self._settle_mixed = settle_mixed
        self._lock = asyncio.Lock()

    @property
    def store(self) -> OrderStore:
        return self._store

    @property
    def lock(self) -> asyncio.Lock:
        return self._lock

    async def apply_reply(
        self,
        order_id: str,
        recipient_raw_address: str,
        intent: Intent,
        *,
        trace_id: str | None = None,
    ) -> ReplyOutcome:
        """Apply ``intent`` from ``recipient_raw_address`` to an order.

        Args:
            order_id: Order id as typed by the recipient.
            recipient_raw_address: Sender address as reported by the transport.
            intent: Parsed reply.
            trace_id: Optional trace id for log correlation.

        Returns:
            The outcome, including the acknowledgement text to send back
            (``None`` when the sender must not get a reply).

        Raises:
            PersistenceFailure: If the store could not be flushed. The
                in-memory change is rolled back before raising.
        """
        sender = identity.normalize(recipient_raw_address)

        async with self._lock:
            order = self._store.find(order_id)
            if order is None:
                log_event("reply.order_not_found", trace_id=trace_id, order_id=order_id, sender=sender)
                return ReplyOutcome(
                    kind=ReplyOutcomeKind.ORDER_NOT_FOUND,
                    order_id=order_id,
                    ack_text=_ack_not_found(order_id),
                )

            key = _match_recipient(order, sender) if identity.is_valid(sender) else None
            if key is None:
                log_event("reply.not_a_recipient", trace_id=trace_id, order_id=order.id, sender=sender)
                return ReplyOutcome(
                    kind=ReplyOutcomeKind.NOT_A_RECIPIENT,
                    order_id=order.id,
                    status=order.status,
                )

            if order.recipients[key] != ResponseState.UNANSWERED:
                log_event(
                    "reply.already_responded",
                    trace_id=trace_id,
                    order_id=order.id,
                    sender=key,
                    state=order.recipients[key].value,
                )
                return ReplyOutcome(
                    kind=ReplyOutcomeKind.ALREADY_RESPONDED,
                    order_id=order.id,
                    status=order.status,
                    ack_text=_ack_already_responded(order.id),
                )

            before = order.copy()
            if intent.action == Action.APPROVE:
                new_state, reason = ResponseState.APPROVED, None
            else:
                new_state, reason = ResponseState.REJECTED, intent.reason
            order.recipients[key] = new_state
            order.reject_reasons[key] = reason

            order.status = order.derive_status(settle_mixed=self._settle_mixed)
            settled = order.status != OrderStatus.PENDING
            if settled:
                self._store.delete(order.id)

            try:
                self._store.flush()
            except PersistenceFailure as exc:
                self._store.put(before)
                log_event("reply.persistence_failed", trace_id=trace_id, order_id=order.id, error=str(exc))
                raise

            log_event(
                "reply.applied",
                trace_id=trace_id,
                order_id=order.id,
                sender=key,
                state=new_state.value,
                status=order.status.value,
                recipients={k: v.value for k, v in order.recipients.items()},
            )
            if settled:
                log_event("order.settled", trace_id=trace_id, order_id=order.id, status=order.status.value)

            callback_url = order.callback_url
            payload = CallbackPayload(
                orderId=order.id,
                user=identity.clean_user(sender),
                status=state_to_wire(new_state),
                reject_reason=reason,
            )

        if callback_url:
            self._callbacks.notify(callback_url, payload, trace_id=trace_id)

        return ReplyOutcome(
            kind=ReplyOutcomeKind.APPLIED,
            order_id=order.id,
            status=order.status,
            settled=settled,
            ack_text=_ack_applied(order.id, intent.action, reason),
        )
