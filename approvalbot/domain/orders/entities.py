# ============================================================
# Business/domain entities
# ============================================================
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel


class ResponseState(str, Enum):
    UNANSWERED = "unanswered"
    APPROVED = "approved"
    REJECTED = "rejected"


class OrderStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    MIXED = "mixed"


class ReplyOutcomeKind(str, Enum):
    APPLIED = "applied"
    ORDER_NOT_FOUND = "order_not_found"
    NOT_A_RECIPIENT = "not_a_recipient"
    ALREADY_RESPONDED = "already_responded"


# Wire values used in orders.json and in webhook payloads.
_STATE_TO_WIRE: dict[ResponseState, str | None] = {
    ResponseState.UNANSWERED: None,
    ResponseState.APPROVED: "yes",
    ResponseState.REJECTED: "no",
}
_WIRE_TO_STATE: dict[str | None, ResponseState] = {
    None: ResponseState.UNANSWERED,
    "yes": ResponseState.APPROVED,
    "no": ResponseState.REJECTED,
    **{state.value: state for state in ResponseState},
}


def state_to_wire(state: ResponseState) -> str | None:
    return _STATE_TO_WIRE[state]


def state_from_wire(value: str | None) -> ResponseState:
    try:
        return _WIRE_TO_STATE[value]
    except KeyError:
        raise ValueError(f"Unknown recipient state: {value!r}") from None


@dataclass
class Order:
    id: str
    recipients: dict[str, ResponseState]
    callback_url: str | None = None
    status: OrderStatus = OrderStatus.PENDING
    reject_reasons: dict[str, str | None] = field(default_factory=dict)

    @classmethod
    def new(cls, order_id: str, recipient_keys: list[str], callback_url: str | None = None) -> Order:
        return cls(
            id=order_id,
            recipients={key: ResponseState.UNANSWERED for key in recipient_keys},
            callback_url=callback_url,
        )

    def copy(self) -> Order:
        return replace(
            self,
            recipients=dict(self.recipients),
            reject_reasons=dict(self.reject_reasons),
        )

    def derive_status(self, *, settle_mixed: bool) -> OrderStatus:
        """Status implied by the current recipient states.

        Unanimous answers settle the order. When everyone has answered but
        the answers disagree, the order settles as ``MIXED`` only if
        ``settle_mixed`` is set; otherwise it stays pending.
        """
        states = set(self.recipients.values())
        if ResponseState.UNANSWERED in states or not states:
            return OrderStatus.PENDING
        if states == {ResponseState.APPROVED}:
            return OrderStatus.APPROVED
        if states == {ResponseState.REJECTED}:
            return OrderStatus.REJECTED
        return OrderStatus.MIXED if settle_mixed else OrderStatus.PENDING

    def to_record(self) -> dict[str, Any]:
        return {
            "recipients": {key: state_to_wire(state) for key, state in self.recipients.items()},
            "rejectReasons": dict(self.reject_reasons),
            "callbackUrl": self.callback_url,
            "status": self.status.value,
        }

    @classmethod
    def from_record(cls, order_id: str, record: dict[str, Any]) -> Order:
        return cls(
            id=order_id,
            recipients={
                key: state_from_wire(value)
                for key, value in (record.get("recipients") or {}).items()
            },
            callback_url=record.get("callbackUrl"),
            status=OrderStatus(record.get("status") or OrderStatus.PENDING.value),
            reject_reasons=dict(record.get("rejectReasons") or {}),
        )


@dataclass(frozen=True)
class OrderHandle:
    order_id: str
    recipients: list[str]


@dataclass(frozen=True)
class ReplyOutcome:
    kind: ReplyOutcomeKind
    order_id: str
    status: OrderStatus | None = None
    settled: bool = False
    ack_text: str | None = None


class CallbackPayload(BaseModel):
    """Body posted to the caller's webhook for one recipient's answer."""

    orderId: str
    user: str
    status: Literal["yes", "no"]
    reject_reason: str | None = None
