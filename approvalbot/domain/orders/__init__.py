"""Orders awaiting approval and the state machine that settles them."""
from .engine import ApprovalEngine
from .entities import (
    CallbackPayload,
    Order,
    OrderHandle,
    OrderStatus,
    ReplyOutcome,
    ReplyOutcomeKind,
    ResponseState,
)
from .store import OrderBackend, OrderStore
