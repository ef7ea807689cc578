"""Reply command grammar.

Recipients answer an order by typing one of::

    APPROVE <ORDER_ID>
    REJECT <ORDER_ID> [reason...]

The action keyword is case-insensitive. The order id is a single
non-whitespace token and the reason is whatever follows it on the line.
Anything else parses to ``Unrecognized``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class Action(str, Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"


@dataclass(frozen=True)
class Intent:
    action: Action
    order_id: str
    reason: str | None = None


@dataclass(frozen=True)
class Unrecognized:
    text: str


_COMMAND = re.compile(r"^(APPROVE|REJECT)\s+(\S+)(?:\s+(.*))?$", re.IGNORECASE)


def parse(raw_text: str | None) -> Intent | Unrecognized:
    """Parse an inbound chat text into an ``Intent``.

    Examples:
        >>> parse("reject INV-2 wrong dates")
        Intent(action=<Action.REJECT: 'REJECT'>, order_id='INV-2', reason='wrong dates')
        >>> parse("HELLO")
        Unrecognized(text='HELLO')
    """
    text = (raw_text or "").strip()
    match = _COMMAND.match(text)
    if match is None:
        return Unrecognized(text=text)

    action, order_id, rest = match.groups()
    reason = rest.strip() if rest else None

    return Intent(
        action=Action(action.upper()),
        order_id=order_id,
        reason=reason or None,
    )
