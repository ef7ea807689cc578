"""Webhook callback dispatcher.

Each accepted reply is reported to the order's ``callbackUrl`` as a JSON POST.
Delivery is best effort and at most once:
- the POST runs as a detached task, so the reply flow never waits on it
- any failure (HTTP status, timeout, connection error) is logged and dropped
- there are no retries
"""

from __future__ import annotations

import asyncio

import httpx

from approvalbot.domain.orders.entities import CallbackPayload
from approvalbot.observability.tracing import Span, log_event, new_trace_id


class HttpCallbackDispatcher:
    """Post callback payloads with httpx, fire-and-forget."""

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = 10.0) -> None:
        """Create a dispatcher.

        Args:
            client: Optional injected httpx client for testing / transport control.
                When omitted the dispatcher owns a client and closes it in ``aclose``.
            timeout: Per-request timeout in seconds; an expired attempt counts as a failure.
        """
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self._tasks: set[asyncio.Task[None]] = set()

    def notify(self, callback_url: str, payload: CallbackPayload, *, trace_id: str | None = None) -> None:
        """Schedule the POST and return immediately."""
        task = asyncio.create_task(self._post(callback_url, payload, trace_id or new_trace_id()))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait for every scheduled callback to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def aclose(self) -> None:
        await self.drain()
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def _post(self, callback_url: str, payload: CallbackPayload, trace_id: str) -> bool:
        span = Span(name="callback.post", trace_id=trace_id, attributes={"url": callback_url})
        try:
            resp = await self._get_client().post(
                callback_url,
                json=payload.model_dump(),
                timeout=self._timeout,
            )
            resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            span.end()
            log_event(
                "callback.failed",
                trace_id=trace_id,
                span=span,
                order_id=payload.orderId,
                user=payload.user,
                error=f"{type(exc).__name__}: {exc}",
            )
            return False

        span.end()
        log_event(
            "callback.sent",
            trace_id=trace_id,
            span=span,
            order_id=payload.orderId,
            user=payload.user,
            http_status=resp.status_code,
        )
        return True
