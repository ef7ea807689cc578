"""Messaging transport that talks to a chat gateway over HTTP."""

from __future__ import annotations

import base64
from typing import Any

import httpx

from approvalbot.core.errors import TransportError, TransportUnavailable

from .base import ImageSource, ImageSourceKind, MessagingTransport


class HttpGatewayTransport(MessagingTransport):
    """Drive the chat bridge through its HTTP API.

    The gateway owns the device session and exposes:
    - POST /messages/text   {"to", "text"}
    - POST /messages/image  {"to", "caption", "url" | "data" + "mimetype"}
    - GET  /status          {"connected": bool}
    - POST /logout
    A 503 from the gateway means the session is not connected.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Create a gateway transport.

        Args:
            base_url: Base URL of the gateway (e.g. http://wa-gateway:3001).
            api_key: Optional key sent as ``X-API-Key``.
            client: Optional injected httpx client for testing / transport control.
            timeout: Per-request timeout in seconds.
        """
        self._base_url = base_url.rstrip('/')
        self._headers = {'X-API-Key': api_key} if api_key else {}
        self._client = client
        self._timeout = timeout

    async def send_text(self, to: str, text: str) -> None:
        await self._request('POST', '/messages/text', json={'to': to, 'text': text})

    async def send_image(self, to: str, image: ImageSource, caption: str | None = None) -> None:
        body: dict[str, Any] = {'to': to, 'caption': caption}
        if image.kind == ImageSourceKind.DATA:
            body['data'] = base64.b64encode(image.data or b'').decode('ascii')
            body['mimetype'] = image.mime_type
        else:
            body['url'] = image.url
        await self._request('POST', '/messages/image', json=body)

    async def is_ready(self) -> bool:
        try:
            data = await self._request('GET', '/status')
        except (TransportError, TransportUnavailable):
            return False
        return bool(data.get('connected'))

    async def logout(self) -> None:
        await self._request('POST', '/logout')

    async def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f'{self._base_url}{path}'

        if self._client is not None:
            return await self._send(self._client, method, url, json)

        async with httpx.AsyncClient() as client:
            return await self._send(client, method, url, json)

    async def _send(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        json: dict[str, Any] | None,
    ) -> dict[str, Any]:
        try:
            resp = await client.request(method, url, json=json, headers=self._headers, timeout=self._timeout)
        except httpx.HTTPError as exc:
            raise TransportError(f'Gateway request failed: {exc}') from exc

        if resp.status_code == 503:
            raise TransportUnavailable('Messaging gateway is not connected')
        if resp.is_error:
            raise TransportError(f'Gateway returned {resp.status_code} for {method} {url}')

        if not resp.content:
            return {}
        try:
            data = resp.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
