"""Messaging transport abstraction.

The chat connection itself (device pairing, reconnects, credentials) lives
outside this service. The core only needs to:
- send a text message
- send an image with a caption
- ask whether the connection is ready
- invalidate the session

Every send may fail. A successful send does not imply delivery.
"""

from __future__ import annotations

import base64
import binascii
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from approvalbot.core.errors import InvalidRequest


class ImageSourceKind(str, Enum):
    URL = "url"
    DATA = "data"


@dataclass(frozen=True)
class ImageSource:
    """An image to attach: either a location the transport fetches, or raw bytes."""

    kind: ImageSourceKind
    url: str | None = None
    data: bytes | None = None
    mime_type: str | None = None

    @classmethod
    def parse(cls, value: str) -> ImageSource:
        """Build an image source from an order attachment value.

        Accepts an ``http(s)`` URL, a ``data:image/...;base64,`` URI or a
        local path; anything that is not a data URI is passed through as a
        location.

        Raises:
            InvalidRequest: If a data URI cannot be decoded.
        """
        if value.startswith("data:image"):
            header, _, encoded = value.partition(",")
            mime_type = header[len("data:"):].split(";", 1)[0] or None
            try:
                data = base64.b64decode(encoded, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise InvalidRequest(f"Invalid base64 image data: {exc}") from exc
            return cls(kind=ImageSourceKind.DATA, data=data, mime_type=mime_type)
        return cls(kind=ImageSourceKind.URL, url=value)


class MessagingTransport(ABC):
    """Sends chat messages to normalized recipient addresses."""

    @abstractmethod
    async def send_text(self, to: str, text: str) -> None:
        """Send a text message.

        Raises:
            TransportUnavailable: If the connection is not ready.
            TransportError: If the message could not be sent.
        """
        raise NotImplementedError

    @abstractmethod
    async def send_image(self, to: str, image: ImageSource, caption: str | None = None) -> None:
        """Send an image with an optional caption."""
        raise NotImplementedError

    @abstractmethod
    async def is_ready(self) -> bool:
        """Return whether the connection can currently send messages."""
        raise NotImplementedError

    @abstractmethod
    async def logout(self) -> None:
        """Invalidate the current chat session."""
        raise NotImplementedError
