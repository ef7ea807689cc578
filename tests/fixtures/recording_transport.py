# ------------------------------------------------------------------------------
# In-memory messaging transport that records every send
# ------------------------------------------------------------------------------
from approvalbot.core.errors import TransportError, TransportUnavailable
from approvalbot.infrastructure.transport import ImageSource, MessagingTransport


class RecordingTransport(MessagingTransport):
    """
    Deterministic transport matching the real interface.

    `sent` holds ("text", to, text) and ("image", to, image, caption) tuples
    in call order. Sends to an address in `fail_for` raise TransportError.
    """

    def __init__(self, *, ready: bool = True, fail_for: set[str] | None = None) -> None:
        self.ready = ready
        self.fail_for = fail_for or set()
        self.sent: list[tuple] = []
        self.logged_out = False

    async def send_text(self, to: str, text: str) -> None:
        self._check(to)
        self.sent.append(("text", to, text))

    async def send_image(self, to: str, image: ImageSource, caption: str | None = None) -> None:
        self._check(to)
        self.sent.append(("image", to, image, caption))

    async def is_ready(self) -> bool:
        return self.ready

    async def logout(self) -> None:
        self.logged_out = True
        self.ready = False

    def texts_to(self, to: str) -> list[str]:
        return [entry[2] for entry in self.sent if entry[0] == "text" and entry[1] == to]

    def _check(self, to: str) -> None:
        if not self.ready:
            raise TransportUnavailable("not connected")
        if to in self.fail_for:
            raise TransportError(f"send to {to} failed")
