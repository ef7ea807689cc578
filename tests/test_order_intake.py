from __future__ import annotations

import base64

import pytest

from approvalbot.core.errors import InvalidRequest, PersistenceFailure, TransportError, TransportUnavailable
from approvalbot.domain.orders import ApprovalEngine, OrderStatus, OrderStore, ResponseState
from approvalbot.infrastructure.persistence import InMemoryOrderBackend
from approvalbot.infrastructure.transport import ImageSourceKind
from approvalbot.services.intake import Attachments, OrderIntakeService

from tests.fixtures.callback_stub import RecordingNotifier
from tests.fixtures.recording_transport import RecordingTransport

R1 = "628111@s.whatsapp.net"
R2 = "628222@s.whatsapp.net"


def _service(transport: RecordingTransport, backend=None):
    backend = backend or InMemoryOrderBackend()
    engine = ApprovalEngine(store=OrderStore(backend), callbacks=RecordingNotifier())
    return OrderIntakeService(engine=engine, transport=transport), engine, backend


@pytest.mark.asyncio
async def test_create_order_sends_and_registers() -> None:
    # Arrange
    transport = RecordingTransport()
    service, engine, backend = _service(transport)

    # Act
    handle = await service.create_order(
        order_id="INV-1",
        recipients=["+628111", "628222@c.us"],
        message="Please approve INV-1",
        callback_url="http://caller.test/hook",
    )

    # Assert
    assert handle.order_id == "INV-1"
    assert handle.recipients == [R1, R2]
    assert transport.sent == [
        ("text", R1, "Please approve INV-1"),
        ("text", R2, "Please approve INV-1"),
    ]
    persisted = backend.load()["INV-1"]
    assert persisted.recipients == {R1: ResponseState.UNANSWERED, R2: ResponseState.UNANSWERED}
    assert persisted.status == OrderStatus.PENDING
    assert persisted.callback_url == "http://caller.test/hook"
    assert "INV-1" in engine.store


@pytest.mark.asyncio
async def test_attachments_follow_message_in_fixed_order() -> None:
    transport = RecordingTransport()
    service, _, _ = _service(transport)
    png = "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode()

    await service.create_order(
        order_id="INV-3",
        recipients=[R1],
        message="Trip approval",
        attachments=Attachments(
            hotel_ticket="/srv/tickets/hotel.jpg",
            identity="https://files.test/passport.jpg",
            flight_ticket=png,
        ),
    )

    kinds = [entry[0] for entry in transport.sent]
    captions = [entry[3] for entry in transport.sent if entry[0] == "image"]
    images = [entry[2] for entry in transport.sent if entry[0] == "image"]
    assert kinds == ["text", "image", "image", "image"]
    assert captions == ["🪪 Passport", "✈️ Flight Ticket", "🏨 Hotel Ticket"]
    assert images[0].url == "https://files.test/passport.jpg"
    assert images[1].kind == ImageSourceKind.DATA
    assert images[1].data == b"\x89PNG"
    assert images[1].mime_type == "image/png"
    assert images[2].url == "/srv/tickets/hotel.jpg"


@pytest.mark.asyncio
async def test_missing_attachments_are_skipped() -> None:
    transport = RecordingTransport()
    service, _, _ = _service(transport)

    await service.create_order("INV-4", [R1], "msg", attachments=Attachments(flight_ticket="https://f.test/t.png"))

    assert [entry[3] for entry in transport.sent if entry[0] == "image"] == ["✈️ Flight Ticket"]


@pytest.mark.parametrize(
    ("order_id", "recipients", "message"),
    [(None, [R1], "m"), ("INV-1", [], "m"), ("INV-1", None, "m"), ("INV-1", [R1], ""), ("INV-1", ["@@"], "m")],
)
@pytest.mark.asyncio
async def test_invalid_requests_are_rejected(order_id, recipients, message) -> None:
    transport = RecordingTransport()
    service, _, backend = _service(transport)

    with pytest.raises(InvalidRequest):
        await service.create_order(order_id, recipients, message)

    assert transport.sent == []
    assert backend.saves == 0


@pytest.mark.asyncio
async def test_transport_not_ready_is_reported() -> None:
    transport = RecordingTransport(ready=False)
    service, engine, _ = _service(transport)

    with pytest.raises(TransportUnavailable):
        await service.create_order("INV-1", [R1], "m")

    assert "INV-1" not in engine.store


@pytest.mark.asyncio
async def test_send_failure_registers_nothing() -> None:
    # Arrange: the second recipient cannot be reached
    transport = RecordingTransport(fail_for={R2})
    service, engine, backend = _service(transport)

    # Act / Assert
    with pytest.raises(TransportError):
        await service.create_order("INV-1", [R1, R2], "m")

    assert "INV-1" not in engine.store
    assert backend.saves == 0
    assert transport.sent == [("text", R1, "m")]


@pytest.mark.asyncio
async def test_duplicate_pending_order_is_rejected() -> None:
    transport = RecordingTransport()
    service, _, _ = _service(transport)
    await service.create_order("INV-1", [R1], "first")

    with pytest.raises(InvalidRequest):
        await service.create_order("INV-1", [R2], "second")

    assert transport.texts_to(R2) == []


@pytest.mark.asyncio
async def test_order_id_differing_only_in_case_is_rejected() -> None:
    # Arrange
    transport = RecordingTransport()
    service, engine, _ = _service(transport)
    await service.create_order("INV-1", [R1], "first")

    # Act
    with pytest.raises(InvalidRequest):
        await service.create_order("inv-1", [R2], "second")

    # Assert: the mixed-case reply still resolves to the one pending order
    assert transport.texts_to(R2) == []
    assert "inv-1" not in engine.store
    assert engine.store.find("Inv-1").id == "INV-1"


@pytest.mark.asyncio
async def test_duplicate_recipients_collapse_to_one_key() -> None:
    transport = RecordingTransport()
    service, _, _ = _service(transport)

    handle = await service.create_order("INV-1", ["628111", "+628111", "628111@c.us"], "m")

    assert handle.recipients == [R1]
    assert len(transport.sent) == 1


@pytest.mark.asyncio
async def test_persistence_failure_unregisters_order() -> None:
    class BrokenBackend(InMemoryOrderBackend):
        def save(self, orders):
            raise PersistenceFailure("read-only filesystem")

    transport = RecordingTransport()
    service, engine, _ = _service(transport, backend=BrokenBackend())

    with pytest.raises(PersistenceFailure):
        await service.create_order("INV-1", [R1], "m")

    assert "INV-1" not in engine.store


@pytest.mark.asyncio
async def test_invalid_data_uri_is_rejected_before_sending() -> None:
    transport = RecordingTransport()
    service, _, _ = _service(transport)

    with pytest.raises(InvalidRequest):
        await service.create_order("INV-1", [R1], "m", attachments=Attachments(identity="data:image/png;base64,!!!"))

    assert transport.sent == []


@pytest.mark.asyncio
async def test_send_message_status_and_logout() -> None:
    transport = RecordingTransport()
    service, _, _ = _service(transport)

    result = await service.send_message("+628111", "hello")
    status = await service.get_status()
    await service.logout()

    assert result == {"success": True, "to": "+628111", "text": "hello"}
    assert transport.texts_to(R1) == ["hello"]
    assert status == {"connected": True}
    assert transport.logged_out
    assert await service.get_status() == {"connected": False}


@pytest.mark.asyncio
async def test_send_message_requires_fields_and_connection() -> None:
    service, _, _ = _service(RecordingTransport(ready=False))

    with pytest.raises(InvalidRequest):
        await service.send_message("", "hello")
    with pytest.raises(TransportUnavailable):
        await service.send_message(R1, "hello")
