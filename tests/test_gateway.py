from __future__ import annotations

from typing import Optional

import pytest

from core.errors import TransportUnavailable, UpstreamFailure, ValidationError
from core.gateway import SendGateway


class FakeTransport:
    def __init__(
        self,
        connected: bool = True,
        message_id: Optional[str] = "ABC123",
        error: "Exception | None" = None,
    ) -> None:
        self.connected = connected
        self.message_id = message_id
        self.error = error
        self.sent: list[tuple[str, str]] = []

    def is_connected(self) -> bool:
        return self.connected

    def send(self, recipient: str, text: str) -> Optional[str]:
        self.sent.append((recipient, text))
        if self.error:
            raise self.error
        return self.message_id


def test_send_normalizes_recipient() -> None:
    transport = FakeTransport()
    receipt = SendGateway(transport).send_message("123:7@c.us", "hi")
    assert receipt.recipient == "123@s.whatsapp.net"
    assert receipt.message_id == "ABC123"
    assert transport.sent == [("123@s.whatsapp.net", "hi")]


def test_recipient_without_separator_is_rejected_before_sending() -> None:
    transport = FakeTransport()
    with pytest.raises(ValidationError, match="Invalid recipient format"):
        SendGateway(transport).send_message("12345", "hi")
    assert transport.sent == []


def test_disconnected_transport() -> None:
    transport = FakeTransport(connected=False)
    with pytest.raises(TransportUnavailable, match="not active"):
        SendGateway(transport).send_message("1@s.whatsapp.net", "hi")
    assert transport.sent == []


def test_missing_transport() -> None:
    with pytest.raises(TransportUnavailable):
        SendGateway(None).send_message("1@s.whatsapp.net", "hi")


def test_missing_message_id_is_a_delivery_failure() -> None:
    with pytest.raises(UpstreamFailure, match="Failed to send message to 1@s.whatsapp.net"):
        SendGateway(FakeTransport(message_id=None)).send_message("1@s.whatsapp.net", "hi")


def test_transport_fault_is_wrapped() -> None:
    gateway = SendGateway(FakeTransport(error=ConnectionResetError("peer reset")))
    with pytest.raises(UpstreamFailure, match="Error sending message: peer reset"):
        gateway.send_message("1@s.whatsapp.net", "hi")
