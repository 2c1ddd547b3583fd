from __future__ import annotations

import io
import json
import urllib.error
import urllib.request

import pytest

from adapters.whatsapp_bridge import WhatsAppBridgeTransport, _extract_message_id


class FakeResponse(io.BytesIO):
    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def _fake_urlopen(responses: dict, captured: list):
    def _urlopen(request, timeout=None):
        captured.append(request)
        body = responses[request.full_url]
        if isinstance(body, Exception):
            raise body
        return FakeResponse(json.dumps(body).encode("utf-8"))

    return _urlopen


def test_extract_message_id_shapes() -> None:
    assert _extract_message_id({"message_id": "A"}) == "A"
    assert _extract_message_id({"key": {"id": "B"}}) == "B"
    assert _extract_message_id({"success": True}) is None
    assert _extract_message_id(None) is None


def test_send_posts_json_and_returns_id(monkeypatch) -> None:
    captured: list = []
    responses = {"http://bridge/api/send": {"success": True, "key": {"id": "XYZ"}}}
    monkeypatch.setattr(urllib.request, "urlopen", _fake_urlopen(responses, captured))

    transport = WhatsAppBridgeTransport("http://bridge/api/")
    assert transport.send("1@s.whatsapp.net", "hi") == "XYZ"

    [request] = captured
    assert request.get_method() == "POST"
    assert json.loads(request.data) == {"recipient": "1@s.whatsapp.net", "message": "hi"}


def test_send_rejected_by_bridge_raises(monkeypatch) -> None:
    responses = {"http://bridge/send": {"success": False, "message": "not on WhatsApp"}}
    monkeypatch.setattr(urllib.request, "urlopen", _fake_urlopen(responses, []))

    with pytest.raises(RuntimeError, match="not on WhatsApp"):
        WhatsAppBridgeTransport("http://bridge").send("1@s.whatsapp.net", "hi")


def test_is_connected(monkeypatch) -> None:
    responses = {"http://bridge/status": {"connected": True}}
    monkeypatch.setattr(urllib.request, "urlopen", _fake_urlopen(responses, []))
    assert WhatsAppBridgeTransport("http://bridge").is_connected()


def test_unreachable_bridge_is_not_connected(monkeypatch) -> None:
    responses = {"http://bridge/status": urllib.error.URLError("connection refused")}
    monkeypatch.setattr(urllib.request, "urlopen", _fake_urlopen(responses, []))
    assert not WhatsAppBridgeTransport("http://bridge").is_connected()
