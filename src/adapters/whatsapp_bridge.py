"""WhatsApp bridge transport adapter.

Talks to a locally running WhatsApp bridge process over HTTP. The bridge
owns the session and authentication; this adapter only asks whether it is
connected and hands it text to deliver.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from typing import Any, Optional

LOGGER = logging.getLogger("chatlens.transport")


def _extract_message_id(payload: Any) -> Optional[str]:
    """Pull the sent message id out of the bridge response, if present.

    Accepts ``{"message_id": ...}``, ``{"id": ...}`` and the WhatsApp Web
    ``{"key": {"id": ...}}`` shape.
    """

    if not isinstance(payload, dict):
        return None
    for name in ("message_id", "id"):
        value = payload.get(name)
        if value:
            return str(value)
    key = payload.get("key")
    if isinstance(key, dict) and key.get("id"):
        return str(key["id"])
    return None


class WhatsAppBridgeTransport:
    """Transport adapter that delivers messages through the bridge HTTP API."""

    def __init__(self, base_url: str, timeout: float = 10.0, logger: Optional[logging.Logger] = None) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._logger = logger or LOGGER

    def _endpoint(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def _request(self, path: str, payload: Optional[dict] = None) -> Any:
        data = None
        method = "GET"
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
            method = "POST"
        request = urllib.request.Request(self._endpoint(path), data=data, method=method)
        request.add_header("Accept", "application/json")
        if data is not None:
            request.add_header("Content-Type", "application/json")
        # Blocking by design: one call per tool invocation, bounded by the timeout.
        try:
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                body = response.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            raise RuntimeError(f"Bridge API error {e.code}: {body}") from e
        if not body.strip():
            return None
        return json.loads(body)

    def is_connected(self) -> bool:
        """Return True when the bridge reports an active WhatsApp session."""

        try:
            status = self._request("status")
        except (urllib.error.URLError, RuntimeError, ValueError, OSError) as exc:
            self._logger.warning("Bridge status check failed: %s", exc)
            return False
        return bool(isinstance(status, dict) and status.get("connected"))

    def send(self, recipient: str, text: str) -> Optional[str]:
        """Send a text message and return the bridge's message id."""

        self._logger.info("Sending message to %s", recipient)
        result = self._request("send", {"recipient": recipient, "message": text})
        if isinstance(result, dict) and result.get("success") is False:
            raise RuntimeError(result.get("message") or "bridge rejected the message")
        message_id = _extract_message_id(result)
        if message_id is None:
            self._logger.error("Bridge response for %s had no message id: %r", recipient, result)
        else:
            self._logger.info("Bridge accepted message %s for %s", message_id, recipient)
        return message_id
