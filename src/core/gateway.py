"""Send gateway for outbound messages.

Normalizes the recipient, checks the transport, and turns the transport's
answer into a receipt or a core error. Nothing raised by the transport
escapes as anything other than UpstreamFailure.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.errors import TransportUnavailable, UpstreamFailure, ValidationError
from core.jids import normalize_jid
from core.models import SendReceipt
from core.ports import TransportPort


class SendGateway:
    """Delivers text messages through a TransportPort."""

    def __init__(self, transport: Optional[TransportPort], logger: Optional[logging.Logger] = None) -> None:
        self._transport = transport
        self._logger = logger or logging.getLogger(__name__)

    def send_message(self, recipient: str, message: str) -> SendReceipt:
        normalized = normalize_jid(recipient)
        if normalized is None:
            self._logger.error("Invalid recipient JID format: %s", recipient)
            raise ValidationError(
                f'Invalid recipient format: "{recipient}". Please provide a valid JID '
                "(e.g., number@s.whatsapp.net or group@g.us)."
            )

        if self._transport is None or not self._transport.is_connected():
            self._logger.error("send_message failed: WhatsApp transport is not available")
            raise TransportUnavailable("Error: WhatsApp connection is not active.")

        try:
            message_id = self._transport.send(normalized, message)
        except Exception as exc:
            self._logger.exception("send_message failed for %s", normalized)
            raise UpstreamFailure(f"Error sending message: {exc}") from exc

        if not message_id:
            self._logger.error("Transport returned no message id for %s", normalized)
            raise UpstreamFailure(
                f"Failed to send message to {normalized}. See server logs for details."
            )

        self._logger.info("Message %s sent to %s", message_id, normalized)
        return SendReceipt(recipient=normalized, message_id=str(message_id))
