"""Transport factory for chatlens.

The bridge URL comes from the environment (or .env) so the same install
can point at different bridge processes.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from dotenv import load_dotenv

from adapters.whatsapp_bridge import WhatsAppBridgeTransport


def build_transport(base_url: Optional[str] = None, timeout: float = 10.0) -> WhatsAppBridgeTransport:
    """Create the bridge transport from arguments or environment variables.

    WHATSAPP_BRIDGE_URL is read via python-dotenv when no URL is passed.
    """

    load_dotenv()

    url = base_url or os.getenv("WHATSAPP_BRIDGE_URL")

    # Fail fast on a missing URL instead of sending to a guessed address.
    if not url:
        raise RuntimeError("Missing WHATSAPP_BRIDGE_URL in environment")

    logging.getLogger(__name__).info("Initializing WhatsApp bridge transport at %s", url)

    return WhatsAppBridgeTransport(url, timeout=timeout, logger=logging.getLogger("chatlens.transport"))
