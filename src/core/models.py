"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any storage-specific row types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class Chat:
    """A conversation with an optional summary of its newest message."""

    jid: str
    name: Optional[str] = None
    last_message_time: Optional[datetime] = None
    last_message: Optional[str] = None
    last_sender: Optional[str] = None
    last_is_from_me: Optional[bool] = None


@dataclass(frozen=True)
class Message:
    """A single stored message. ``id`` is only unique within ``chat_jid``."""

    id: str
    chat_jid: str
    timestamp: datetime
    sender: Optional[str] = None
    content: Optional[str] = None
    is_from_me: bool = False
    chat_name: Optional[str] = None


@dataclass(frozen=True)
class Contact:
    jid: str
    name: Optional[str] = None


@dataclass(frozen=True)
class MessageWindow:
    """A target message plus its chronological neighbours in the same chat."""

    target: Optional[Message]
    before: List[Message] = field(default_factory=list)
    after: List[Message] = field(default_factory=list)


@dataclass(frozen=True)
class SendReceipt:
    recipient: str
    message_id: str
