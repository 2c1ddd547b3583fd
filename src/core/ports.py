"""Ports (interfaces) used by the core.

Ports define the minimal contracts for storage and messaging adapters so
that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from core.models import Chat, Contact, Message, MessageWindow


class StorePort(Protocol):
    """Read operations required by the query engine."""

    def list_chats(
        self,
        limit: int,
        page: int,
        sort_by: str,
        query: Optional[str],
        include_last_message: bool,
    ) -> List[Chat]:
        ...

    def get_chat(self, jid: str, include_last_message: bool) -> Optional[Chat]:
        ...

    def list_messages(self, chat_jid: str, limit: int, page: int) -> List[Message]:
        ...

    def search_messages(
        self, query: str, chat_jid: Optional[str], limit: int, page: int
    ) -> List[Message]:
        ...

    def get_messages_around(
        self, message_id: str, before: int, after: int, chat_jid: Optional[str] = None
    ) -> MessageWindow:
        ...

    def search_contacts(self, query: str, limit: int) -> List[Contact]:
        ...


class TransportPort(Protocol):
    """Outbound messaging operations required by the send gateway."""

    def is_connected(self) -> bool:
        ...

    def send(self, recipient: str, text: str) -> Optional[str]:
        """Deliver ``text`` and return the id of the sent message, if any."""
        ...
