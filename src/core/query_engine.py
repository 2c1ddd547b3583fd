"""Query engine over the chat/message store.

This module is storage-agnostic. It only relies on the StorePort, enforcing
paging rules and context-window ordering on top of whatever the store
returns, and turning store faults into UpstreamFailure.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, TypeVar

from core.errors import UpstreamFailure, ValidationError
from core.models import Chat, Contact, Message, MessageWindow
from core.ports import StorePort

SORT_LAST_ACTIVE = "last_active"
SORT_NAME = "name"
SORT_OPTIONS = (SORT_LAST_ACTIVE, SORT_NAME)

T = TypeVar("T")


def page_offset(limit: int, page: int) -> int:
    """Return the first row index of a 0-indexed page."""

    if limit <= 0:
        raise ValidationError("limit must be greater than 0")
    if page < 0:
        raise ValidationError("page must be 0 or greater")
    return page * limit


def _chronological(messages: List[Message]) -> List[Message]:
    return sorted(messages, key=lambda message: (message.timestamp, message.id))


class QueryEngine:
    """List, search, and context operations over a StorePort."""

    def __init__(self, store: StorePort, logger: Optional[logging.Logger] = None) -> None:
        self._store = store
        self._logger = logger or logging.getLogger(__name__)

    def _call(self, operation: str, func: Callable[[], T]) -> T:
        try:
            return func()
        except (ValidationError, UpstreamFailure):
            raise
        except Exception as exc:
            self._logger.exception("Store query %s failed", operation)
            raise UpstreamFailure(str(exc) or exc.__class__.__name__) from exc

    def list_chats(
        self,
        limit: int,
        page: int,
        sort_by: str = SORT_LAST_ACTIVE,
        query: Optional[str] = None,
        include_last_message: bool = True,
    ) -> List[Chat]:
        page_offset(limit, page)
        if sort_by not in SORT_OPTIONS:
            raise ValidationError(f"sort_by must be one of: {', '.join(SORT_OPTIONS)}")
        query = query.strip() if query and query.strip() else None
        return self._call(
            "list_chats",
            lambda: self._store.list_chats(limit, page, sort_by, query, include_last_message),
        )

    def get_chat(self, chat_jid: str, include_last_message: bool = True) -> Optional[Chat]:
        return self._call("get_chat", lambda: self._store.get_chat(chat_jid, include_last_message))

    def list_messages(self, chat_jid: str, limit: int, page: int) -> List[Message]:
        page_offset(limit, page)
        return self._call("list_messages", lambda: self._store.list_messages(chat_jid, limit, page))

    def search_messages(
        self, query: str, chat_jid: Optional[str], limit: int, page: int
    ) -> List[Message]:
        page_offset(limit, page)
        return self._call(
            "search_messages",
            lambda: self._store.search_messages(query, chat_jid, limit, page),
        )

    def get_messages_around(
        self,
        message_id: str,
        before: int,
        after: int,
        chat_jid: Optional[str] = None,
    ) -> MessageWindow:
        """Return the target message with up to ``before``/``after`` neighbours.

        Neighbours come from the target's own chat and have strictly earlier
        or later timestamps. Both lists are oldest first, so
        ``before + [target] + after`` reads chronologically.
        """

        if before < 0 or after < 0:
            raise ValidationError("before and after must be 0 or greater")
        window = self._call(
            "get_messages_around",
            lambda: self._store.get_messages_around(message_id, before, after, chat_jid),
        )
        target = window.target
        if target is None:
            return MessageWindow(target=None)

        same_chat = [message for message in window.before if message.chat_jid == target.chat_jid]
        earlier = [message for message in same_chat if message.timestamp < target.timestamp]
        same_chat = [message for message in window.after if message.chat_jid == target.chat_jid]
        later = [message for message in same_chat if message.timestamp > target.timestamp]

        earlier = _chronological(earlier)
        later = _chronological(later)
        return MessageWindow(
            target=target,
            before=earlier[len(earlier) - before:] if before else [],
            after=later[:after],
        )

    def search_contacts(self, query: str, limit: int) -> List[Contact]:
        page_offset(limit, 0)
        return self._call("search_contacts", lambda: self._store.search_contacts(query, limit))
