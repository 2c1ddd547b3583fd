"""Tool dispatcher.

Each public method is one tool invocation: validate the raw arguments, run
the engine or gateway, and classify what happened into a ToolResult. The
dispatcher never raises; every collaborator fault becomes a result.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from core import validators
from core.config import QueryDefaults
from core.errors import NotFoundError, TransportUnavailable, UpstreamFailure, ValidationError
from core.formatting import format_chat, format_contact, format_message, format_window
from core.gateway import SendGateway
from core.query_engine import SORT_LAST_ACTIVE, SORT_OPTIONS, QueryEngine
from core.results import (
    EmptyFirstPage,
    Failure,
    NotFound,
    Success,
    ToolResult,
    ValidationFailed,
    empty_page,
)


def _matching(query: Optional[str]) -> str:
    return f' matching "{query}"' if query else ""


class ToolDispatcher:
    """Maps tool calls onto the query engine and send gateway."""

    def __init__(
        self,
        engine: QueryEngine,
        gateway: SendGateway,
        defaults: Optional[QueryDefaults] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._engine = engine
        self._gateway = gateway
        self._defaults = defaults or QueryDefaults()
        self._logger = logger or logging.getLogger(__name__)

    @property
    def defaults(self) -> QueryDefaults:
        return self._defaults

    def _failed(self, tool: str, prefix: str, exc: Exception) -> ToolResult:
        if isinstance(exc, ValidationError):
            self._logger.warning("[Tool] %s rejected: %s", tool, exc)
            return ValidationFailed(str(exc))
        if isinstance(exc, NotFoundError):
            return NotFound(str(exc))
        self._logger.error("[Tool Error] %s failed: %s", tool, exc)
        return Failure(f"{prefix}: {exc}")

    def search_contacts(self, query: Any) -> ToolResult:
        try:
            query = validators.require_text("query", query)
            self._logger.info('[Tool] search_contacts query="%s"', query)
            contacts = self._engine.search_contacts(query, self._defaults.contact_limit)
        except Exception as exc:
            return self._failed("search_contacts", "Error searching contacts", exc)
        if not contacts:
            return EmptyFirstPage(f'No contacts found matching "{query}".')
        return Success([format_contact(contact) for contact in contacts])

    def list_messages(self, chat_jid: Any, limit: Any = None, page: Any = 0) -> ToolResult:
        limit = self._defaults.message_limit if limit is None else limit
        try:
            chat_jid = validators.require_text("chat_jid", chat_jid)
            limit = validators.positive_int("limit", limit)
            page = validators.non_negative_int("page", page)
            self._logger.info("[Tool] list_messages chat=%s limit=%s page=%s", chat_jid, limit, page)
            messages = self._engine.list_messages(chat_jid, limit, page)
        except Exception as exc:
            return self._failed("list_messages", f"Error listing messages for {chat_jid}", exc)
        if not messages:
            return empty_page(
                page,
                f"No messages found for chat {chat_jid}.",
                f"No more messages found on page {page} for chat {chat_jid}.",
            )
        return Success([format_message(message) for message in messages])

    def list_chats(
        self,
        limit: Any = None,
        page: Any = 0,
        sort_by: Any = SORT_LAST_ACTIVE,
        query: Any = None,
        include_last_message: Any = True,
    ) -> ToolResult:
        limit = self._defaults.chat_limit if limit is None else limit
        try:
            limit = validators.positive_int("limit", limit)
            page = validators.non_negative_int("page", page)
            sort_by = validators.require_choice("sort_by", sort_by, SORT_OPTIONS)
            query = validators.optional_text("query", query)
            include_last_message = validators.require_bool("include_last_message", include_last_message)
            self._logger.info(
                "[Tool] list_chats limit=%s page=%s sort=%s query=%s last_message=%s",
                limit,
                page,
                sort_by,
                query,
                include_last_message,
            )
            chats = self._engine.list_chats(limit, page, sort_by, query, include_last_message)
        except Exception as exc:
            return self._failed("list_chats", "Error listing chats", exc)
        if not chats:
            return empty_page(
                page,
                f"No chats found{_matching(query)}.",
                f"No more chats found on page {page}{_matching(query)}.",
            )
        return Success([format_chat(chat) for chat in chats])

    def get_chat(self, chat_jid: Any, include_last_message: Any = True) -> ToolResult:
        try:
            chat_jid = validators.require_text("chat_jid", chat_jid)
            include_last_message = validators.require_bool("include_last_message", include_last_message)
            self._logger.info("[Tool] get_chat chat=%s last_message=%s", chat_jid, include_last_message)
            chat = self._engine.get_chat(chat_jid, include_last_message)
            if chat is None:
                raise NotFoundError(f"Chat with JID {chat_jid} not found.")
        except Exception as exc:
            return self._failed("get_chat", f"Error retrieving chat {chat_jid}", exc)
        return Success(format_chat(chat))

    def get_message_context(
        self,
        message_id: Any,
        before: Any = None,
        after: Any = None,
        chat_jid: Any = None,
    ) -> ToolResult:
        before = self._defaults.context_before if before is None else before
        after = self._defaults.context_after if after is None else after
        try:
            message_id = validators.require_text("message_id", message_id)
            before = validators.non_negative_int("before", before)
            after = validators.non_negative_int("after", after)
            chat_jid = validators.optional_text("chat_jid", chat_jid)
            self._logger.info(
                "[Tool] get_message_context message=%s before=%s after=%s chat=%s",
                message_id,
                before,
                after,
                chat_jid,
            )
            window = self._engine.get_messages_around(message_id, before, after, chat_jid)
            if window.target is None:
                raise NotFoundError(f"Message with ID {message_id} not found.")
        except Exception as exc:
            return self._failed(
                "get_message_context",
                f"Error retrieving context for message {message_id}",
                exc,
            )
        return Success(format_window(window))

    def search_messages(
        self,
        query: Any,
        chat_jid: Any = None,
        limit: Any = None,
        page: Any = 0,
    ) -> ToolResult:
        limit = self._defaults.search_limit if limit is None else limit
        scope = "across all chats"
        try:
            query = validators.require_text("query", query)
            chat_jid = validators.optional_text("chat_jid", chat_jid)
            if chat_jid:
                scope = f"in chat {chat_jid}"
            limit = validators.positive_int("limit", limit)
            page = validators.non_negative_int("page", page)
            self._logger.info(
                '[Tool] search_messages %s query="%s" limit=%s page=%s', scope, query, limit, page
            )
            messages = self._engine.search_messages(query, chat_jid, limit, page)
        except Exception as exc:
            return self._failed("search_messages", f"Error searching messages {scope}", exc)
        if not messages:
            return empty_page(
                page,
                f'No messages found containing "{query}" {scope}.',
                f'No more messages found containing "{query}" on page {page} {scope}.',
            )
        return Success([format_message(message) for message in messages])

    def send_message(self, recipient: Any, message: Any) -> ToolResult:
        try:
            recipient = validators.require_text("recipient", recipient)
            message = validators.require_text("message", message)
            self._logger.info("[Tool] send_message to %s", recipient)
            receipt = self._gateway.send_message(recipient, message)
        except (TransportUnavailable, UpstreamFailure) as exc:
            self._logger.error("[Tool Error] send_message failed for %s: %s", recipient, exc)
            return Failure(str(exc))
        except Exception as exc:
            return self._failed("send_message", "Error sending message", exc)
        return Success(
            f"Message sent successfully to {receipt.recipient} (ID: {receipt.message_id})."
        )
