"""MCP tool surface adapter.

Registers one FastMCP tool per dispatcher method plus the schema resource.
The adapter holds no logic of its own: every result goes back as a
CallToolResult whose ``isError`` flag comes from the result variant, so
error texts reach the client verbatim.
"""

from __future__ import annotations

import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, TextContent

from adapters.sqlite_store import SCHEMA_TEXT
from core.dispatcher import ToolDispatcher
from core.results import ToolResult

SERVER_NAME = "chatlens-whatsapp"
SCHEMA_URI = "schema://whatsapp/main"


def respond(result: ToolResult) -> CallToolResult:
    """Wrap a result as one text block, flagged as an error when it is one."""

    return CallToolResult(
        content=[TextContent(type="text", text=result.render())],
        isError=result.is_error,
    )


def build_server(dispatcher: ToolDispatcher, logger: Optional[logging.Logger] = None) -> FastMCP:
    """Create the FastMCP server with every chat tool registered."""

    logger = logger or logging.getLogger("chatlens.mcp")
    defaults = dispatcher.defaults
    mcp = FastMCP(SERVER_NAME)

    @mcp.tool()
    def search_contacts(query: str) -> CallToolResult:
        """Search contacts by name or by the phone number part of their JID."""
        return respond(dispatcher.search_contacts(query))

    @mcp.tool()
    def list_messages(
        chat_jid: str, limit: int = defaults.message_limit, page: int = 0
    ) -> CallToolResult:
        """List messages of a chat, newest first.

        Args:
            chat_jid: The JID of the chat (e.g. '123456@s.whatsapp.net' or 'group@g.us').
            limit: Max messages per page.
            page: Page number, 0-indexed.
        """
        return respond(dispatcher.list_messages(chat_jid, limit, page))

    @mcp.tool()
    def list_chats(
        limit: int = defaults.chat_limit,
        page: int = 0,
        sort_by: str = "last_active",
        query: Optional[str] = None,
        include_last_message: bool = True,
    ) -> CallToolResult:
        """List chats.

        Args:
            limit: Max chats per page.
            page: Page number, 0-indexed.
            sort_by: 'last_active' (default) or 'name'.
            query: Optional filter on chat name or JID.
            include_last_message: Include details of the newest message.
        """
        return respond(dispatcher.list_chats(limit, page, sort_by, query, include_last_message))

    @mcp.tool()
    def get_chat(chat_jid: str, include_last_message: bool = True) -> CallToolResult:
        """Get a single chat by JID."""
        return respond(dispatcher.get_chat(chat_jid, include_last_message))

    @mcp.tool()
    def get_message_context(
        message_id: str,
        before: int = defaults.context_before,
        after: int = defaults.context_after,
        chat_jid: Optional[str] = None,
    ) -> CallToolResult:
        """Get the messages immediately before and after a target message.

        Args:
            message_id: The ID of the target message.
            before: Number of earlier messages to include.
            after: Number of later messages to include.
            chat_jid: Optional chat to look the message up in; ids are only unique per chat.
        """
        return respond(dispatcher.get_message_context(message_id, before, after, chat_jid))

    @mcp.tool()
    def send_message(recipient: str, message: str) -> CallToolResult:
        """Send a text message to a user or group JID (e.g. '12345@s.whatsapp.net' or 'group123@g.us')."""
        return respond(dispatcher.send_message(recipient, message))

    @mcp.tool()
    def search_messages(
        query: str,
        chat_jid: Optional[str] = None,
        limit: int = defaults.search_limit,
        page: int = 0,
    ) -> CallToolResult:
        """Search message text, newest first.

        Args:
            query: Text to look for, case-insensitive.
            chat_jid: Optional chat to search within. Omit to search all chats.
            limit: Max messages per page.
            page: Page number, 0-indexed.
        """
        return respond(dispatcher.search_messages(query, chat_jid, limit, page))

    @mcp.resource(SCHEMA_URI, name="db_schema", mime_type="text/plain")
    def db_schema() -> str:
        """Schema of the chats and messages tables."""
        logger.info("[Resource] Request for %s", SCHEMA_URI)
        return SCHEMA_TEXT

    return mcp
