from __future__ import annotations

import asyncio
import json
from importlib.metadata import version

from mcp.types import CallToolResult

from adapters.mcp_server import build_server, respond
from adapters.sqlite_store import SQLiteStore
from conftest import make_message
from core.dispatcher import ToolDispatcher
from core.gateway import SendGateway
from core.query_engine import QueryEngine
from core.results import EmptyLaterPage, Failure, NotFound, Success

CHAT = "123@s.whatsapp.net"


def _server(store: SQLiteStore):
    return build_server(ToolDispatcher(QueryEngine(store), SendGateway(None)))


def _call(server, name: str, arguments: dict) -> CallToolResult:
    result = asyncio.run(server.call_tool(name, arguments))
    assert isinstance(result, CallToolResult)
    assert len(result.content) == 1
    return result


def test_respond_passes_through_non_errors() -> None:
    success = respond(Success({"a": 1}))
    later = respond(EmptyLaterPage("No more chats found on page 2."))

    assert success.isError is False
    assert success.content[0].text == '{\n  "a": 1\n}'
    assert later.isError is False
    assert later.content[0].text == "No more chats found on page 2."


def test_respond_flags_errors_with_verbatim_text() -> None:
    missing = respond(NotFound("Chat with JID x not found."))
    failed = respond(Failure("Error listing chats: disk"))

    assert missing.isError is True
    assert missing.content[0].text == "Chat with JID x not found."
    assert failed.isError is True
    assert failed.content[0].text == "Error listing chats: disk"


def test_server_registers_every_tool(store) -> None:
    server = _server(store)

    tools = asyncio.run(server.list_tools())

    assert {tool.name for tool in tools} == {
        "search_contacts",
        "list_messages",
        "list_chats",
        "get_chat",
        "get_message_context",
        "send_message",
        "search_messages",
    }


def test_get_chat_missing_reaches_client_as_error(store: SQLiteStore) -> None:
    result = _call(_server(store), "get_chat", {"chat_jid": "x@s.whatsapp.net"})

    assert result.isError is True
    assert result.content[0].text == "Chat with JID x@s.whatsapp.net not found."


def test_list_messages_later_page_is_not_an_error(store: SQLiteStore) -> None:
    store.upsert_chat(CHAT, "Alice")
    store.store_message(make_message("m0", CHAT, 0, "hello", sender=CHAT))

    result = _call(_server(store), "list_messages", {"chat_jid": CHAT, "limit": 5, "page": 3})

    assert result.isError is False
    assert result.content[0].text == f"No more messages found on page 3 for chat {CHAT}."


def test_list_messages_first_page_returns_json(store: SQLiteStore) -> None:
    store.upsert_chat(CHAT, "Alice")
    store.store_message(make_message("m0", CHAT, 0, "hello", sender=CHAT))
    store.store_message(make_message("m1", CHAT, 1, "again", sender=CHAT))

    result = _call(_server(store), "list_messages", {"chat_jid": CHAT})

    assert result.isError is False
    assert [m["id"] for m in json.loads(result.content[0].text)] == ["m1", "m0"]


def test_send_message_without_transport_is_an_error(store: SQLiteStore) -> None:
    result = _call(_server(store), "send_message", {"recipient": CHAT, "message": "hi"})

    assert result.isError is True
    assert result.content[0].text == "Error: WhatsApp connection is not active."


def test_installed_sdk_is_a_fastmcp_release() -> None:
    major, minor = (int(part) for part in version("mcp").split(".")[:2])
    assert major == 1
    assert minor >= 20
