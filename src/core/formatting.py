"""Caller-facing formatting of core models.

Every function here is total: optional fields fall back to documented
defaults so the output can always be serialized to JSON.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.jids import is_group_jid, jid_user
from core.models import Chat, Contact, Message, MessageWindow

UNKNOWN_CHAT = "Unknown Chat"
UNKNOWN_SENDER = "Unknown"
SELF_SENDER = "Me"


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Render a timestamp as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC.

    Naive datetimes are taken to already be in UTC.
    """

    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def derive_sender_display(sender: Optional[str], is_from_me: Optional[bool]) -> str:
    """Return the sender handle, "Me" for own messages, or "Unknown"."""

    if sender:
        return jid_user(sender)
    if is_from_me:
        return SELF_SENDER
    return UNKNOWN_SENDER


def derive_chat_name(jid: Optional[str], name: Optional[str]) -> str:
    """Return the stored name, else the JID handle, else "Unknown Chat"."""

    if name:
        return name
    return jid_user(jid) or UNKNOWN_CHAT


def format_message(message: Message) -> Dict[str, Any]:
    return {
        "id": message.id,
        "chat_jid": message.chat_jid,
        "chat_name": message.chat_name or UNKNOWN_CHAT,
        "sender_jid": message.sender or None,
        "sender_display": derive_sender_display(message.sender, message.is_from_me),
        "content": message.content or "",
        "timestamp": format_timestamp(message.timestamp),
        "is_from_me": bool(message.is_from_me),
    }


def format_chat(chat: Chat) -> Dict[str, Any]:
    # No sender and not from me means there is no summary to describe.
    last_sender_display: Optional[str] = None
    if chat.last_sender or chat.last_is_from_me:
        last_sender_display = derive_sender_display(chat.last_sender, chat.last_is_from_me)

    return {
        "jid": chat.jid,
        "name": derive_chat_name(chat.jid, chat.name),
        "is_group": is_group_jid(chat.jid),
        "last_message_time": format_timestamp(chat.last_message_time),
        "last_message_preview": chat.last_message,
        "last_sender_jid": chat.last_sender or None,
        "last_sender_display": last_sender_display,
        "last_is_from_me": chat.last_is_from_me,
    }


def format_contact(contact: Contact) -> Dict[str, Any]:
    return {"jid": contact.jid, "name": derive_chat_name(contact.jid, contact.name)}


def format_window(window: MessageWindow) -> Dict[str, Any]:
    return {
        "target": format_message(window.target) if window.target else None,
        "before": [format_message(message) for message in window.before],
        "after": [format_message(message) for message in window.after],
    }
