"""Helpers for working with WhatsApp JIDs."""

from __future__ import annotations

from typing import Optional, Tuple

JID_SEPARATOR = "@"
USER_SERVER = "s.whatsapp.net"
LEGACY_USER_SERVER = "c.us"
GROUP_SERVER = "g.us"
GROUP_SUFFIX = f"{JID_SEPARATOR}{GROUP_SERVER}"


def is_group_jid(jid: Optional[str]) -> bool:
    """Return True for group chats; groups are only told apart by suffix."""

    return bool(jid) and jid.endswith(GROUP_SUFFIX)


def jid_user(jid: Optional[str]) -> str:
    """Return the part of a JID before the separator (the whole value if absent)."""

    if not jid:
        return ""
    return jid.split(JID_SEPARATOR, 1)[0]


def split_jid(jid: str) -> Optional[Tuple[str, str]]:
    """Split a JID into (user, server), or None when there is no separator."""

    user, sep, server = jid.partition(JID_SEPARATOR)
    if not sep:
        return None
    return user, server


def normalize_jid(raw_jid: str) -> Optional[str]:
    """Normalize a user or group JID to its canonical form.

    Device (``:N``) and agent (``_N``) suffixes are dropped and the legacy
    ``c.us`` server is mapped to ``s.whatsapp.net``. Returns None when the
    value cannot be turned into a JID.
    """

    parts = split_jid(raw_jid.strip())
    if parts is None:
        return None
    user_part, server = parts
    server = server.lower()
    user = user_part.split(":", 1)[0].split("_", 1)[0]
    if not user or not server:
        return None
    if server == LEGACY_USER_SERVER:
        server = USER_SERVER
    return f"{user}{JID_SEPARATOR}{server}"
