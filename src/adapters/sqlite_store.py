"""SQLite store adapter.

Implements the core StorePort on the two-table chats/messages schema, plus
the small write surface the ingestion side uses to fill it.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, List, Optional

from core.formatting import derive_chat_name
from core.jids import GROUP_SUFFIX, jid_user
from core.models import Chat, Contact, Message, MessageWindow
from core.query_engine import SORT_NAME, page_offset

SCHEMA_TEXT = """
TABLE chats (jid TEXT PK, name TEXT, last_message_time TIMESTAMP)
TABLE messages (id TEXT, chat_jid TEXT, sender TEXT, content TEXT, timestamp TIMESTAMP, is_from_me BOOLEAN, PK(id, chat_jid), FK(chat_jid) REFERENCES chats(jid))
""".strip()

_MESSAGE_COLUMNS = """
    m.id, m.chat_jid, m.sender, m.content, m.timestamp, m.is_from_me,
    c.name AS chat_name
"""

_MESSAGE_FROM = "FROM messages m LEFT JOIN chats c ON c.jid = m.chat_jid"


def to_db_timestamp(value: datetime) -> str:
    """Serialize to fixed-width UTC ISO text so string order is time order."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def from_db_timestamp(value) -> Optional[datetime]:
    """Parse a column written by to_db_timestamp.

    Range and ordering queries compare the raw column text, so values in any
    other encoding are rejected with ValueError.
    """

    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"Unsupported timestamp value: {value!r}")
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None or to_db_timestamp(parsed) != value:
        raise ValueError(f"Timestamp not in stored UTC format: {value!r}")
    return parsed


def _casefold(value: Optional[str]) -> str:
    return (value or "").casefold()


def _optional_bool(value) -> Optional[bool]:
    return None if value is None else bool(value)


def _row_to_message(row: sqlite3.Row) -> Message:
    return Message(
        id=row["id"],
        chat_jid=row["chat_jid"],
        sender=row["sender"],
        content=row["content"],
        timestamp=from_db_timestamp(row["timestamp"]),
        is_from_me=bool(row["is_from_me"]),
        chat_name=row["chat_name"],
    )


def _row_to_chat(row: sqlite3.Row) -> Chat:
    return Chat(
        jid=row["jid"],
        name=row["name"],
        last_message_time=from_db_timestamp(row["last_message_time"]),
        last_message=row["last_message"],
        last_sender=row["last_sender"],
        last_is_from_me=_optional_bool(row["last_is_from_me"]),
    )


def _chat_select(include_last_message: bool) -> str:
    if not include_last_message:
        return """
            SELECT c.jid, c.name, c.last_message_time,
                   NULL AS last_message, NULL AS last_sender, NULL AS last_is_from_me
            FROM chats c
        """
    # Join exactly one row: the newest message of each chat.
    return """
        SELECT c.jid, c.name, c.last_message_time,
               lm.content AS last_message, lm.sender AS last_sender,
               lm.is_from_me AS last_is_from_me
        FROM chats c
        LEFT JOIN messages lm ON lm.rowid = (
            SELECT rowid FROM messages
            WHERE chat_jid = c.jid
            ORDER BY timestamp DESC, id DESC
            LIMIT 1
        )
    """


class SQLiteStore:
    """Thin SQLite wrapper that satisfies the StorePort contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        # SQLite's own LOWER/LIKE only fold ASCII.
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        conn.create_function("display_name", 2, derive_chat_name, deterministic=True)
        conn.create_function("jid_user", 1, jid_user, deterministic=True)
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - chats: one row per conversation, keyed by JID
        - messages: message log, unique per (id, chat_jid)
        """

        with self._connect() as conn:
            # last_message_time is maintained by store_message so chats can be
            # ordered by activity without scanning messages.
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS chats (
                    jid TEXT PRIMARY KEY,
                    name TEXT,
                    last_message_time TIMESTAMP
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS messages (
                    id TEXT,
                    chat_jid TEXT,
                    sender TEXT,
                    content TEXT,
                    timestamp TIMESTAMP,
                    is_from_me BOOLEAN,
                    PRIMARY KEY (id, chat_jid),
                    FOREIGN KEY (chat_jid) REFERENCES chats(jid)
                )
                """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_messages_chat_timestamp
                ON messages (chat_jid, timestamp)
                """
            )

    def upsert_chat(
        self,
        jid: str,
        name: Optional[str] = None,
        last_message_time: Optional[datetime] = None,
    ) -> None:
        """Insert a chat or refresh its name and activity time.

        A missing name never erases a known one, and the activity time only
        moves forward.
        """

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO chats (jid, name, last_message_time)
                VALUES (?, ?, ?)
                ON CONFLICT(jid) DO UPDATE SET
                    name = COALESCE(excluded.name, chats.name),
                    last_message_time = CASE
                        WHEN chats.last_message_time IS NULL THEN excluded.last_message_time
                        WHEN excluded.last_message_time IS NULL THEN chats.last_message_time
                        ELSE MAX(chats.last_message_time, excluded.last_message_time)
                    END
                """,
                (
                    jid,
                    name,
                    to_db_timestamp(last_message_time) if last_message_time else None,
                ),
            )

    def store_message(self, message: Message) -> bool:
        """Persist a message; returns False if (id, chat_jid) already exists."""

        timestamp = to_db_timestamp(message.timestamp)
        with self._connect() as conn:
            conn.execute(
                "INSERT OR IGNORE INTO chats (jid, name) VALUES (?, ?)",
                (message.chat_jid, message.chat_name),
            )
            cur = conn.execute(
                """
                INSERT OR IGNORE INTO messages (
                    id, chat_jid, sender, content, timestamp, is_from_me
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    message.id,
                    message.chat_jid,
                    message.sender,
                    message.content,
                    timestamp,
                    bool(message.is_from_me),
                ),
            )
            inserted = cur.rowcount > 0
            if inserted:
                conn.execute(
                    """
                    UPDATE chats SET last_message_time = ?
                    WHERE jid = ? AND (last_message_time IS NULL OR last_message_time < ?)
                    """,
                    (timestamp, message.chat_jid, timestamp),
                )
            return inserted

    def list_chats(
        self,
        limit: int,
        page: int,
        sort_by: str,
        query: Optional[str],
        include_last_message: bool,
    ) -> List[Chat]:
        sql = _chat_select(include_last_message)
        params: list = []
        if query:
            needle = query.casefold()
            sql += " WHERE (instr(casefold(c.name), ?) > 0 OR instr(casefold(c.jid), ?) > 0)"
            params.extend([needle, needle])
        if sort_by == SORT_NAME:
            sql += " ORDER BY casefold(display_name(c.jid, c.name)) ASC, c.jid ASC"
        else:
            sql += (
                " ORDER BY c.last_message_time IS NULL, c.last_message_time DESC, c.jid ASC"
            )
        sql += " LIMIT ? OFFSET ?"
        params.extend([limit, page_offset(limit, page)])

        with self._connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_row_to_chat(row) for row in rows]

    def get_chat(self, jid: str, include_last_message: bool) -> Optional[Chat]:
        sql = _chat_select(include_last_message) + " WHERE c.jid = ?"
        with self._connect() as conn:
            row = conn.execute(sql, (jid,)).fetchone()
        return _row_to_chat(row) if row else None

    def list_messages(self, chat_jid: str, limit: int, page: int) -> List[Message]:
        with self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT {_MESSAGE_COLUMNS} {_MESSAGE_FROM}
                WHERE m.chat_jid = ?
                ORDER BY m.timestamp DESC, m.id DESC
                LIMIT ? OFFSET ?
                """,
                (chat_jid, limit, page_offset(limit, page)),
            ).fetchall()
        return [_row_to_message(row) for row in rows]

    def search_messages(
        self, query: str, chat_jid: Optional[str], limit: int, page: int
    ) -> List[Message]:
        sql = f"SELECT {_MESSAGE_COLUMNS} {_MESSAGE_FROM} WHERE instr(casefold(m.content), ?) > 0"
        params: list = [query.casefold()]
        if chat_jid:
            sql += " AND m.chat_jid = ?"
            params.append(chat_jid)
        sql += " ORDER BY m.timestamp DESC, m.chat_jid ASC, m.id DESC LIMIT ? OFFSET ?"
        params.extend([limit, page_offset(limit, page)])

        with self._connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_row_to_message(row) for row in rows]

    def get_messages_around(
        self, message_id: str, before: int, after: int, chat_jid: Optional[str] = None
    ) -> MessageWindow:
        """Load a message and its neighbours from the same chat.

        Ids are only unique per chat. Without ``chat_jid`` a duplicated id
        resolves to its most recent occurrence, then to the lowest chat JID.
        """

        target_sql = f"SELECT {_MESSAGE_COLUMNS} {_MESSAGE_FROM} WHERE m.id = ?"
        params: list = [message_id]
        if chat_jid:
            target_sql += " AND m.chat_jid = ?"
            params.append(chat_jid)
        target_sql += " ORDER BY m.timestamp DESC, m.chat_jid ASC LIMIT 1"

        with self._connect() as conn:
            target_row = conn.execute(target_sql, params).fetchone()
            if target_row is None:
                return MessageWindow(target=None)

            # Compare against the stored text so the bounds match the column exactly.
            anchor_chat = target_row["chat_jid"]
            anchor_time = target_row["timestamp"]
            before_rows = conn.execute(
                f"""
                SELECT {_MESSAGE_COLUMNS} {_MESSAGE_FROM}
                WHERE m.chat_jid = ? AND m.timestamp < ?
                ORDER BY m.timestamp DESC, m.id DESC
                LIMIT ?
                """,
                (anchor_chat, anchor_time, before),
            ).fetchall()
            after_rows = conn.execute(
                f"""
                SELECT {_MESSAGE_COLUMNS} {_MESSAGE_FROM}
                WHERE m.chat_jid = ? AND m.timestamp > ?
                ORDER BY m.timestamp ASC, m.id ASC
                LIMIT ?
                """,
                (anchor_chat, anchor_time, after),
            ).fetchall()

        return MessageWindow(
            target=_row_to_message(target_row),
            before=[_row_to_message(row) for row in reversed(before_rows)],
            after=[_row_to_message(row) for row in after_rows],
        )

    def search_contacts(self, query: str, limit: int) -> List[Contact]:
        """Match individual (non-group) chats by name or phone handle."""

        needle = query.casefold()
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT jid, name FROM chats
                WHERE jid NOT LIKE ?
                  AND (instr(casefold(name), ?) > 0 OR instr(casefold(jid_user(jid)), ?) > 0)
                ORDER BY casefold(display_name(jid, name)) ASC, jid ASC
                LIMIT ?
                """,
                (f"%{GROUP_SUFFIX}", needle, needle, limit),
            ).fetchall()
        return [Contact(jid=row["jid"], name=row["name"]) for row in rows]
