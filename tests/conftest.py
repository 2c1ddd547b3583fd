from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from adapters.sqlite_store import SQLiteStore
from core.models import Message

BASE_TIME = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


def make_message(
    message_id: str,
    chat_jid: str,
    minutes: int,
    content: "str | None" = "",
    sender: "str | None" = None,
    is_from_me: bool = False,
) -> Message:
    return Message(
        id=message_id,
        chat_jid=chat_jid,
        timestamp=BASE_TIME + timedelta(minutes=minutes),
        sender=sender,
        content=content,
        is_from_me=is_from_me,
    )


@pytest.fixture()
def store(tmp_path) -> SQLiteStore:
    store = SQLiteStore(str(tmp_path / "messages.db"))
    store.init_db()
    return store
