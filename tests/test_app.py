from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

import app
import settings
from adapters.sqlite_store import SCHEMA_TEXT
from core.results import EmptyFirstPage, Failure


def test_schema_command_prints_schema(capsys) -> None:
    app.main(["schema"])
    assert capsys.readouterr().out.strip() == SCHEMA_TEXT


def test_build_dispatcher_wires_store_and_transport(store) -> None:
    dispatcher = app.build_dispatcher(store, None)

    assert isinstance(dispatcher.list_chats(), EmptyFirstPage)
    sent = dispatcher.send_message("1@s.whatsapp.net", "hi")
    assert isinstance(sent, Failure)
    assert sent.render() == "Error: WhatsApp connection is not active."


def test_channel_logs_open_without_the_main_log_file(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(settings, "PROJECT_ROOT", str(tmp_path))
    monkeypatch.setattr(
        settings,
        "LOGGING",
        {
            "enabled": True,
            "console": False,
            "file": {"enabled": False},
            "channels": {app.MCP_LOGGER: "logs/mcp-logs.txt"},
        },
    )
    channel_logger = logging.getLogger(app.MCP_LOGGER)
    previous_level = channel_logger.level
    before = list(channel_logger.handlers)

    app._configure_logging()
    added = [handler for handler in channel_logger.handlers if handler not in before]
    try:
        assert len(added) == 1
        assert isinstance(added[0], RotatingFileHandler)
        assert added[0].baseFilename == str(tmp_path / "logs" / "mcp-logs.txt")
        assert not (tmp_path / "logs" / "chatlens.log").exists()
    finally:
        for handler in added:
            channel_logger.removeHandler(handler)
            handler.close()
        channel_logger.setLevel(previous_level)
