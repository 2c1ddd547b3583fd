"""Application entry point for the chatlens MCP server."""

from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import text2art
from dotenv import load_dotenv

import settings
from adapters.mcp_server import build_server
from adapters.sqlite_store import SCHEMA_TEXT, SQLiteStore
from client import build_transport
from core.config import QueryDefaults
from core.dispatcher import ToolDispatcher
from core.gateway import SendGateway
from core.query_engine import QueryEngine

NAME = "CHATLENS"
FONT = "tarty-1"

MCP_LOGGER = "chatlens.mcp"
TRANSPORT_LOGGER = "chatlens.transport"


def _print_banner() -> None:
    # stdout carries the MCP protocol, so the banner goes to stderr.
    print(text2art(NAME, font=FONT, space=1), file=sys.stderr)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _file_handler(path: str, file_cfg: dict, level: int, formatter: logging.Formatter) -> logging.Handler:
    path = path if os.path.isabs(path) else os.path.join(settings.PROJECT_ROOT, path)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    handler = RotatingFileHandler(
        path,
        maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
        backupCount=int(file_cfg.get("backup_count", 5)),
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/chatlens.log")
        handlers.append(_file_handler(path, file_cfg, level, formatter))

    # Tool calls and bridge traffic get their own files, with or without the main one.
    for logger_name, channel_path in config.get("channels", {}).items():
        channel_logger = logging.getLogger(logger_name)
        channel_logger.setLevel(level)
        channel_logger.addHandler(_file_handler(channel_path, file_cfg, level, formatter))

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _install_signal_handlers() -> None:
    def _shutdown(signum, frame) -> None:
        logging.getLogger(__name__).info(
            "Received %s. Shutting down gracefully...", signal.Signals(signum).name
        )
        logging.shutdown()
        sys.exit(0)

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)


def build_dispatcher(store: SQLiteStore, transport) -> ToolDispatcher:
    """Wire the core around the given store and transport."""

    defaults = QueryDefaults(
        chat_limit=settings.DEFAULT_CHAT_LIMIT,
        message_limit=settings.DEFAULT_MESSAGE_LIMIT,
        search_limit=settings.DEFAULT_SEARCH_LIMIT,
        contact_limit=settings.CONTACT_SEARCH_LIMIT,
        context_before=settings.DEFAULT_CONTEXT_BEFORE,
        context_after=settings.DEFAULT_CONTEXT_AFTER,
    )
    mcp_logger = logging.getLogger(MCP_LOGGER)
    return ToolDispatcher(
        engine=QueryEngine(store, logger=mcp_logger),
        gateway=SendGateway(transport, logger=logging.getLogger(TRANSPORT_LOGGER)),
        defaults=defaults,
        logger=mcp_logger,
    )


def _open_store() -> SQLiteStore:
    directory = os.path.dirname(settings.DB_PATH)
    if directory:
        os.makedirs(directory, exist_ok=True)
    store = SQLiteStore(settings.DB_PATH)
    store.init_db()
    return store


def _run() -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    logger.info("Starting chatlens MCP server")
    try:
        store = _open_store()
        logger.info("Database ready at %s", settings.DB_PATH)
        transport = build_transport(settings.BRIDGE_URL, timeout=settings.BRIDGE_TIMEOUT)
    except Exception:
        logger.critical("Failed during initialization", exc_info=True)
        sys.exit(1)

    server = build_server(build_dispatcher(store, transport), logger=logging.getLogger(MCP_LOGGER))
    _install_signal_handlers()

    logger.info("MCP server configured. Serving over stdio...")
    try:
        server.run(transport="stdio")
    except Exception:
        logger.critical("Failed to run the MCP stdio transport", exc_info=True)
        sys.exit(1)


def _init_db() -> None:
    _configure_logging()
    _open_store()
    logging.getLogger(__name__).info("Database initialized at %s", settings.DB_PATH)


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="chatlens")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the MCP server on stdio")
    subparsers.add_parser("init-db", help="Create the chats and messages tables")
    subparsers.add_parser("schema", help="Print the store schema")

    args = parser.parse_args(argv)
    if args.command == "init-db":
        _init_db()
        return
    if args.command == "schema":
        print(SCHEMA_TEXT)
        return
    _run()


if __name__ == "__main__":
    main()
