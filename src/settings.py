"""Static configuration for chatlens.

Settings live in a single flat JSON file so they can be edited without
touching Python. Environment variables (also read from .env) override the
file for the values that differ between machines.
"""

import json
import os

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# config.json sits next to the project root unless pointed elsewhere.
CONFIG_PATH = os.getenv("CHATLENS_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json; a missing file means every default applies."""

    if not os.path.exists(CONFIG_PATH):
        return {}

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Where the chats/messages SQLite database lives.
_store = _CONFIG.get("store", {})
DB_PATH = _resolve_path(os.getenv("CHATLENS_DB_PATH") or _store.get("db_path", "store/messages.db"))

# The WhatsApp bridge delivers outbound messages; the timeout bounds each send.
_bridge = _CONFIG.get("bridge", {})
BRIDGE_URL = os.getenv("WHATSAPP_BRIDGE_URL") or _bridge.get("url", "http://localhost:8080/api")
BRIDGE_TIMEOUT = float(_bridge.get("timeout_seconds", 10))

# Tool defaults used when callers omit paging or context arguments.
_tools = _CONFIG.get("tools", {})
DEFAULT_CHAT_LIMIT = int(_tools.get("chat_limit", 20))
DEFAULT_MESSAGE_LIMIT = int(_tools.get("message_limit", 20))
DEFAULT_SEARCH_LIMIT = int(_tools.get("search_limit", 10))
CONTACT_SEARCH_LIMIT = int(_tools.get("contact_limit", 20))
DEFAULT_CONTEXT_BEFORE = int(_tools.get("context_before", 5))
DEFAULT_CONTEXT_AFTER = int(_tools.get("context_after", 5))

# Logging configuration (optional). LOG_LEVEL wins over the file.
LOGGING = dict(_CONFIG.get("logging", {}))
if os.getenv("LOG_LEVEL"):
    LOGGING["level"] = os.getenv("LOG_LEVEL")
