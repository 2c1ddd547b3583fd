"""Adapters binding the core to SQLite, the WhatsApp bridge, and MCP."""
