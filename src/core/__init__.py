"""Core domain package for chatlens.

Core contains querying, formatting, and dispatch logic without any SQLite,
HTTP, or MCP-specific code, keeping the business logic portable.
"""
