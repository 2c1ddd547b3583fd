"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class QueryDefaults:
    """Default page sizes and context widths applied by the dispatcher."""

    chat_limit: int = 20
    message_limit: int = 20
    search_limit: int = 10
    contact_limit: int = 20
    context_before: int = 5
    context_after: int = 5
