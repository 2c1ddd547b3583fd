"""Tagged outcomes returned by the tool dispatcher.

Callers branch on three cases: data, an empty but valid page, or an error.
Each variant knows whether it is an error and how to render itself as text.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Success:
    payload: Any
    is_error = False

    def render(self) -> str:
        if isinstance(self.payload, str):
            return self.payload
        return json.dumps(self.payload, indent=2, ensure_ascii=False)


@dataclass(frozen=True)
class EmptyFirstPage:
    """Nothing matched at all."""

    message: str
    is_error = False

    def render(self) -> str:
        return self.message


@dataclass(frozen=True)
class EmptyLaterPage:
    """Earlier pages had rows; this one is past the end."""

    message: str
    is_error = False

    def render(self) -> str:
        return self.message


@dataclass(frozen=True)
class ValidationFailed:
    message: str
    is_error = True

    def render(self) -> str:
        return self.message


@dataclass(frozen=True)
class NotFound:
    message: str
    is_error = True

    def render(self) -> str:
        return self.message


@dataclass(frozen=True)
class Failure:
    description: str
    is_error = True

    def render(self) -> str:
        return self.description


ToolResult = Union[Success, EmptyFirstPage, EmptyLaterPage, ValidationFailed, NotFound, Failure]


def empty_page(page: int, first_page_message: str, later_page_message: str) -> ToolResult:
    """Pick the empty-result variant for the requested page."""

    if page == 0:
        return EmptyFirstPage(first_page_message)
    return EmptyLaterPage(later_page_message)
