"""Argument validation helpers for tool calls."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from core.errors import ValidationError


def require_text(name: str, value: Any, allow_blank: bool = False) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string")
    if not allow_blank and not value.strip():
        raise ValidationError(f"{name} is required")
    return value


def optional_text(name: str, value: Any) -> Optional[str]:
    """Return None for missing or blank values, otherwise the string."""

    if value is None:
        return None
    value = require_text(name, value, allow_blank=True)
    return value if value.strip() else None


def _require_int(name: str, value: Any) -> int:
    # bool is a subclass of int but never a valid count.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer")
    return value


def positive_int(name: str, value: Any) -> int:
    value = _require_int(name, value)
    if value <= 0:
        raise ValidationError(f"{name} must be greater than 0")
    return value


def non_negative_int(name: str, value: Any) -> int:
    value = _require_int(name, value)
    if value < 0:
        raise ValidationError(f"{name} must be 0 or greater")
    return value


def require_bool(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{name} must be a boolean")
    return value


def require_choice(name: str, value: Any, choices: Iterable[str]) -> str:
    allowed = list(choices)
    if value not in allowed:
        raise ValidationError(f"{name} must be one of: {', '.join(allowed)}")
    return value
