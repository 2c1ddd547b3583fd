"""Exceptions raised by the core and its ports."""

from __future__ import annotations


class ChatlensError(Exception):
    """Base class for all caller-visible failures."""


class ValidationError(ChatlensError):
    """Arguments were malformed or out of range; nothing was executed."""


class NotFoundError(ChatlensError):
    """A single-entity lookup matched nothing."""


class UpstreamFailure(ChatlensError):
    """The store or the transport raised a fault."""


class TransportUnavailable(ChatlensError):
    """A send was attempted while the messaging connection is down."""
