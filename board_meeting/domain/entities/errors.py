from __future__ import annotations


class AgendaError(Exception):
    """Base class for errors raised by agenda actions."""

    kind = "internal"


class AuthenticationError(AgendaError):
    kind = "unauthenticated"


class NotFoundError(AgendaError):
    kind = "not_found"


class ValidationError(AgendaError):
    kind = "validation"


class ConflictError(AgendaError):
    """The target row is in a state that refuses the change."""

    kind = "conflict"


class StorageError(AgendaError):
    kind = "storage"
