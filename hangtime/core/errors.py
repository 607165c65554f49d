"""Domain error taxonomy.

Each error carries a short snake_case code as its message, e.g.
``Conflict("already_friends")``. Routers translate them to HTTP responses via
:mod:`hangtime.api.http_errors`.
"""
from __future__ import annotations


class ValidationError(ValueError):
    """Malformed or semantically invalid input."""


class NotFound(ValueError):
    """A referenced entity does not exist."""


class Conflict(ValueError):
    """The operation would duplicate an existing relationship."""


class InvalidState(ValueError):
    """Transition attempted from a terminal or wrong state."""


class Forbidden(PermissionError):
    """The actor lacks rights for the transition."""


def error_code(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__.lower()
