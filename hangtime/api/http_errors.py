from __future__ import annotations

from collections.abc import Mapping

from fastapi import HTTPException

from hangtime.core.errors import Conflict, Forbidden, InvalidState, NotFound, ValidationError, error_code

_TYPE_STATUSES: tuple[tuple[type[BaseException], int], ...] = (
    (NotFound, 404),
    (Conflict, 409),
    (InvalidState, 409),
    (ValidationError, 400),
    (Forbidden, 403),
)


def domain_error(
    exc: Exception,
    *,
    code_statuses: Mapping[str, int] | None = None,
    detail_overrides: Mapping[str, str] | None = None,
    default_status: int = 400,
    default_detail: str | None = None,
) -> HTTPException:
    """Translate a domain error into an HTTPException.

    An explicit ``code_statuses`` entry wins, then the error's type, then
    ``default_status``. ``detail_overrides`` maps codes to readable text.
    """
    code = error_code(exc)
    detail = detail_overrides.get(code) if detail_overrides else None

    if code_statuses and code in code_statuses:
        return HTTPException(status_code=code_statuses[code], detail=detail or code)

    for exc_type, status in _TYPE_STATUSES:
        if isinstance(exc, exc_type):
            return HTTPException(status_code=status, detail=detail or code)

    return HTTPException(
        status_code=default_status,
        detail=detail or (default_detail if default_detail is not None else code),
    )
