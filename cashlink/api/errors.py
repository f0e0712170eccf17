# cashlink/api/errors.py
"""
Преобразование доменных ошибок в HTTP-ответы.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cashlink.common.exceptions import (
    AmountOutOfRange,
    InvalidTransition,
    NotFound,
    ProviderUnavailable,
    ServiceNotOffered,
    SettlementError,
    StorageUnavailable,
    Unauthorized,
)
from cashlink.common.logger import log_error, log_warning
from cashlink.shared.models.common import ErrorResponse

# Порядок важен: NotPending наследует InvalidTransition
STATUS_CODES: list[tuple[type[SettlementError], int]] = [
    (NotFound, 404),
    (Unauthorized, 403),
    (InvalidTransition, 409),
    (ProviderUnavailable, 409),
    (AmountOutOfRange, 422),
    (ServiceNotOffered, 422),
    (StorageUnavailable, 503),
]


def status_code_for(error: SettlementError) -> int:
    for error_class, status_code in STATUS_CODES:
        if isinstance(error, error_class):
            return status_code
    return 400


def _error_response(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def settlement_error_handler(request: Request, exc: SettlementError) -> JSONResponse:
    status_code = status_code_for(exc)
    log = log_error if status_code >= 500 else log_warning
    await log(f"{request.method} {request.url.path}: {exc.code}: {exc.message}")
    return _error_response(
        status_code,
        ErrorResponse(error_code=exc.code, message=exc.message, details=exc.details or None),
    )


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    await log_warning(f"{request.method} {request.url.path}: {exc}")
    return _error_response(422, ErrorResponse(error_code="validation_error", message=str(exc)))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SettlementError, settlement_error_handler)
    app.add_exception_handler(ValueError, value_error_handler)
