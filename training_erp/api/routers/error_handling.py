"""
API error handling utilities.

A decorator maps the domain exception hierarchy onto the JSON error
envelope, plus a handler that folds request validation failures into the
same envelope.

Error envelope:
    {"ok": false, "error_code": "...", "message": "..."}
    409 responses also carry "conflicts".
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from training_erp.core.exceptions import ResourceConflictError, TrainingErpException

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

INTERNAL_ERROR_MESSAGE = "Error inesperado en deal-sessions"

_FIELD_MESSAGES = {
    "inicio": "El campo inicio debe ser una fecha válida ISO-8601",
    "fin": "El campo fin debe ser una fecha válida ISO-8601",
    "formadores": "El campo formadores debe ser una lista de identificadores",
    "unidades_moviles": "El campo unidades_moviles debe ser una lista de identificadores",
    "dealId": "Falta dealId",
    "deal_id": "Falta dealId",
}


def error_response(
    status_code: int,
    error_code: str,
    message: str,
    **extra: Any,
) -> JSONResponse:
    """Build the JSON error envelope."""
    return JSONResponse(
        status_code=status_code,
        content={"ok": False, "error_code": error_code, "message": message, **extra},
    )


def exception_response(exc: TrainingErpException) -> JSONResponse:
    """Render a domain exception as an error envelope."""
    if isinstance(exc, ResourceConflictError):
        return error_response(
            exc.status_code, exc.error_code, exc.message, conflicts=exc.conflicts
        )
    return error_response(exc.status_code, exc.error_code, exc.message)


def handle_api_errors(func: F) -> F:
    """
    Decorator to turn domain errors into error envelopes.

    This centralizes:
    - Logging of client errors as warnings and unexpected ones with traceback
    - Mapping exception classes to HTTP status codes
    - Hiding internal details from 500 responses
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except TrainingErpException as e:
            logger.warning(
                "Request rejected",
                extra={
                    "operation": func.__name__,
                    "error_code": e.error_code,
                    "error": str(e),
                },
            )
            return exception_response(e)

        except Exception as e:
            logger.exception(
                "Unexpected failure in deal session operation",
                extra={"operation": func.__name__, "error_type": type(e).__name__},
            )
            return error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                TrainingErpException.error_code,
                INTERNAL_ERROR_MESSAGE,
            )

    return wrapper  # type: ignore


def validation_message(exc: RequestValidationError) -> str:
    """Pick a field-specific message for the first validation error."""
    errors = exc.errors()
    if not errors:
        return "Body inválido"
    first = errors[0]
    loc = [part for part in first.get("loc", ()) if isinstance(part, str)]
    if first.get("type") == "json_invalid":
        return "Body inválido"
    if loc == ["body"] and first.get("type") == "missing":
        return "Body requerido"
    field = loc[1] if len(loc) > 1 else (loc[0] if loc else None)
    if field in _FIELD_MESSAGES:
        return _FIELD_MESSAGES[field]
    if field and field != "body":
        return f"El campo {field} no es válido"
    return "Body inválido"


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Fold request validation failures into a 400 VALIDATION_ERROR envelope."""
    message = validation_message(exc)
    logger.warning(
        "Request validation failed",
        extra={"path": request.url.path, "error": message},
    )
    return error_response(status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", message)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render routing errors (unknown path, wrong method) as envelopes."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return error_response(exc.status_code, "NOT_FOUND", "Ruta no encontrada")
    return error_response(exc.status_code, "HTTP_ERROR", str(exc.detail))
