"""
Manejadores de excepciones centralizados para la aplicación FastAPI.

Todas las respuestas de error comparten el cuerpo
{"error": <mensaje>, "error_code": <código>, "details": {...}}.
"""

import logging
import traceback
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.core.logging_config import request_id_var
from app.utils.error_handler import (
    AppException,
    CompensationFailureException,
    CreditLimitExceededException,
    ErrorCode,
    ValidationException,
)

logger = logging.getLogger(__name__)


def _error_response(status_code: int, content: Dict[str, Any]) -> JSONResponse:
    headers = {}
    request_id = request_id_var.get()
    if request_id:
        headers["X-Request-ID"] = request_id
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Manejador para excepciones personalizadas de la aplicación.

    Args:
        request: Request de FastAPI
        exc: Excepción personalizada de la app

    Returns:
        JSONResponse: Respuesta JSON con error formateado
    """
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        f"App Exception: {exc.message} - Code: {exc.error_code.value} - "
        f"{request.method} {request.url.path} - Details: {exc.details}",
    )
    return _error_response(exc.status_code, exc.to_response())


async def validation_exception_handler(request: Request, exc: ValidationException) -> JSONResponse:
    """
    Manejador para errores de validación de datos.
    """
    logger.warning(
        f"Validation Exception: {exc.message} - Field: {exc.field} - "
        f"Value: {exc.invalid_value} - {request.method} {request.url.path}"
    )
    return _error_response(exc.status_code, exc.to_response())


async def credit_limit_exception_handler(request: Request, exc: CreditLimitExceededException) -> JSONResponse:
    """
    Manejador para cargos rechazados por el techo de crédito.
    """
    logger.warning(
        f"Credit limit rejection: limit={exc.credit_limit} balance={exc.current_balance} "
        f"proposed={exc.proposed_balance} - {request.method} {request.url.path}"
    )
    return _error_response(exc.status_code, exc.to_response())


async def compensation_failure_handler(request: Request, exc: CompensationFailureException) -> JSONResponse:
    """
    Manejador para fallos de reversión.

    Se registra como CRITICAL: el saldo puede requerir reconciliación manual.
    """
    logger.critical(
        f"🚨 Compensation failure in {exc.operation} - {request.method} {request.url.path} - "
        f"Original error: {exc.original_error!r}"
    )
    return _error_response(exc.status_code, exc.to_response())


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Manejador para cuerpos o parámetros que no cumplen el esquema.

    Responde 400 con el primer campo inválido.
    """
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(location) or None
    message = first.get("msg", "Invalid request")
    if first.get("type") == "missing" and field:
        message = f"Missing required field: {field}"
    elif field:
        message = f"Invalid {field}: {message}"

    logger.warning(f"Request validation failed: {message} - {request.method} {request.url.path}")

    return _error_response(
        400,
        {
            "error": message,
            "error_code": ErrorCode.VALIDATION_ERROR.value,
            "details": {"field": field, "errors": len(errors)},
        },
    )


async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Manejador para HTTPException de Starlette (rutas inexistentes, métodos no permitidos).
    """
    logger.warning(f"HTTP Exception: {exc.status_code} - {exc.detail} - URL: {request.url}")

    return _error_response(
        exc.status_code,
        {"error": str(exc.detail), "error_code": "HTTP_ERROR", "details": {}},
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Manejador global para excepciones no capturadas.

    Args:
        request: Request de FastAPI
        exc: Excepción no manejada

    Returns:
        JSONResponse: Respuesta JSON de error interno
    """
    settings = get_settings()
    logger.error(
        f"Unhandled Exception: {str(exc)} - Type: {type(exc).__name__} - URL: {request.url}",
        exc_info=exc,
    )

    error_message = "Internal server error occurred"
    details: Dict[str, Any] = {}
    if settings.DEBUG:
        error_message = f"{type(exc).__name__}: {str(exc)}"
        details["traceback"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    return _error_response(
        500,
        {"error": error_message, "error_code": ErrorCode.UNKNOWN_ERROR.value, "details": details},
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """
    Configura todos los manejadores de excepciones de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando manejadores de excepciones...")

    # Manejadores específicos (orden de especificidad)
    app.add_exception_handler(ValidationException, validation_exception_handler)
    app.add_exception_handler(CreditLimitExceededException, credit_limit_exception_handler)
    app.add_exception_handler(CompensationFailureException, compensation_failure_handler)
    app.add_exception_handler(AppException, app_exception_handler)

    # Manejadores de FastAPI/Starlette
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, starlette_http_exception_handler)

    # Manejador global (debe ser el último)
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("✅ Manejadores de excepciones configurados correctamente")
