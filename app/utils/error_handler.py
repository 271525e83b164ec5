"""
Sistema de manejo de errores personalizado.

Este módulo define todas las excepciones personalizadas de la aplicación
y su representación como cuerpo de respuesta.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """
    Códigos de error estandardizados para la aplicación.
    """

    # Errores generales
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # Errores del ledger
    CREDIT_LIMIT_EXCEEDED = "CREDIT_LIMIT_EXCEEDED"
    LEDGER_CONCURRENCY_CONFLICT = "LEDGER_CONCURRENCY_CONFLICT"
    COMPENSATION_FAILED = "COMPENSATION_FAILED"

    # Errores de infraestructura
    DATABASE_ERROR = "DATABASE_ERROR"
    DATABASE_CONNECTION_FAILED = "DATABASE_CONNECTION_FAILED"
    REDIS_CONNECTION_FAILED = "REDIS_CONNECTION_FAILED"


class ErrorSeverity(Enum):
    """
    Niveles de severidad para errores.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AppException(Exception):
    """
    Excepción base para todas las excepciones personalizadas de la aplicación.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        is_critical: bool = False,
    ):
        """
        Inicializa la excepción.

        Args:
            message: Mensaje de error
            error_code: Código de error estandardizado
            details: Información adicional del error
            status_code: Código HTTP asociado
            severity: Severidad del error
            is_critical: Si requiere alerta inmediata
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.severity = severity
        self.is_critical = is_critical
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convierte la excepción a diccionario.

        Returns:
            Dict: Representación de la excepción
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "details": self.details,
            "status_code": self.status_code,
            "severity": self.severity.value,
            "is_critical": self.is_critical,
            "timestamp": self.timestamp.isoformat(),
        }

    def to_response(self) -> Dict[str, Any]:
        """
        Cuerpo JSON devuelto al cliente.

        Returns:
            Dict: {"error": mensaje, "error_code": código, "details": detalles}
        """
        return {
            "error": self.message,
            "error_code": self.error_code.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"


class ValidationException(AppException):
    """
    Excepción para errores de validación de datos.

    Siempre se lanza antes de cualquier escritura.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        invalid_value: Any = None,
        **kwargs,
    ):
        """
        Inicializa la excepción de validación.

        Args:
            message: Mensaje de error
            field: Campo que falló la validación
            invalid_value: Valor que causó el error
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=ErrorCode.VALIDATION_ERROR,
            status_code=400,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.field = field
        self.invalid_value = invalid_value

        if field is not None:
            self.details.update(
                {
                    "field": field,
                    "invalid_value": str(invalid_value) if invalid_value is not None else None,
                }
            )


class NotFoundException(AppException):
    """
    Excepción para recursos inexistentes.
    """

    def __init__(self, entity: str, identifier: Any, message: Optional[str] = None, **kwargs):
        """
        Inicializa la excepción.

        Args:
            entity: Nombre legible de la entidad ("Order", "Account"...)
            identifier: Clave buscada
            message: Mensaje alternativo
        """
        super().__init__(
            message=message or f"{entity} not found",
            error_code=ErrorCode.NOT_FOUND,
            status_code=404,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.entity = entity
        self.identifier = identifier
        self.details.update({"entity": entity, "identifier": str(identifier)})


class ConflictException(AppException):
    """
    Excepción para violaciones de unicidad o filas dependientes.
    """

    def __init__(self, message: str, constraint: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.CONFLICT,
            status_code=400,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.constraint = constraint
        if constraint:
            self.details.update({"constraint": constraint})


class CreditLimitExceededException(AppException):
    """
    Excepción para cargos rechazados por el límite de crédito.

    Las escrituras del flujo que la lanza se revierten en la misma petición.
    """

    def __init__(
        self,
        credit_limit: Any,
        current_balance: Any,
        proposed_balance: Any,
        message: Optional[str] = None,
        **kwargs,
    ):
        """
        Inicializa la excepción.

        Args:
            credit_limit: Techo configurado en la cuenta
            current_balance: Saldo antes del cargo
            proposed_balance: Saldo que habría resultado
            message: Mensaje alternativo
        """
        super().__init__(
            message=message
            or (
                "Adding this item would exceed credit limit. "
                f"Credit limit: {credit_limit}, Current balance: {current_balance}, "
                f"New balance would be: {proposed_balance}"
            ),
            error_code=ErrorCode.CREDIT_LIMIT_EXCEEDED,
            status_code=400,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.credit_limit = credit_limit
        self.current_balance = current_balance
        self.proposed_balance = proposed_balance
        self.details.update(
            {
                "credit_limit": str(credit_limit),
                "current_balance": str(current_balance),
                "proposed_balance": str(proposed_balance),
            }
        )


class LedgerConcurrencyException(AppException):
    """
    Excepción cuando otra operación mantiene ocupada la cuenta.
    """

    def __init__(self, message: str, account_id: Optional[int] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.LEDGER_CONCURRENCY_CONFLICT,
            status_code=409,
            severity=ErrorSeverity.MEDIUM,
            **kwargs,
        )
        self.account_id = account_id
        if account_id is not None:
            self.details.update({"account_id": account_id})


class CompensationFailureException(AppException):
    """
    Excepción cuando no se pudo deshacer un flujo fallido.

    El estado persistido puede ser inconsistente; requiere revisión manual.
    """

    def __init__(self, operation: str, original_error: Optional[BaseException] = None, **kwargs):
        """
        Inicializa la excepción.

        Args:
            operation: Flujo que falló
            original_error: Error que disparó la reversión
        """
        super().__init__(
            message=f"Failed to roll back {operation}; ledger state may be inconsistent",
            error_code=ErrorCode.COMPENSATION_FAILED,
            status_code=500,
            severity=ErrorSeverity.CRITICAL,
            is_critical=True,
            **kwargs,
        )
        self.operation = operation
        self.original_error = original_error
        self.details.update(
            {
                "operation": operation,
                "original_error": str(original_error) if original_error is not None else None,
            }
        )


class DatabaseException(AppException):
    """
    Excepción para errores del almacén relacional.
    """

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.DATABASE_ERROR,
            status_code=500,
            severity=ErrorSeverity.HIGH,
            **kwargs,
        )
        self.operation = operation
        if operation:
            self.details.update({"operation": operation})


class DatabaseConnectionException(AppException):
    """
    Excepción para errores de conexión con la base de datos.
    """

    def __init__(self, message: str, database_url: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.DATABASE_CONNECTION_FAILED,
            status_code=503,
            severity=ErrorSeverity.HIGH,
            is_critical=True,
            **kwargs,
        )
        self.database_url = database_url
        if database_url:
            self.details.update({"database_url": database_url})
