"""
Excepciones de dominio de la aplicación.
Proyecto: Gestor Agencia (Órdenes de Compra y Pagos)

Taxonomía de errores:
- NotFoundError: la orden, partida, proyecto o proveedor referenciado no existe
- InvalidInputError: monto no positivo, lista de partidas mal formada
- BusinessRuleViolation: pago mayor al saldo, proyecto cerrado o no aprobado,
  orden duplicada para una partida de cotización
- TransientFailure: fallo del almacén por causas de infraestructura

Todas llevan un `error_code` estable para el frontend y un `detail` legible
(en español) que se muestra directamente al usuario.

NOTA: BusinessValidationError es distinta de pydantic.ValidationError.
- pydantic.ValidationError: formato/tipo de los datos de entrada (FastAPI → 422)
- BusinessValidationError: violación de reglas de negocio (nuestro handler)
"""

from typing import Any, Dict, Optional

__all__ = [
    "AppException",
    "NotFoundError",
    "BusinessValidationError",
    "InvalidInputError",
    "ConflictError",
    "BusinessRuleViolation",
    "TransientFailure",
]


class AppException(Exception):
    """
    Excepción base de la aplicación.

    Attributes:
        status_code: Código HTTP devuelto al cliente
        error_code: Identificador único del error para el frontend
        detail: Mensaje legible para el usuario
        extra: Datos adicionales para el frontend (ej. saldo pendiente)
    """

    status_code: int = 500
    error_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        detail: str,
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.detail = detail
        self.error_code = error_code if error_code is not None else self.error_code
        self.extra = extra
        self.status_code = self.__class__.status_code
        super().__init__(detail)

    def to_result(self) -> Dict[str, Any]:
        """Forma uniforme de fallo: `{success: False, error, error_code, ...extra}`."""
        result: Dict[str, Any] = {
            "success": False,
            "error": self.detail,
            "error_code": self.error_code,
        }
        if self.extra:
            result.update(self.extra)
        return result


class NotFoundError(AppException):
    """El recurso referenciado no existe en la base de datos."""

    status_code: int = 404
    error_code: str = "RESOURCE_NOT_FOUND"

    def __init__(
        self,
        detail: str = "Recurso no encontrado",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class BusinessValidationError(ValueError, AppException):
    """
    Violación de una regla de validación de negocio.

    Hereda de ValueError para poder lanzarse desde validadores Pydantic.
    """

    status_code: int = 422
    error_code: str = "BUSINESS_VALIDATION_ERROR"

    def __init__(
        self,
        detail: str = "Validación de datos fallida",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        # AppException.__init__ directo para no pasar por ValueError
        AppException.__init__(self, detail, error_code, extra)


class InvalidInputError(BusinessValidationError):
    """
    Entrada inválida para la operación.

    Ejemplos:
        - "El monto debe ser mayor a 0"
        - "Las partidas de la orden no son válidas"
    """

    error_code: str = "INVALID_INPUT"


class ConflictError(AppException):
    """La operación no es posible por el estado actual del recurso."""

    status_code: int = 409
    error_code: str = "CONFLICT_STATE"

    def __init__(
        self,
        detail: str = "Conflicto de estado",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class BusinessRuleViolation(ConflictError):
    """
    Regla de negocio violada.

    Ejemplos:
        - "El pago ($250.00) excede el saldo pendiente ($200.00)"
        - "El proyecto está CERRADO. No se pueden registrar pagos."
        - "Ya existe una orden de compra para esta partida"
    """

    error_code: str = "BUSINESS_RULE_VIOLATION"


class TransientFailure(AppException):
    """
    Fallo del almacén por infraestructura (red, contención).

    Se muestra al usuario como un error genérico; el reintento queda a
    cargo del llamador.
    """

    status_code: int = 503
    error_code: str = "STORE_UNAVAILABLE"

    def __init__(
        self,
        detail: str = "Error de base de datos. Intente de nuevo.",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)
