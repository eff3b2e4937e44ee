# --------------------------------------------------------------
# File: result.py
# Description: Resultado etiquetado y taxonomía de errores del núcleo.
# --------------------------------------------------------------
"""Tipo `Result` con los tipos de error que devuelven las operaciones del vault.

Las operaciones públicas nunca lanzan excepciones para el control de flujo:
devuelven un `Result` que el llamador inspecciona con `ok` y `error`. Los
mensajes son deliberadamente poco específicos para no permitir enumeración.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Tipos de error que puede devolver una operación del núcleo."""

    DERIVATION_FAILED = "derivation_failed"
    AUTHENTICATION_FAILED = "authentication_failed"
    MALFORMED_PLAINTEXT = "malformed_plaintext"
    ALREADY_EXISTS = "already_exists"
    INVALID_CREDENTIALS = "invalid_credentials"
    UNAUTHORIZED = "unauthorized"
    INVALID_TOKEN = "invalid_token"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    STORAGE_ERROR = "storage_error"

    @property
    def retryable(self) -> bool:
        """Indica si reintentar sin cambiar la entrada tiene sentido."""

        return self is ErrorKind.STORAGE_ERROR

    @property
    def message(self) -> str:
        """Mensaje por defecto mostrado al usuario."""

        return _MESSAGES[self]


_MESSAGES = {
    ErrorKind.DERIVATION_FAILED: "No se ha podido derivar la clave del vault.",
    ErrorKind.AUTHENTICATION_FAILED: "Contraseña incorrecta o datos corruptos.",
    ErrorKind.MALFORMED_PLAINTEXT: "El registro descifrado no tiene un formato válido.",
    ErrorKind.ALREADY_EXISTS: "Ya existe un usuario con ese email.",
    ErrorKind.INVALID_CREDENTIALS: "Credenciales inválidas.",
    ErrorKind.UNAUTHORIZED: "No autorizado.",
    ErrorKind.INVALID_TOKEN: "Token inválido.",
    ErrorKind.NOT_FOUND: "Elemento del vault no encontrado.",
    ErrorKind.INVALID_INPUT: "Datos de entrada inválidos.",
    ErrorKind.STORAGE_ERROR: "Error de almacenamiento; inténtalo de nuevo.",
}


class ResultError(Exception):
    """Se lanza al desenvolver un `Result` fallido con `unwrap()`."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind


@dataclass(frozen=True)
class Result(Generic[T]):
    """Resultado de una operación: valor en caso de éxito o tipo de error.

    Attributes:
        value (Optional[T]): Valor devuelto si la operación tuvo éxito.
        error (Optional[ErrorKind]): Tipo de error si la operación falló.
        message (str): Mensaje apto para mostrar al usuario.

    """

    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str | None = None) -> "Result[T]":
        return cls(error=kind, message=message or kind.message)

    def unwrap(self) -> T:
        """Devuelve el valor o lanza `ResultError` si la operación falló."""

        if self.error is not None:
            raise ResultError(self.error, self.message)
        return self.value
