# --------------------------------------------------------------
# File: encoding.py
# Description: Codificaciones Base64 y JSON canónico compartidas.
# --------------------------------------------------------------
"""Utilidades de codificación para transporte y serialización determinista."""

import base64
import binascii
import json
from typing import Any, Dict


def b64(data: bytes) -> str:
    """Codifica bytes en Base64 estándar con relleno (formato de transporte)."""

    return base64.b64encode(data).decode("ascii")


def unb64(value: str) -> bytes:
    """Decodifica Base64 estándar rechazando caracteres fuera del alfabeto.

    Raises:
        ValueError: Si `value` no es Base64 válido.

    """

    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, TypeError) as exc:
        raise ValueError("Base64 inválido") from exc


def b64u(data: bytes) -> str:
    """Codifica datos binarios en Base64 URL-safe sin relleno."""

    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def unb64u(value: str) -> bytes:
    """Decodifica Base64 URL-safe gestionando el relleno."""

    pad = "=" * (-len(value) % 4)
    try:
        return base64.urlsafe_b64decode(value + pad)
    except (binascii.Error, TypeError) as exc:
        raise ValueError("Base64 URL-safe inválido") from exc


def canonical_json_bytes(payload: Dict[str, Any]) -> bytes:
    """Serializa un diccionario de forma determinista en UTF-8.

    Claves ordenadas y sin espacios, para que el mismo registro produzca
    siempre los mismos bytes.
    """

    return json.dumps(
        payload, separators=(",", ":"), sort_keys=True, ensure_ascii=False
    ).encode("utf-8")
