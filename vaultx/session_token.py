# --------------------------------------------------------------
# File: session_token.py
# Description: Emisión y verificación de credenciales de sesión firmadas.
# --------------------------------------------------------------
"""Credenciales de sesión sin estado firmadas con HMAC-SHA256.

Formato: ``b64u(json_canónico{sub,iat,exp}) "." b64u(firma)``. La validez depende
únicamente de la firma y de la caducidad; no hay lista de revocación.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac
from pydantic import ValidationError

from vaultx.encoding import b64u, canonical_json_bytes, unb64u
from vaultx.kdf import derive_app_key
from vaultx.models import SessionClaims
from vaultx.result import ErrorKind, Result

logger = logging.getLogger("vaultx.session_token")

TOKEN_PURPOSE = "session-token"


class TokenSigner:
    """Firma y verifica credenciales de sesión con una clave de la app."""

    def __init__(self, secret: bytes | None = None):
        self._key = derive_app_key(TOKEN_PURPOSE, secret=secret)

    def _mac(self, payload: bytes) -> hmac.HMAC:
        mac = hmac.HMAC(self._key, hashes.SHA256())
        mac.update(payload)
        return mac

    def issue(self, subject_id: str, ttl_seconds: int, *, now: Optional[int] = None) -> str:
        """Emite una credencial para `subject_id` válida durante `ttl_seconds`."""

        issued_at = int(time.time()) if now is None else now
        claims = SessionClaims(sub=subject_id, iat=issued_at, exp=issued_at + ttl_seconds)
        payload = b64u(canonical_json_bytes(claims.model_dump())).encode("ascii")
        signature = self._mac(payload).finalize()
        return f"{payload.decode('ascii')}.{b64u(signature)}"

    def read(self, token: Optional[str], *, now: Optional[int] = None) -> Result[SessionClaims]:
        """Verifica firma y caducidad y devuelve los claims.

        Args:
            token (Optional[str]): Credencial presentada por el llamador.
            now (Optional[int]): Instante de referencia en segundos Unix.

        Returns:
            Result[SessionClaims]: Claims verificados; `UNAUTHORIZED` si no se
            presentó credencial; `INVALID_TOKEN` si la firma no valida, el
            formato es incorrecto o ha caducado.

        """

        if not token:
            return Result.failure(ErrorKind.UNAUTHORIZED)
        if not isinstance(token, str):
            return Result.failure(ErrorKind.INVALID_TOKEN)

        try:
            payload, signature = token.encode("ascii").split(b".")
            self._mac(payload).verify(unb64u(signature.decode("ascii")))
            claims = SessionClaims.model_validate(json.loads(unb64u(payload.decode("ascii"))))
        except (ValueError, UnicodeError, InvalidSignature, ValidationError):
            logger.debug("Credencial rechazada: firma o formato inválidos")
            return Result.failure(ErrorKind.INVALID_TOKEN)

        current = int(time.time()) if now is None else now
        if current >= claims.exp:
            logger.debug("Credencial rechazada: caducada")
            return Result.failure(ErrorKind.INVALID_TOKEN)
        return Result.success(claims)
