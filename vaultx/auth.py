# --------------------------------------------------------------
# File: auth.py
# Description: Alta, login y verificación de sesión con gestión segura de secretos.
# --------------------------------------------------------------
"""Puerta de autenticación del vault.

El alta guarda solo un hash Argon2id de la contraseña. El login emite una
credencial de sesión de vida corta y nunca revela si un email está registrado.
La verificación de la credencial es independiente de la clave del vault: conocer
una no permite obtener la otra.
"""

from __future__ import annotations

import logging
import os
import re
import time
import uuid
from datetime import UTC, datetime
from typing import Callable, Mapping, Optional

from argon2 import PasswordHasher, exceptions as argon_exc

from vaultx import config
from vaultx.encoding import b64u, unb64u
from vaultx.models import LoginGrant, UserAccount
from vaultx.password_policy import check_login_password
from vaultx.result import ErrorKind, Result
from vaultx.session_token import TokenSigner
from vaultx.storage import DocumentStore, DuplicateKeyError, StorageError

logger = logging.getLogger("vaultx.auth")

USERS = "users"
EMAIL_REGEX = re.compile(r"^\S+@\S+\.\S+$")
KDF_SALT_SIZE = 16
TOKEN_COOKIE = "token"

PH = PasswordHasher(time_cost=3, memory_cost=64 * 1024, parallelism=1, hash_len=32)

# Hash fijo contra el que se verifica cuando el email no existe, para que el
# coste del login no delate qué cuentas están registradas.
_DUMMY_HASH = PH.hash("vaultx-dummy-password")


def normalize_email(email: str) -> str:
    """Normalización única de email compartida por alta y login."""

    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    return EMAIL_REGEX.match(email) is not None


def extract_token(
    cookies: Optional[Mapping[str, str]] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """Obtiene la credencial de la cookie `token` o de `Authorization: Bearer`.

    La cookie tiene preferencia; la cabecera es la alternativa.
    """

    token = (cookies or {}).get(TOKEN_COOKIE)
    if token:
        return token
    for name, value in (headers or {}).items():
        if name.lower() == "authorization" and value.startswith("Bearer "):
            return value.split(" ", 1)[1].strip() or None
    return None


class AuthGate:
    """Gestiona el ciclo de vida de cuentas y credenciales de sesión.

    Args:
        store (DocumentStore): Almacén con la colección de usuarios.
        signer (Optional[TokenSigner]): Firmante de credenciales.
        ttl_seconds (Optional[int]): Vida de la credencial emitida.
        clock (Callable[[], float]): Reloj en segundos Unix.

    """

    def __init__(
        self,
        store: DocumentStore,
        signer: Optional[TokenSigner] = None,
        ttl_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.signer = signer or TokenSigner()
        self.ttl_seconds = ttl_seconds or config.SESSION_TTL_SECONDS
        self.clock = clock

    def signup(self, email: str, password: str) -> Result[UserAccount]:
        """Registra un usuario nuevo.

        Args:
            email (str): Email del usuario; se normaliza antes de guardarse.
            password (str): Contraseña de login; solo se guarda su hash.

        Returns:
            Result[UserAccount]: Cuenta creada, `INVALID_INPUT` si el email o la
            contraseña no son válidos, `ALREADY_EXISTS` si el email ya existe o
            `STORAGE_ERROR` si el almacén falla.

        """

        if not isinstance(email, str) or not isinstance(password, str):
            return Result.failure(ErrorKind.INVALID_INPUT, "Email y contraseña son obligatorios.")

        normalized = normalize_email(email)
        if not is_valid_email(normalized):
            return Result.failure(ErrorKind.INVALID_INPUT, "Formato de email inválido.")
        ok_pw, reasons = check_login_password(password)
        if not ok_pw:
            return Result.failure(ErrorKind.INVALID_INPUT, " ".join(reasons))

        try:
            if self.store.find_one(USERS, email=normalized) is not None:
                return Result.failure(ErrorKind.ALREADY_EXISTS)

            account = UserAccount(
                id=uuid.uuid4().hex,
                email=normalized,
                password_hash=PH.hash(password),
                kdf_salt=b64u(os.urandom(KDF_SALT_SIZE)),
                created_at=datetime.now(UTC),
            )
            self.store.insert(USERS, account.model_dump(mode="json"), unique=("email",))
        except DuplicateKeyError:
            return Result.failure(ErrorKind.ALREADY_EXISTS)
        except StorageError:
            return Result.failure(ErrorKind.STORAGE_ERROR)

        logger.info("Usuario registrado id=%s", account.id)
        return Result.success(account)

    def login(self, email: str, password: str) -> Result[LoginGrant]:
        """Autentica al usuario y emite una credencial de sesión.

        Un email desconocido y una contraseña incorrecta devuelven el mismo
        `INVALID_CREDENTIALS`.
        """

        if not isinstance(email, str) or not isinstance(password, str):
            return Result.failure(ErrorKind.INVALID_CREDENTIALS)

        try:
            doc = self.store.find_one(USERS, email=normalize_email(email))
        except StorageError:
            return Result.failure(ErrorKind.STORAGE_ERROR)

        password_hash = doc["password_hash"] if doc else _DUMMY_HASH
        try:
            PH.verify(password_hash, password)
        except argon_exc.VerifyMismatchError:
            logger.info("Login rechazado")
            return Result.failure(ErrorKind.INVALID_CREDENTIALS)
        except (argon_exc.VerificationError, argon_exc.InvalidHashError):
            logger.error("Error verificando el hash de la contraseña")
            return Result.failure(ErrorKind.INVALID_CREDENTIALS)
        if doc is None:
            return Result.failure(ErrorKind.INVALID_CREDENTIALS)

        account = UserAccount.model_validate(doc)
        now = int(self.clock())
        grant = LoginGrant(
            token=self.signer.issue(account.id, self.ttl_seconds, now=now),
            subject_id=account.id,
            expires_at=datetime.fromtimestamp(now + self.ttl_seconds, UTC),
            kdf_salt=unb64u(account.kdf_salt),
        )
        logger.info("Sesión iniciada id=%s", account.id)
        return Result.success(grant)

    def verify(self, token: Optional[str]) -> Result[str]:
        """Verifica la credencial y devuelve el id del sujeto."""

        claims = self.signer.read(token, now=int(self.clock()))
        if not claims.ok:
            return Result.failure(claims.error)
        return Result.success(claims.value.sub)

    def logout(self, token: Optional[str] = None) -> Result[None]:
        """Cierre de sesión sin estado: el llamador descarta la credencial."""

        subject = self.verify(token)
        if subject.ok:
            logger.info("Sesión cerrada id=%s", subject.value)
        return Result.success(None)
