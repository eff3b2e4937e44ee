# --------------------------------------------------------------
# File: session.py
# Description: Contexto de sesión desbloqueada que posee la clave del vault.
# --------------------------------------------------------------
"""Contexto explícito de una sesión desbloqueada del vault."""

from __future__ import annotations

from typing import Optional

from vaultx.crypto_kdf import DerivedKey


class VaultLockedError(RuntimeError):
    """Se lanza al pedir la clave de una sesión bloqueada."""


class VaultSession:
    """Posee la `DerivedKey` mientras el vault está desbloqueado.

    Solo guarda la clave de cifrado; la credencial de sesión la gestiona el
    llamador por separado. Al bloquear, la clave se borra.
    """

    def __init__(self, key: DerivedKey):
        self._key: Optional[DerivedKey] = key

    @property
    def is_unlocked(self) -> bool:
        return self._key is not None and not self._key.is_wiped

    @property
    def key(self) -> DerivedKey:
        if not self.is_unlocked:
            raise VaultLockedError("El vault está bloqueado")
        return self._key

    def lock(self) -> None:
        if self._key is not None:
            self._key.wipe()
        self._key = None

    def __enter__(self) -> "VaultSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.lock()

    def __repr__(self) -> str:
        state = "unlocked" if self.is_unlocked else "locked"
        return f"<VaultSession {state}>"
