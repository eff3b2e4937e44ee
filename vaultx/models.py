# --------------------------------------------------------------
# File: models.py
# Description: Modelos de datos comunes del vault y de la autenticación.
# --------------------------------------------------------------
"""Modelos Pydantic que encapsulan registros, sobres cifrados y cuentas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict

from vaultx.encoding import b64, unb64


class RecordPlaintext(BaseModel):
    """Registro en claro que solo existe alrededor de cifrar/descifrar.

    Attributes:
        site (str): Sitio o servicio al que pertenece la credencial.
        username (str): Usuario en ese sitio.
        password (str): Contraseña en ese sitio.

    """

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    site: str
    username: str
    password: str


class EnvelopeCiphertext(BaseModel):
    """Sobre AES-GCM persistido: ciphertext con tag y nonce por separado.

    Attributes:
        ciphertext (bytes): Datos cifrados seguidos del tag de 128 bits.
        nonce (bytes): Nonce aleatorio de 96 bits usado al cifrar.

    """

    model_config = ConfigDict(frozen=True)

    ciphertext: bytes
    nonce: bytes

    def to_wire(self) -> Dict[str, str]:
        """Representación de transporte: dos campos Base64 hermanos."""

        return {"ciphertext": b64(self.ciphertext), "nonce": b64(self.nonce)}

    @classmethod
    def from_wire(cls, payload: Dict[str, Any]) -> "EnvelopeCiphertext":
        """Reconstruye el sobre desde su forma de transporte.

        Raises:
            ValueError: Si faltan campos o no son Base64 válido.

        """

        ciphertext = payload.get("ciphertext")
        nonce = payload.get("nonce")
        if not isinstance(ciphertext, str) or not isinstance(nonce, str):
            raise ValueError("Se requieren 'ciphertext' y 'nonce' en Base64")
        return cls(ciphertext=unb64(ciphertext), nonce=unb64(nonce))


class VaultRecord(BaseModel):
    """Registro del vault tal y como lo guarda el almacén."""

    model_config = ConfigDict(frozen=True)

    id: str
    owner_id: str
    envelope: EnvelopeCiphertext
    created_at: datetime
    updated_at: datetime

    def to_doc(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            **self.envelope.to_wire(),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "VaultRecord":
        return cls(
            id=doc["id"],
            owner_id=doc["owner_id"],
            envelope=EnvelopeCiphertext.from_wire(doc),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )


class UserAccount(BaseModel):
    """Cuenta de usuario persistida.

    Attributes:
        id (str): Identificador opaco de la cuenta.
        email (str): Email normalizado y único.
        password_hash (str): Hash Argon2id de la contraseña de login.
        kdf_salt (str): Salt aleatoria por cuenta en Base64 URL-safe.
        created_at (datetime): Fecha de alta.

    """

    id: str
    email: str
    password_hash: str
    kdf_salt: str
    created_at: datetime


class SessionClaims(BaseModel):
    """Contenido firmado de una credencial de sesión."""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    sub: str
    iat: int
    exp: int


class LoginGrant(BaseModel):
    """Resultado de un login correcto."""

    model_config = ConfigDict(frozen=True)

    token: str
    subject_id: str
    expires_at: datetime
    kdf_salt: bytes
