# --------------------------------------------------------------
# File: crypto_kdf.py
# Description: Derivación de la clave del vault mediante PBKDF2-HMAC-SHA256.
# --------------------------------------------------------------
"""Derivación determinista de la clave simétrica a partir del secreto maestro.

La misma pareja (secreto maestro, salt) produce siempre la misma clave, de modo
que un usuario que vuelve puede re-derivarla sin guardarla en ningún sitio.

Atención: si la salt cambia (por ejemplo, al renombrar el email usado como
salt) la clave resultante es otra y los registros cifrados con la anterior
dejan de poder descifrarse, sin ningún error visible hasta ese momento.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from vaultx import config
from vaultx.result import ErrorKind, Result

logger = logging.getLogger("vaultx.crypto_kdf")

KEY_LENGTH = 32  # AES-256
ALGORITHM = "AES-GCM-256"

SaltSource = Union[str, bytes, bytearray]


class KeyWipedError(RuntimeError):
    """Se lanza al usar una clave que ya fue borrada."""


class DerivedKey:
    """Clave AES-256-GCM no exportable.

    El material se entrega directamente al objeto AEAD y el búfer temporal se
    sobrescribe con ceros; no hay forma de leer los bytes de la clave después.
    """

    __slots__ = ("_aead",)

    algorithm = ALGORITHM
    length = KEY_LENGTH

    def __init__(self, material: bytearray):
        if len(material) != KEY_LENGTH:
            raise ValueError("La clave debe tener 256 bits")
        self._aead: Optional[AESGCM] = AESGCM(bytes(material))
        for i in range(len(material)):
            material[i] = 0

    @property
    def is_wiped(self) -> bool:
        return self._aead is None

    def aead(self) -> AESGCM:
        """Devuelve la primitiva AEAD ligada a esta clave.

        Raises:
            KeyWipedError: Si la clave ya se borró con `wipe()`.

        """

        if self._aead is None:
            raise KeyWipedError("La clave del vault ya no está disponible")
        return self._aead

    def wipe(self) -> None:
        """Descarta la primitiva; cualquier uso posterior falla."""

        self._aead = None

    def __repr__(self) -> str:
        state = "wiped" if self.is_wiped else "active"
        return f"<DerivedKey {self.algorithm} {state}>"

    def __reduce_ex__(self, protocol):
        raise TypeError("DerivedKey no es serializable")

    def __copy__(self):
        raise TypeError("DerivedKey no se puede copiar")

    def __deepcopy__(self, memo):
        raise TypeError("DerivedKey no se puede copiar")


def normalize_salt(salt: SaltSource) -> bytes:
    """Convierte la salt a bytes; las cadenas se codifican en UTF-8."""

    if isinstance(salt, (bytes, bytearray)):
        return bytes(salt)
    if isinstance(salt, str):
        return salt.encode("utf-8")
    raise TypeError("La salt debe ser str o bytes")


def derive_vault_key(
    master_secret: str,
    salt: SaltSource,
    *,
    iterations: Optional[int] = None,
) -> Result[DerivedKey]:
    """Deriva la clave del vault usando PBKDF2-HMAC-SHA256.

    Un secreto maestro vacío no es un error de derivación: rechazarlo es una
    decisión de política que corresponde al llamador.

    Args:
        master_secret (str): Secreto maestro introducido por el usuario.
        salt (SaltSource): Salt única por cuenta, no necesariamente secreta.
        iterations (Optional[int]): Iteraciones; nunca por debajo del mínimo.

    Returns:
        Result[DerivedKey]: Clave derivada o `DERIVATION_FAILED`.

    """

    rounds = max(config.MIN_PBKDF2_ITERATIONS, iterations or config.PBKDF2_ITERATIONS)
    try:
        if not isinstance(master_secret, str):
            raise TypeError("El secreto maestro debe ser str")
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_LENGTH,
            salt=normalize_salt(salt),
            iterations=rounds,
        )
        material = bytearray(kdf.derive(master_secret.encode("utf-8")))
        return Result.success(DerivedKey(material))
    except (TypeError, ValueError, UnsupportedAlgorithm) as exc:
        logger.error("Fallo en la derivación de la clave: %s", type(exc).__name__)
        return Result.failure(ErrorKind.DERIVATION_FAILED)
