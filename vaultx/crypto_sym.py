# --------------------------------------------------------------
# File: crypto_sym.py
# Description: Primitivas AES-GCM para cifrado y descifrado con la clave del vault.
# --------------------------------------------------------------
"""Rutinas de cifrado simétrico sobre una `DerivedKey`."""

import os
from typing import Optional, Tuple

from vaultx.crypto_kdf import DerivedKey

NONCE_SIZE = 12  # 96 bits
TAG_SIZE = 16  # 128 bits


def aes_gcm_seal(
    key: DerivedKey, plaintext: bytes, aad: Optional[bytes] = None
) -> Tuple[bytes, bytes]:
    """Cifra datos con AES-GCM generando un nonce aleatorio nuevo.

    El nonce se genera aquí y nunca lo aporta el llamador, así que no se
    puede reutilizar con la misma clave.

    Args:
        key (DerivedKey): Clave del vault.
        plaintext (bytes): Datos a cifrar.
        aad (Optional[bytes]): Datos autenticados adicionales.

    Returns:
        Tuple[bytes, bytes]: Ciphertext con tag al final y nonce.

    """

    nonce = os.urandom(NONCE_SIZE)
    ciphertext = key.aead().encrypt(nonce, plaintext, aad)
    return ciphertext, nonce


def aes_gcm_open(
    key: DerivedKey, nonce: bytes, ciphertext: bytes, aad: Optional[bytes] = None
) -> bytes:
    """Descifra y verifica datos AES-GCM.

    Args:
        key (DerivedKey): Clave del vault.
        nonce (bytes): Nonce de 96 bits usado al cifrar.
        ciphertext (bytes): Datos cifrados con el tag al final.
        aad (Optional[bytes]): Datos autenticados adicionales.

    Returns:
        bytes: Mensaje original en claro.

    Raises:
        cryptography.exceptions.InvalidTag: Si el tag no verifica.
        ValueError: Si el nonce no tiene 96 bits.

    """

    if len(nonce) != NONCE_SIZE:
        raise ValueError("El nonce debe tener 96 bits")
    return key.aead().decrypt(nonce, ciphertext, aad)
