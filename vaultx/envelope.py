# --------------------------------------------------------------
# File: envelope.py
# Description: Cifrado autenticado de registros del vault en sobres AES-GCM.
# --------------------------------------------------------------
"""Conversión entre `RecordPlaintext` y `EnvelopeCiphertext`.

Cada llamada es independiente: no hay estado compartido entre cifrados y el
nonce se genera de nuevo en cada uno. Un fallo de autenticación (clave
incorrecta, datos corruptos o manipulados) se reporta siempre igual.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from cryptography.exceptions import InvalidTag
from pydantic import ValidationError

from vaultx.crypto_kdf import DerivedKey
from vaultx.crypto_sym import aes_gcm_open, aes_gcm_seal
from vaultx.encoding import canonical_json_bytes
from vaultx.models import EnvelopeCiphertext, RecordPlaintext, VaultRecord
from vaultx.result import ErrorKind, Result

logger = logging.getLogger("vaultx.envelope")

PlaintextInput = Union[RecordPlaintext, Mapping[str, Any]]


def encode_record(record: RecordPlaintext) -> bytes:
    """Forma canónica en bytes de un registro en claro."""

    return canonical_json_bytes(record.model_dump())


def decode_record(data: bytes) -> RecordPlaintext:
    """Revierte `encode_record` exigiendo exactamente la misma codificación.

    Raises:
        ValueError: Si los bytes no corresponden a un registro canónico.

    """

    record = RecordPlaintext.model_validate(json.loads(data.decode("utf-8")))
    if encode_record(record) != data:
        raise ValueError("Codificación no canónica")
    return record


def encrypt_record(plaintext: PlaintextInput, key: DerivedKey) -> Result[EnvelopeCiphertext]:
    """Cifra un registro con la clave del vault.

    Args:
        plaintext (PlaintextInput): Registro o diccionario con `site`,
            `username` y `password`.
        key (DerivedKey): Clave derivada de la sesión desbloqueada.

    Returns:
        Result[EnvelopeCiphertext]: Sobre cifrado o `INVALID_INPUT` si el
        registro no tiene la forma esperada o no se puede codificar en UTF-8.

    Raises:
        KeyWipedError: Si la clave ya fue borrada al bloquear la sesión.

    """

    if not isinstance(plaintext, RecordPlaintext):
        try:
            plaintext = RecordPlaintext.model_validate(dict(plaintext))
        except (TypeError, ValueError):
            return Result.failure(ErrorKind.INVALID_INPUT)

    try:
        data = encode_record(plaintext)
    except UnicodeEncodeError:
        return Result.failure(ErrorKind.INVALID_INPUT)

    ciphertext, nonce = aes_gcm_seal(key, data)
    return Result.success(EnvelopeCiphertext(ciphertext=ciphertext, nonce=nonce))


def decrypt_record(envelope: EnvelopeCiphertext, key: DerivedKey) -> Result[RecordPlaintext]:
    """Descifra y valida un sobre.

    Args:
        envelope (EnvelopeCiphertext): Sobre persistido.
        key (DerivedKey): Clave derivada de la sesión desbloqueada.

    Returns:
        Result[RecordPlaintext]: Registro en claro, `AUTHENTICATION_FAILED` si
        el tag no verifica o `MALFORMED_PLAINTEXT` si el contenido descifrado
        no es un registro válido.

    """

    try:
        data = aes_gcm_open(key, envelope.nonce, envelope.ciphertext)
    except (InvalidTag, ValueError):
        return Result.failure(ErrorKind.AUTHENTICATION_FAILED)

    try:
        return Result.success(decode_record(data))
    except (ValueError, ValidationError):
        logger.warning("Registro descifrado con formato inválido")
        return Result.failure(ErrorKind.MALFORMED_PLAINTEXT)


def decrypt_records(
    records: Iterable[VaultRecord],
    key: DerivedKey,
    *,
    max_workers: Optional[int] = None,
) -> List[Tuple[str, Result[RecordPlaintext]]]:
    """Descifra en paralelo una lista de registros del vault.

    Un fallo en un registro no impide descifrar el resto; cada resultado va
    acompañado del id del registro.
    """

    records = list(records)
    if not records:
        return []
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        results = pool.map(lambda rec: decrypt_record(rec.envelope, key), records)
        return [(rec.id, res) for rec, res in zip(records, results)]
