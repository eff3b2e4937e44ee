# --------------------------------------------------------------
# File: services.py
# Description: Servicios expuestos a la capa de interfaz: sesión, cifrado y vault.
# --------------------------------------------------------------
"""Funciones de la capa de servicios que consume la interfaz de usuario.

Dos fronteras independientes:

* Clave del vault: `unlock` deriva la clave localmente a partir del secreto
  maestro; `encrypt_record`/`decrypt_record` la usan a través de una
  `VaultSession`. La clave nunca sale del proceso.
* Credencial de sesión: `signup`/`login`/`verify_session` emiten y validan la
  credencial; las operaciones del vault la reciben y solo ven sobres opacos.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Iterable, List, Optional, Tuple

from vaultx import config
from vaultx.auth import AuthGate
from vaultx.crypto_kdf import SaltSource, derive_vault_key
from vaultx.envelope import PlaintextInput, decrypt_record as _decrypt, decrypt_records
from vaultx.envelope import encrypt_record as _encrypt
from vaultx.models import EnvelopeCiphertext, LoginGrant, RecordPlaintext, UserAccount, VaultRecord
from vaultx.password_policy import generate_password
from vaultx.result import ErrorKind, Result
from vaultx.session import VaultLockedError, VaultSession
from vaultx.storage import JsonDocumentStore
from vaultx.vault import VaultRecordService

logger = logging.getLogger("vaultx.services")

# Configuración de rutas de persistencia.
DATA_DIR = config.STORAGE_PATH
DB_PATH = os.path.join(DATA_DIR, "vault.json")

STORE = JsonDocumentStore(DB_PATH)
GATE = AuthGate(STORE)
VAULT = VaultRecordService(STORE)

__all__ = [
    "add_record",
    "add_record_wire",
    "decrypt_record",
    "decrypt_vault",
    "delete_record",
    "encrypt_record",
    "generate_password",
    "list_records",
    "list_records_wire",
    "lock",
    "login",
    "logout",
    "record_to_wire",
    "signup",
    "unlock",
    "update_record",
    "update_record_wire",
    "verify_session",
]


# ---------------------------------------------------------------------------
# Clave del vault
# ---------------------------------------------------------------------------

def unlock(master_secret: str, salt_source: SaltSource) -> Result[VaultSession]:
    """Deriva la clave del vault y abre una sesión desbloqueada.

    Args:
        master_secret (str): Secreto maestro; no puede estar vacío.
        salt_source (SaltSource): Email normalizado o `kdf_salt` de la cuenta.

    Returns:
        Result[VaultSession]: Sesión con la clave, `INVALID_INPUT` si el
        secreto está vacío o `DERIVATION_FAILED`.

    """

    if not master_secret:
        return Result.failure(ErrorKind.INVALID_INPUT, "El secreto maestro es obligatorio.")
    derived = derive_vault_key(master_secret, salt_source)
    if not derived.ok:
        return Result.failure(derived.error)
    logger.debug("Vault desbloqueado")
    return Result.success(VaultSession(derived.value))


def lock(session: VaultSession) -> None:
    session.lock()
    logger.debug("Vault bloqueado")


def encrypt_record(session: VaultSession, plaintext: PlaintextInput) -> Result[EnvelopeCiphertext]:
    try:
        key = session.key
    except VaultLockedError:
        return Result.failure(ErrorKind.UNAUTHORIZED, "El vault está bloqueado.")
    return _encrypt(plaintext, key)


def decrypt_record(session: VaultSession, envelope: EnvelopeCiphertext) -> Result[RecordPlaintext]:
    try:
        key = session.key
    except VaultLockedError:
        return Result.failure(ErrorKind.UNAUTHORIZED, "El vault está bloqueado.")
    return _decrypt(envelope, key)


def decrypt_vault(
    session: VaultSession, records: Iterable[VaultRecord]
) -> Result[List[Tuple[str, Result[RecordPlaintext]]]]:
    """Descifra todos los registros de una lista; cada uno con su resultado."""

    try:
        key = session.key
    except VaultLockedError:
        return Result.failure(ErrorKind.UNAUTHORIZED, "El vault está bloqueado.")
    return Result.success(decrypt_records(records, key))


# ---------------------------------------------------------------------------
# Autenticación
# ---------------------------------------------------------------------------

def signup(email: str, password: str) -> Result[UserAccount]:
    return GATE.signup(email, password)


def login(email: str, password: str) -> Result[LoginGrant]:
    return GATE.login(email, password)


def logout(token: Optional[str] = None) -> Result[None]:
    return GATE.logout(token)


def verify_session(token: Optional[str]) -> Result[str]:
    return GATE.verify(token)


# ---------------------------------------------------------------------------
# Registros del vault
# ---------------------------------------------------------------------------

def list_records(token: Optional[str]) -> Result[List[VaultRecord]]:
    subject = GATE.verify(token)
    if not subject.ok:
        return Result.failure(subject.error)
    return VAULT.list(subject.value)


def add_record(token: Optional[str], envelope: EnvelopeCiphertext) -> Result[VaultRecord]:
    subject = GATE.verify(token)
    if not subject.ok:
        return Result.failure(subject.error)
    return VAULT.add(subject.value, envelope)


def update_record(
    token: Optional[str], record_id: str, envelope: EnvelopeCiphertext
) -> Result[VaultRecord]:
    subject = GATE.verify(token)
    if not subject.ok:
        return Result.failure(subject.error)
    return VAULT.update(subject.value, record_id, envelope)


def delete_record(token: Optional[str], record_id: str) -> Result[None]:
    subject = GATE.verify(token)
    if not subject.ok:
        return Result.failure(subject.error)
    return VAULT.delete(subject.value, record_id)


# ---------------------------------------------------------------------------
# Variantes de transporte (Base64)
# ---------------------------------------------------------------------------

def record_to_wire(record: VaultRecord) -> Dict[str, str]:
    """Forma de transporte de un registro: id más los dos campos Base64."""

    return {"id": record.id, **record.envelope.to_wire()}


def _envelope_from_wire(payload: Dict[str, Any]) -> Optional[EnvelopeCiphertext]:
    # Solo se leen `ciphertext` y `nonce`; cualquier otro campo se ignora.
    try:
        return EnvelopeCiphertext.from_wire(payload)
    except (ValueError, AttributeError):
        return None


def list_records_wire(token: Optional[str]) -> Result[List[Dict[str, str]]]:
    records = list_records(token)
    if not records.ok:
        return Result.failure(records.error)
    return Result.success([record_to_wire(record) for record in records.value])


def add_record_wire(token: Optional[str], payload: Dict[str, Any]) -> Result[Dict[str, str]]:
    subject = GATE.verify(token)
    if not subject.ok:
        return Result.failure(subject.error)
    envelope = _envelope_from_wire(payload)
    if envelope is None:
        return Result.failure(ErrorKind.INVALID_INPUT, "Se requieren datos cifrados.")
    added = VAULT.add(subject.value, envelope)
    if not added.ok:
        return Result.failure(added.error, added.message)
    return Result.success({"id": added.value.id})


def update_record_wire(
    token: Optional[str], record_id: str, payload: Dict[str, Any]
) -> Result[Dict[str, str]]:
    subject = GATE.verify(token)
    if not subject.ok:
        return Result.failure(subject.error)
    envelope = _envelope_from_wire(payload)
    if envelope is None:
        return Result.failure(ErrorKind.INVALID_INPUT, "Se requieren datos cifrados.")
    updated = VAULT.update(subject.value, record_id, envelope)
    if not updated.ok:
        return Result.failure(updated.error, updated.message)
    return Result.success(record_to_wire(updated.value))
