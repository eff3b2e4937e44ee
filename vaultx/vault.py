# --------------------------------------------------------------
# File: vault.py
# Description: CRUD de registros cifrados con aislamiento por propietario.
# --------------------------------------------------------------
"""Servicio de registros del vault.

El servicio solo maneja sobres opacos; nunca descifra. Todas las operaciones
sobre un registro existente filtran por id y propietario a la vez, y tanto un
registro inexistente como uno ajeno devuelven `NOT_FOUND`.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import List

from vaultx.models import EnvelopeCiphertext, VaultRecord
from vaultx.result import ErrorKind, Result
from vaultx.storage import DocumentStore, StorageError

logger = logging.getLogger("vaultx.vault")

RECORDS = "vault_items"


def _valid_envelope(envelope: EnvelopeCiphertext) -> bool:
    return isinstance(envelope, EnvelopeCiphertext) and bool(envelope.ciphertext) and bool(envelope.nonce)


class VaultRecordService:
    """Superficie CRUD sobre los sobres de cada usuario."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def list(self, subject_id: str) -> Result[List[VaultRecord]]:
        if not subject_id:
            return Result.failure(ErrorKind.UNAUTHORIZED)
        try:
            docs = self.store.find(RECORDS, owner_id=subject_id)
        except StorageError:
            return Result.failure(ErrorKind.STORAGE_ERROR)
        return Result.success([VaultRecord.from_doc(doc) for doc in docs])

    def add(self, subject_id: str, envelope: EnvelopeCiphertext) -> Result[VaultRecord]:
        """Guarda un sobre nuevo; el propietario es siempre `subject_id`."""

        if not subject_id:
            return Result.failure(ErrorKind.UNAUTHORIZED)
        if not _valid_envelope(envelope):
            return Result.failure(ErrorKind.INVALID_INPUT, "Se requieren datos cifrados.")

        now = datetime.now(UTC)
        record = VaultRecord(
            id=uuid.uuid4().hex,
            owner_id=subject_id,
            envelope=envelope,
            created_at=now,
            updated_at=now,
        )
        try:
            self.store.insert(RECORDS, record.to_doc(), unique=("id",))
        except StorageError:
            return Result.failure(ErrorKind.STORAGE_ERROR)
        logger.info("Registro añadido id=%s", record.id)
        return Result.success(record)

    def update(
        self, subject_id: str, record_id: str, envelope: EnvelopeCiphertext
    ) -> Result[VaultRecord]:
        """Sustituye el sobre completo de un registro propio."""

        if not subject_id:
            return Result.failure(ErrorKind.UNAUTHORIZED)
        if not _valid_envelope(envelope):
            return Result.failure(ErrorKind.INVALID_INPUT, "Se requieren datos cifrados.")

        changes = {
            **envelope.to_wire(),
            "updated_at": datetime.now(UTC).isoformat(),
        }
        try:
            doc = self.store.replace_one(
                RECORDS, {"id": record_id, "owner_id": subject_id}, changes
            )
        except StorageError:
            return Result.failure(ErrorKind.STORAGE_ERROR)
        if doc is None:
            return Result.failure(ErrorKind.NOT_FOUND)
        logger.info("Registro actualizado id=%s", record_id)
        return Result.success(VaultRecord.from_doc(doc))

    def delete(self, subject_id: str, record_id: str) -> Result[None]:
        if not subject_id:
            return Result.failure(ErrorKind.UNAUTHORIZED)
        try:
            doc = self.store.delete_one(RECORDS, id=record_id, owner_id=subject_id)
        except StorageError:
            return Result.failure(ErrorKind.STORAGE_ERROR)
        if doc is None:
            return Result.failure(ErrorKind.NOT_FOUND)
        logger.info("Registro eliminado id=%s", record_id)
        return Result.success(None)
