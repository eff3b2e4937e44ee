# --------------------------------------------------------------
# File: test_vault_service.py
# Description: Pruebas del CRUD de registros cifrados y del aislamiento por propietario.
# --------------------------------------------------------------

import os

import pytest

from vaultx.models import EnvelopeCiphertext
from vaultx.result import ErrorKind
from vaultx.storage import StorageError
from vaultx.vault import RECORDS


def _envelope() -> EnvelopeCiphertext:
    """Sobre opaco de pruebas; el servicio nunca lo descifra.

    Returns:
        EnvelopeCiphertext: Bytes aleatorios con nonce de 96 bits.
    """
    return EnvelopeCiphertext(ciphertext=os.urandom(40), nonce=os.urandom(12))


def test_add_and_list_own_records(vault_service):
    """Comprueba que cada usuario solo vea sus propios registros.

    Returns:
        None: Las aserciones revisan los listados.
    """
    env = _envelope()
    rec = vault_service.add("alice", env).unwrap()
    vault_service.add("bob", _envelope()).unwrap()

    listed = vault_service.list("alice").unwrap()
    assert [r.id for r in listed] == [rec.id]
    assert listed[0].envelope == env
    assert listed[0].owner_id == "alice"


def test_add_ignores_caller_supplied_owner(vault_service, store):
    """Verifica que el propietario sea siempre el sujeto autenticado.

    Returns:
        None: Las aserciones revisan el documento guardado.
    """
    rec = vault_service.add("alice", _envelope()).unwrap()
    doc = store.find_one(RECORDS, id=rec.id)
    assert doc["owner_id"] == "alice"


@pytest.mark.parametrize(
    "envelope",
    [
        EnvelopeCiphertext(ciphertext=b"", nonce=b"123456789012"),
        EnvelopeCiphertext(ciphertext=b"abc", nonce=b""),
        None,
    ],
)
def test_add_requires_ciphertext_and_nonce(vault_service, envelope):
    """Garantiza que no se guarden sobres vacíos.

    Returns:
        None: Se espera INVALID_INPUT.
    """
    assert vault_service.add("alice", envelope).error is ErrorKind.INVALID_INPUT
    assert vault_service.list("alice").unwrap() == []


def test_other_owner_gets_not_found_everywhere(vault_service, store):
    """Comprueba el aislamiento: B no puede ver, modificar ni borrar el registro de A.

    Returns:
        None: Todas las operaciones de B devuelven NOT_FOUND y nada cambia.
    """
    env = _envelope()
    rec = vault_service.add("alice", env).unwrap()
    before = store.find_one(RECORDS, id=rec.id)

    assert vault_service.list("bob").unwrap() == []
    assert vault_service.update("bob", rec.id, _envelope()).error is ErrorKind.NOT_FOUND
    assert vault_service.delete("bob", rec.id).error is ErrorKind.NOT_FOUND
    assert store.find_one(RECORDS, id=rec.id) == before


def test_missing_and_foreign_records_are_indistinguishable(vault_service):
    """Verifica que un registro ajeno y uno inexistente den el mismo error.

    Returns:
        None: Las aserciones comparan tipo y mensaje.
    """
    rec = vault_service.add("alice", _envelope()).unwrap()
    foreign = vault_service.delete("bob", rec.id)
    missing = vault_service.delete("bob", "does-not-exist")
    assert foreign.error is missing.error is ErrorKind.NOT_FOUND
    assert foreign.message == missing.message


def test_update_replaces_whole_envelope(vault_service):
    """Comprueba que la actualización sustituya ciphertext y nonce juntos.

    Returns:
        None: Las aserciones revisan el registro tras actualizar.
    """
    rec = vault_service.add("alice", _envelope()).unwrap()
    new_env = _envelope()
    updated = vault_service.update("alice", rec.id, new_env).unwrap()
    assert updated.envelope == new_env
    assert updated.owner_id == "alice"
    assert updated.created_at == rec.created_at
    assert vault_service.list("alice").unwrap()[0].envelope == new_env


def test_invalid_update_does_not_mutate(vault_service):
    """Garantiza que una actualización rechazada deje el registro intacto.

    Returns:
        None: Las aserciones comparan con el sobre original.
    """
    env = _envelope()
    rec = vault_service.add("alice", env).unwrap()
    bad = EnvelopeCiphertext(ciphertext=b"", nonce=b"")
    assert vault_service.update("alice", rec.id, bad).error is ErrorKind.INVALID_INPUT
    assert vault_service.list("alice").unwrap()[0].envelope == env


def test_delete_own_record(vault_service):
    """Verifica que el propietario pueda borrar su registro una sola vez.

    Returns:
        None: El segundo borrado devuelve NOT_FOUND.
    """
    rec = vault_service.add("alice", _envelope()).unwrap()
    assert vault_service.delete("alice", rec.id).ok
    assert vault_service.delete("alice", rec.id).error is ErrorKind.NOT_FOUND
    assert vault_service.list("alice").unwrap() == []


def test_blank_subject_is_unauthorized(vault_service):
    """Comprueba que sin sujeto verificado no se pueda operar.

    Returns:
        None: Se espera UNAUTHORIZED.
    """
    assert vault_service.list("").error is ErrorKind.UNAUTHORIZED
    assert vault_service.add("", _envelope()).error is ErrorKind.UNAUTHORIZED
    assert vault_service.update("", "x", _envelope()).error is ErrorKind.UNAUTHORIZED
    assert vault_service.delete("", "x").error is ErrorKind.UNAUTHORIZED


def test_storage_failure_is_retryable(vault_service, monkeypatch):
    """Valida que un fallo del almacén se reporte como reintentable.

    Returns:
        None: Se espera STORAGE_ERROR.
    """

    def _fail(*args, **kwargs):
        raise StorageError("down")

    monkeypatch.setattr(vault_service.store, "find", _fail)
    result = vault_service.list("alice")
    assert result.error is ErrorKind.STORAGE_ERROR
    assert result.error.retryable
