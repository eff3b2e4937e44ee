# --------------------------------------------------------------
# File: test_storage.py
# Description: Pruebas sobre la capa de persistencia JSON de vaultx.storage.
# --------------------------------------------------------------

import pytest

from vaultx.storage import DuplicateKeyError, JsonDocumentStore, StorageError, load_db, save_db


def test_load_db_returns_empty_when_missing(tmp_path):
    """Comprueba que load_db devuelva una base vacía cuando no existe archivo.

    Args:
        tmp_path (Path): Carpeta temporal proporcionada por pytest.

    Returns:
        None: Las aserciones validan la estructura creada en memoria.
    """
    path = tmp_path / "db.json"
    assert load_db(str(path)) == {}
    assert not path.exists()


def test_save_db_creates_and_reads(tmp_path):
    """Verifica que save_db persista y que load_db recupere la misma estructura.

    Args:
        tmp_path (Path): Carpeta temporal proporcionada por pytest.

    Returns:
        None: Las aserciones comparan el JSON guardado con el cargado.
    """
    path = tmp_path / "nested" / "db.json"
    data = {"users": [{"id": "1", "email": "a@b.com"}]}
    save_db(data, str(path))
    assert load_db(str(path)) == data


def test_save_db_is_atomic(tmp_path):
    """Garantiza que el guardado no deje archivos temporales residuales.

    Args:
        tmp_path (Path): Carpeta temporal proporcionada por pytest.

    Returns:
        None: Las aserciones comprueban la presencia y ausencia de archivos esperada.
    """
    path = tmp_path / "db.json"
    save_db({"users": []}, str(path))
    assert path.exists()
    assert not (tmp_path / "db.json.tmp").exists()


def test_load_db_with_corrupt_json_raises(tmp_path):
    """Valida que un JSON corrupto no se sustituya silenciosamente por una base vacía.

    Args:
        tmp_path (Path): Carpeta temporal proporcionada por pytest.

    Returns:
        None: Se espera StorageError.
    """
    path = tmp_path / "db.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError):
        load_db(str(path))
    with pytest.raises(StorageError):
        JsonDocumentStore(str(path)).find("users")


def test_insert_enforces_unique_fields(store):
    """Comprueba que la restricción de unicidad rechace duplicados.

    Returns:
        None: Se espera DuplicateKeyError y un único documento guardado.
    """
    store.insert("users", {"id": "1", "email": "a@x.com"}, unique=("email",))
    with pytest.raises(DuplicateKeyError) as info:
        store.insert("users", {"id": "2", "email": "a@x.com"}, unique=("email",))
    assert info.value.field == "email"
    assert len(store.find("users")) == 1


def test_find_filters_by_all_fields(store):
    """Verifica que find y find_one apliquen todos los filtros a la vez.

    Returns:
        None: Las aserciones revisan los documentos devueltos.
    """
    store.insert("items", {"id": "a", "owner_id": "u1"})
    store.insert("items", {"id": "b", "owner_id": "u2"})
    store.insert("items", {"id": "c", "owner_id": "u1"})
    assert [d["id"] for d in store.find("items", owner_id="u1")] == ["a", "c"]
    assert store.find_one("items", id="b", owner_id="u1") is None
    assert store.find_one("items", id="b", owner_id="u2")["id"] == "b"
    assert store.find("missing") == []


def test_replace_and_delete_only_matching(store):
    """Garantiza que reemplazar y borrar solo afecten al documento filtrado.

    Returns:
        None: Las aserciones comprueban el contenido tras cada operación.
    """
    store.insert("items", {"id": "a", "owner_id": "u1", "v": 1})
    assert store.replace_one("items", {"id": "a", "owner_id": "u2"}, {"v": 2}) is None
    updated = store.replace_one("items", {"id": "a", "owner_id": "u1"}, {"v": 2})
    assert updated["v"] == 2
    assert store.find_one("items", id="a")["v"] == 2

    assert store.delete_one("items", id="a", owner_id="u2") is None
    assert store.delete_one("items", id="a", owner_id="u1")["id"] == "a"
    assert store.find("items") == []


def test_returned_documents_are_copies(store):
    """Comprueba que modificar un documento devuelto no altere el almacén.

    Returns:
        None: Las aserciones comparan con el documento persistido.
    """
    store.insert("items", {"id": "a", "v": 1})
    doc = store.find_one("items", id="a")
    doc["v"] = 99
    assert store.find_one("items", id="a")["v"] == 1


def test_write_failure_raises_storage_error(tmp_path, monkeypatch):
    """Valida que un fallo de escritura se traduzca en StorageError.

    Returns:
        None: Se espera StorageError y ningún cambio persistido.
    """
    store = JsonDocumentStore(str(tmp_path / "db.json"))
    store.insert("items", {"id": "a"})

    def _fail(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr("vaultx.storage.save_db", _fail)
    with pytest.raises(StorageError):
        store.insert("items", {"id": "b"})
    assert [d["id"] for d in store.find("items")] == ["a"]
