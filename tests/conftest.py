# --------------------------------------------------------------
# File: conftest.py
# Description: Fixtures compartidas para aislar almacenamiento y recargar módulos.
# --------------------------------------------------------------

import importlib
from typing import Iterator

import pytest

from vaultx.auth import AuthGate
from vaultx.crypto_kdf import derive_vault_key
from vaultx.session_token import TokenSigner
from vaultx.storage import JsonDocumentStore
from vaultx.vault import VaultRecordService


@pytest.fixture(autouse=True)
def _isolate_storage(tmp_path, monkeypatch) -> Iterator[None]:
    """Aísla STORAGE_PATH y recarga vaultx.config y vaultx_api.services para cada prueba.

    Args:
        tmp_path (Path): Carpeta temporal proporcionada por pytest.
        monkeypatch (pytest.MonkeyPatch): Fixture para ajustar variables de entorno.

    Returns:
        Iterator[None]: Control del fixture autouse durante la ejecución de cada test.
    """
    data_dir = tmp_path / "_data"
    data_dir.mkdir()
    monkeypatch.setenv("STORAGE_PATH", str(data_dir))

    import vaultx.config as config_module
    import vaultx_api.services as services_module

    importlib.reload(config_module)
    importlib.reload(services_module)

    yield


@pytest.fixture
def store(tmp_path) -> JsonDocumentStore:
    """Almacén JSON vacío en una carpeta temporal."""
    return JsonDocumentStore(str(tmp_path / "store" / "db.json"))


@pytest.fixture
def gate(store) -> AuthGate:
    """Puerta de autenticación con un secreto de pruebas."""
    return AuthGate(store, signer=TokenSigner(b"test-secret"), ttl_seconds=3600)


@pytest.fixture
def vault_service(store) -> VaultRecordService:
    return VaultRecordService(store)


@pytest.fixture(scope="session")
def key_a():
    """Clave derivada de ("password123", "a@x.com"), compartida por la sesión de tests."""
    return derive_vault_key("password123", "a@x.com").unwrap()


@pytest.fixture(scope="session")
def key_b():
    """Clave derivada con la salt "b@x.com"."""
    return derive_vault_key("password123", "b@x.com").unwrap()
