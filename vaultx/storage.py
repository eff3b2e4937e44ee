# --------------------------------------------------------------
# File: storage.py
# Description: Almacén documental JSON para cuentas y registros cifrados.
# --------------------------------------------------------------
"""Persistencia genérica por colecciones con escritura atómica.

El núcleo solo depende del protocolo `DocumentStore`; `JsonDocumentStore` es la
implementación local basada en un único archivo JSON.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from typing import Any, Dict, Iterable, List, Optional, Protocol

__all__ = [
    "DocumentStore",
    "DuplicateKeyError",
    "JsonDocumentStore",
    "StorageError",
    "load_db",
    "save_db",
]

logger = logging.getLogger("vaultx.storage")

Document = Dict[str, Any]


class StorageError(Exception):
    """Error transitorio de E/S; se puede reintentar."""


class DuplicateKeyError(Exception):
    """Violación de una restricción de unicidad; no se debe reintentar."""

    def __init__(self, field: str):
        super().__init__(f"Valor duplicado para '{field}'")
        self.field = field


def _ensure_parent_dir(path: str) -> None:
    """Garantiza que exista el directorio padre del archivo de destino."""

    parent = os.path.dirname(path) or "."
    os.makedirs(parent, exist_ok=True)


def load_db(path: str) -> Dict[str, Any]:
    """Carga un archivo JSON y devuelve su contenido.

    Args:
        path (str): Ruta del archivo JSON.

    Returns:
        Dict[str, Any]: Estructura cargada o una base vacía si no existe.

    Raises:
        StorageError: Si el archivo existe pero no es JSON válido.

    """

    try:
        with open(path, "r", encoding="utf-8") as handler:
            return json.load(handler)
    except FileNotFoundError:
        return {}
    except json.JSONDecodeError as exc:
        raise StorageError(f"Base de datos corrupta: {path}") from exc


def save_db(db: Dict[str, Any], path: str) -> None:
    """Guarda la base de datos JSON aplicando escritura atómica."""

    _ensure_parent_dir(path)
    tmp_path = f"{path}.tmp"
    with open(tmp_path, "w", encoding="utf-8") as handler:
        json.dump(db, handler, indent=2, ensure_ascii=False)
    os.replace(tmp_path, path)


def _matches(doc: Document, filters: Dict[str, Any]) -> bool:
    return all(doc.get(field) == value for field, value in filters.items())


class DocumentStore(Protocol):
    """Interfaz mínima que el núcleo exige al almacén de documentos."""

    def insert(self, collection: str, doc: Document, unique: Iterable[str] = ()) -> Document: ...

    def find_one(self, collection: str, **filters: Any) -> Optional[Document]: ...

    def find(self, collection: str, **filters: Any) -> List[Document]: ...

    def replace_one(
        self, collection: str, filters: Dict[str, Any], changes: Dict[str, Any]
    ) -> Optional[Document]: ...

    def delete_one(self, collection: str, **filters: Any) -> Optional[Document]: ...


class JsonDocumentStore:
    """Almacén documental sobre un archivo JSON.

    Cada operación de escritura carga, modifica y guarda el archivo completo
    bajo un cerrojo, de modo que crear, actualizar y borrar son atómicos dentro
    del proceso y las restricciones de unicidad se comprueban sin carreras.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.RLock()

    def _load(self) -> Dict[str, Any]:
        try:
            return load_db(self.path)
        except OSError as exc:
            logger.error("No se pudo leer %s: %s", self.path, exc)
            raise StorageError("Error leyendo el almacén") from exc

    def _save(self, db: Dict[str, Any]) -> None:
        try:
            save_db(db, self.path)
        except OSError as exc:
            logger.error("No se pudo escribir %s: %s", self.path, exc)
            raise StorageError("Error escribiendo el almacén") from exc

    def insert(self, collection: str, doc: Document, unique: Iterable[str] = ()) -> Document:
        with self._lock:
            db = self._load()
            docs = db.setdefault(collection, [])
            for field in unique:
                if any(existing.get(field) == doc.get(field) for existing in docs):
                    raise DuplicateKeyError(field)
            docs.append(dict(doc))
            self._save(db)
        return dict(doc)

    def find_one(self, collection: str, **filters: Any) -> Optional[Document]:
        with self._lock:
            for doc in self._load().get(collection, []):
                if _matches(doc, filters):
                    return dict(doc)
        return None

    def find(self, collection: str, **filters: Any) -> List[Document]:
        with self._lock:
            return [dict(doc) for doc in self._load().get(collection, []) if _matches(doc, filters)]

    def replace_one(
        self, collection: str, filters: Dict[str, Any], changes: Dict[str, Any]
    ) -> Optional[Document]:
        with self._lock:
            db = self._load()
            for doc in db.get(collection, []):
                if _matches(doc, filters):
                    doc.update(changes)
                    self._save(db)
                    return dict(doc)
        return None

    def delete_one(self, collection: str, **filters: Any) -> Optional[Document]:
        with self._lock:
            db = self._load()
            docs = db.get(collection, [])
            for index, doc in enumerate(docs):
                if _matches(doc, filters):
                    del docs[index]
                    self._save(db)
                    return dict(doc)
        return None
