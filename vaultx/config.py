# --------------------------------------------------------------
# File: config.py
# Description: Configuración del núcleo cargada desde el entorno y `.env`.
# --------------------------------------------------------------
"""Parámetros de configuración compartidos por los módulos de `vaultx`."""

import logging
import os

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger("vaultx.config")

_DEV_SECRET = "change_this_dev_secret"

APP_SECRET = os.getenv("APP_SECRET", _DEV_SECRET).encode()
STORAGE_PATH = os.getenv("STORAGE_PATH", "./_data")
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", "3600"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Suelo de coste de PBKDF2; nunca se acepta un valor inferior.
MIN_PBKDF2_ITERATIONS = 100_000
PBKDF2_ITERATIONS = max(
    MIN_PBKDF2_ITERATIONS, int(os.getenv("PBKDF2_ITERATIONS", "600000"))
)

if APP_SECRET == _DEV_SECRET.encode():
    logger.warning("APP_SECRET no configurado; usando el secreto de desarrollo.")


def configure_logging(level: str | None = None) -> None:
    """Configura el logging raíz con el nivel indicado o `LOG_LEVEL`."""

    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
