# --------------------------------------------------------------
# File: __init__.py
# Description: Exposición pública de los módulos del núcleo del vault.
# --------------------------------------------------------------
"""Inicializa el paquete `vaultx` y documenta sus módulos principales."""

__all__ = [
    "auth",
    "config",
    "crypto_kdf",
    "crypto_sym",
    "encoding",
    "envelope",
    "kdf",
    "models",
    "password_policy",
    "result",
    "session",
    "session_token",
    "storage",
    "vault",
]
