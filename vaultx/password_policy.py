# --------------------------------------------------------------
# File: password_policy.py
# Description: Regla de contraseña de login y generador de contraseñas.
# --------------------------------------------------------------
"""Utilidades de contraseñas para el alta y para los registros del vault."""

from __future__ import annotations

import secrets
from typing import List, Tuple

MIN_PASSWORD_LENGTH = 8

# Sin caracteres ambiguos (0/O, 1/l/I).
GENERATOR_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnpqrstuvwxyz23456789!@#$%^&*"


def check_login_password(password: str) -> Tuple[bool, List[str]]:
    """Aplica la regla obligatoria del alta: al menos 8 caracteres."""

    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        return False, [f"Longitud mínima {MIN_PASSWORD_LENGTH}."]
    return True, []


def generate_password(length: int = 16) -> str:
    """Genera una contraseña aleatoria con una fuente criptográfica.

    Args:
        length (int): Longitud deseada; nunca inferior al mínimo del alta.

    Returns:
        str: Contraseña sobre `GENERATOR_ALPHABET`.

    """

    if length < MIN_PASSWORD_LENGTH:
        raise ValueError(f"La longitud mínima es {MIN_PASSWORD_LENGTH}")
    return "".join(secrets.choice(GENERATOR_ALPHABET) for _ in range(length))
