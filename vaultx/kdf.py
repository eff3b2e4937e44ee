from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from vaultx import config


def derive_app_key(purpose: str, length: int = 32, secret: bytes | None = None) -> bytes:
    # Separación de dominio por propósito a partir del secreto de la app
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=length,
        salt=None,
        info=f"vaultx:{purpose}".encode(),
    )
    return hkdf.derive(secret if secret is not None else config.APP_SECRET)
