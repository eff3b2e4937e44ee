# --------------------------------------------------------------
# File: test_password_policy.py
# Description: Pruebas de la regla de contraseña del alta y del generador.
# --------------------------------------------------------------

import pytest

from vaultx.password_policy import GENERATOR_ALPHABET, check_login_password, generate_password


@pytest.mark.parametrize("pw, expected", [("password123", True), ("12345678", True), ("1234567", False), ("", False)])
def test_login_password_minimum_length(pw, expected):
    """Valida la longitud mínima de 8 caracteres del alta.

    Args:
        pw (str): Contraseña candidata.
        expected (bool): Resultado esperado.

    Returns:
        None: Las aserciones revisan el resultado y los motivos.
    """
    ok, reasons = check_login_password(pw)
    assert ok is expected
    assert bool(reasons) is not expected


def test_login_password_rejects_non_string():
    """Comprueba que un valor que no es str se rechace sin excepción.

    Returns:
        None: Las aserciones revisan el resultado.
    """
    ok, reasons = check_login_password(None)
    assert not ok and reasons


def test_generated_passwords_use_alphabet_and_differ():
    """Comprueba longitud, alfabeto y aleatoriedad del generador.

    Returns:
        None: Las aserciones revisan las contraseñas generadas.
    """
    first = generate_password()
    second = generate_password(24)
    assert len(first) == 16 and len(second) == 24
    assert set(first + second) <= set(GENERATOR_ALPHABET)
    assert first != generate_password()
    with pytest.raises(ValueError):
        generate_password(4)
