"""Secure random password generation."""

import secrets
import string

from vault_core.config import DEFAULT_PASSWORD_LENGTH, MAX_PASSWORD_LENGTH, MIN_PASSWORD_LENGTH


SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"


def clamp_length(length: int) -> int:
    """Clamp a requested length into the supported range."""
    return max(MIN_PASSWORD_LENGTH, min(MAX_PASSWORD_LENGTH, length))


def build_charset(
    include_uppercase: bool = True,
    include_numbers: bool = True,
    include_symbols: bool = True
) -> str:
    """Build the character pool. Lowercase letters are always included."""
    charset = string.ascii_lowercase
    if include_uppercase:
        charset += string.ascii_uppercase
    if include_numbers:
        charset += string.digits
    if include_symbols:
        charset += SYMBOLS
    return charset


def generate_password(
    length: int = DEFAULT_PASSWORD_LENGTH,
    include_uppercase: bool = True,
    include_numbers: bool = True,
    include_symbols: bool = True
) -> str:
    """Generate a random password.

    Every character is drawn independently from the combined pool using the
    OS CSPRNG. Out-of-range lengths are clamped rather than rejected.

    Args:
        length: Password length, clamped to 8-128
        include_uppercase: Include uppercase letters
        include_numbers: Include digits
        include_symbols: Include symbols

    Returns:
        Generated password string
    """
    charset = build_charset(include_uppercase, include_numbers, include_symbols)
    return "".join(secrets.choice(charset) for _ in range(clamp_length(length)))
