"""Tests for password generation."""

import string

from vault_core import VaultService, generate_password
from vault_core import MIN_PASSWORD_LENGTH, MAX_PASSWORD_LENGTH
from vault_core.generator import SYMBOLS, build_charset, clamp_length


class TestPasswordGenerator:
    """Test cases for secure password generation."""

    def test_default_password_length(self):
        """Default password should be 16 characters."""
        password = generate_password()
        assert len(password) == 16

    def test_custom_length(self):
        """Password should match requested length."""
        for length in [8, 12, 20, 32, 64, 128]:
            password = generate_password(length=length)
            assert len(password) == length

    def test_length_clamped_high(self):
        """Lengths above the maximum are clamped to 128."""
        assert len(generate_password(length=200)) == MAX_PASSWORD_LENGTH

    def test_length_clamped_low(self):
        """Lengths below the minimum are clamped to 8."""
        assert len(generate_password(length=2)) == MIN_PASSWORD_LENGTH
        assert len(generate_password(length=-5)) == MIN_PASSWORD_LENGTH
        assert clamp_length(0) == 8

    def test_only_lowercase(self):
        """With every optional class off, only lowercase letters are used."""
        password = generate_password(length=12, include_uppercase=False,
                                     include_numbers=False, include_symbols=False)
        assert len(password) == 12
        assert all(c in string.ascii_lowercase for c in password)

    def test_no_symbols(self):
        """Excluding symbols leaves letters and digits only."""
        for _ in range(10):
            password = generate_password(length=64, include_symbols=False)
            assert password.isalnum()

    def test_charset_always_has_lowercase(self):
        """Lowercase letters are in every charset."""
        charset = build_charset(False, False, False)
        assert charset == string.ascii_lowercase

    def test_full_charset(self):
        """All classes enabled gives the combined pool."""
        charset = build_charset()
        assert set(string.ascii_uppercase) <= set(charset)
        assert set(string.digits) <= set(charset)
        assert set(SYMBOLS) <= set(charset)

    def test_characters_from_charset(self):
        """Every generated character comes from the selected pool."""
        charset = set(build_charset(include_symbols=False))
        for _ in range(10):
            assert set(generate_password(length=128, include_symbols=False)) <= charset

    def test_randomness(self):
        """Generated passwords should be different each time."""
        passwords = [generate_password() for _ in range(100)]
        unique_passwords = set(passwords)
        # With 16 char passwords and full charset, collision is extremely unlikely
        assert len(unique_passwords) == 100

    def test_service_delegates(self):
        """VaultService exposes the generator without needing a session."""
        password = VaultService.generate_password(length=20, include_uppercase=False,
                                                  include_numbers=False, include_symbols=False)
        assert len(password) == 20
        assert password.islower()
