"""Cryptographic operations for the password vault.

Handles master password key derivation and authenticated encryption of the
vault payload. Uses PBKDF2 per OWASP 2023 recommendations and AES-256-GCM.

Two independent derivations run over the same password and salt:
- encryption key: PBKDF2-HMAC-SHA256, 32 bytes
- verification hash: PBKDF2-HMAC-SHA512, 64 bytes, more iterations

The verification hash is only ever compared, never used as a key.
"""

import hmac
import os
from typing import NamedTuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from vault_core.config import (
    AUTH_TAG_LENGTH,
    ENCRYPTION_KDF_ITERATIONS,
    ENCRYPTION_KEY_LENGTH,
    IV_LENGTH,
    SALT_LENGTH,
    VERIFICATION_HASH_LENGTH,
    VERIFICATION_KDF_ITERATIONS,
)
from vault_core.exceptions import TamperOrWrongKeyError


def generate_salt() -> bytes:
    """Generate a cryptographically secure random salt.

    Returns:
        16-byte random salt
    """
    return os.urandom(SALT_LENGTH)


class KeyDerivation:
    """Derives the vault encryption key and the master password verifier.

    Both methods are pure: the same password and salt always give the same
    output. Iteration counts default to the configured values; tests pass
    smaller counts to keep runs fast.
    """

    def __init__(
        self,
        encryption_iterations: int = ENCRYPTION_KDF_ITERATIONS,
        verification_iterations: int = VERIFICATION_KDF_ITERATIONS,
    ):
        if verification_iterations <= encryption_iterations:
            raise ValueError("Verification hash must use more iterations than key derivation")
        self.encryption_iterations = encryption_iterations
        self.verification_iterations = verification_iterations

    def derive_encryption_key(self, password: str, salt: bytes) -> bytes:
        """Derive the 32-byte AES key from the master password.

        Args:
            password: Master password
            salt: Vault salt

        Returns:
            Raw 32-byte key
        """
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=ENCRYPTION_KEY_LENGTH,
            salt=salt,
            iterations=self.encryption_iterations,
        )
        return kdf.derive(password.encode("utf-8"))

    def derive_verification_hash(self, password: str, salt: bytes) -> bytes:
        """Derive the 64-byte hash stored to check the master password.

        Args:
            password: Master password
            salt: Vault salt

        Returns:
            Raw 64-byte hash
        """
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA512(),
            length=VERIFICATION_HASH_LENGTH,
            salt=salt,
            iterations=self.verification_iterations,
        )
        return kdf.derive(password.encode("utf-8"))

    def verify(self, password: str, salt: bytes, expected_hash: bytes) -> bool:
        """Check a password against a stored verification hash.

        Comparison is constant-time.
        """
        computed_hash = self.derive_verification_hash(password, salt)
        return hmac.compare_digest(computed_hash, expected_hash)


class EncryptedPayload(NamedTuple):
    """Output of a single encryption: all three travel together."""
    iv: bytes
    auth_tag: bytes
    ciphertext: bytes


class AuthenticatedCipher:
    """AES-256-GCM encryption with a detached authentication tag."""

    def encrypt(self, plaintext: bytes, key: bytes) -> EncryptedPayload:
        """Encrypt a blob under a fresh random iv.

        Args:
            plaintext: Bytes to encrypt
            key: 32-byte key from KeyDerivation

        Returns:
            EncryptedPayload with iv, tag and ciphertext
        """
        iv = os.urandom(IV_LENGTH)
        sealed = AESGCM(key).encrypt(iv, plaintext, None)
        return EncryptedPayload(
            iv=iv,
            auth_tag=sealed[-AUTH_TAG_LENGTH:],
            ciphertext=sealed[:-AUTH_TAG_LENGTH],
        )

    def decrypt(self, ciphertext: bytes, key: bytes, iv: bytes, auth_tag: bytes) -> bytes:
        """Decrypt and verify a blob.

        Args:
            ciphertext: Encrypted bytes without the tag
            key: 32-byte key from KeyDerivation
            iv: iv returned by encrypt
            auth_tag: tag returned by encrypt

        Returns:
            Original plaintext bytes

        Raises:
            TamperOrWrongKeyError: If the tag does not verify
        """
        if len(auth_tag) != AUTH_TAG_LENGTH or len(iv) != IV_LENGTH:
            raise TamperOrWrongKeyError()

        try:
            return AESGCM(key).decrypt(iv, ciphertext + auth_tag, None)
        except (InvalidTag, ValueError):
            # ValueError covers a key of the wrong size
            raise TamperOrWrongKeyError()
