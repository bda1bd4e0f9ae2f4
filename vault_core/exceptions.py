"""Vault error taxonomy.

Every failure a vault operation can report is one of these exceptions.
Messages are safe to return to the caller: they never contain passwords,
derived keys or decrypted entry data.
"""


class VaultError(Exception):
    """Base exception for vault operations."""

    code = "vault_error"
    message = "Vault operation failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)

    @property
    def detail(self) -> str:
        return str(self)


class WeakPasswordError(VaultError):
    """Master password does not meet the minimum policy."""

    code = "weak_password"
    message = "Master password is too short"


class AlreadyInitializedError(VaultError):
    """Setup was called on a vault that already exists."""

    code = "already_initialized"
    message = "Vault is already set up"


class InvalidCredentialsError(VaultError):
    """Master password did not verify, or there is no vault to unlock."""

    code = "invalid_credentials"
    message = "Invalid master password"


class VaultLockedError(VaultError):
    """Operation needs an active unlock session."""

    code = "vault_locked"
    message = "Vault is locked"


class EntryNotFoundError(VaultError):
    """No credential entry with the requested id."""

    code = "entry_not_found"
    message = "Entry not found"


class InvalidEntryError(VaultError):
    """Entry fields failed validation."""

    code = "invalid_entry"
    message = "Invalid entry fields"


class TamperOrWrongKeyError(VaultError):
    """Authentication tag did not verify.

    Raised for a wrong key, corrupted storage and deliberate tampering alike;
    the causes are not distinguished.
    """

    code = "tamper_or_wrong_key"
    message = "Vault payload failed integrity check"


class StorageUnavailableError(VaultError):
    """Vault storage could not be read or written."""

    code = "storage_unavailable"
    message = "Vault storage is unavailable"


class StorageCorruptedError(StorageUnavailableError):
    """Vault file exists but does not hold a valid record."""

    code = "storage_corrupted"
    message = "Vault storage is corrupted"
