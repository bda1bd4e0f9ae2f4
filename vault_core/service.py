"""Password vault operations.

VaultService ties together key derivation, authenticated encryption, the
durable vault record and unlock sessions. Per deployment the vault is
Uninitialized (no record), Locked (record, no session for the caller) or
Unlocked (record and a live session).

Every mutation decrypts the whole entry list, changes it, re-encrypts it
under a fresh iv and swaps the record in one write. The sequence runs under
a single lock so concurrent edits cannot overwrite each other.
"""

import logging
from dataclasses import replace
from threading import Lock
from typing import Optional

from vault_core.audit import log_security_event
from vault_core.config import DEFAULT_PASSWORD_LENGTH, MIN_MASTER_PASSWORD_LENGTH
from vault_core.crypto import AuthenticatedCipher, KeyDerivation, generate_salt
from vault_core.entries import (
    CredentialEntry,
    deserialize_entries,
    serialize_entries,
    validate_fields,
)
from vault_core.exceptions import (
    AlreadyInitializedError,
    EntryNotFoundError,
    InvalidCredentialsError,
    TamperOrWrongKeyError,
    VaultLockedError,
    WeakPasswordError,
)
from vault_core.generator import generate_password
from vault_core.sessions import SessionRegistry
from vault_core.storage import VaultRecord, VaultStore


logger = logging.getLogger(__name__)


def _is_encodable(password: str) -> bool:
    """Passwords are derived from their UTF-8 bytes; lone surrogates have none."""
    try:
        password.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


class VaultService:
    """Setup, unlock and CRUD for the deployment's encrypted vault.

    All collaborators are injectable; defaults read the configured paths
    and iteration counts.
    """

    def __init__(
        self,
        store: Optional[VaultStore] = None,
        sessions: Optional[SessionRegistry] = None,
        kdf: Optional[KeyDerivation] = None,
        cipher: Optional[AuthenticatedCipher] = None,
    ):
        self.store = store if store is not None else VaultStore()
        self.sessions = sessions if sessions is not None else SessionRegistry()
        self.kdf = kdf if kdf is not None else KeyDerivation()
        self.cipher = cipher if cipher is not None else AuthenticatedCipher()
        self._write_lock = Lock()

    def setup(self, caller: str, password: str) -> None:
        """Create the vault and unlock it for the caller.

        Raises:
            WeakPasswordError: If the password is too short or not valid Unicode text
            AlreadyInitializedError: If a vault already exists
        """
        if len(password) < MIN_MASTER_PASSWORD_LENGTH:
            raise WeakPasswordError(
                f"Master password must be at least {MIN_MASTER_PASSWORD_LENGTH} characters"
            )
        if not _is_encodable(password):
            raise WeakPasswordError("Master password contains characters that cannot be encoded")

        with self._write_lock:
            if self.store.exists():
                log_security_event("vault_setup", "FAILURE", caller, {"reason": "already_initialized"})
                raise AlreadyInitializedError()

            salt = generate_salt()
            key = self.kdf.derive_encryption_key(password, salt)
            verification_hash = self.kdf.derive_verification_hash(password, salt)
            encrypted = self.cipher.encrypt(serialize_entries([]), key)

            self.store.replace(VaultRecord(
                salt=salt,
                iv=encrypted.iv,
                auth_tag=encrypted.auth_tag,
                encrypted_payload=encrypted.ciphertext,
                verification_hash=verification_hash,
            ))

        self.sessions.put(caller, key)
        logger.info("Vault initialized")
        log_security_event("vault_setup", "SUCCESS", caller)

    def unlock(self, caller: str, password: str) -> None:
        """Verify the master password and start a session.

        Unlocking while already unlocked starts a fresh session.

        Raises:
            InvalidCredentialsError: Wrong password or no vault
        """
        record = self.store.load()
        if (
            record is None
            or not _is_encodable(password)
            or not self.kdf.verify(password, record.salt, record.verification_hash)
        ):
            log_security_event("vault_unlock", "FAILURE", caller)
            raise InvalidCredentialsError()

        key = self.kdf.derive_encryption_key(password, record.salt)
        self.sessions.put(caller, key)
        log_security_event("vault_unlock", "SUCCESS", caller)

    def lock(self, caller: str) -> None:
        """End the caller's session. Locking a locked vault is a no-op."""
        if self.sessions.remove(caller):
            log_security_event("vault_lock", "SUCCESS", caller)

    def status(self, caller: str) -> dict:
        """Report whether the vault exists and is unlocked for the caller."""
        self.sessions.sweep()
        return {
            "is_setup": self.store.exists(),
            "is_unlocked": self.sessions.is_active(caller),
        }

    def list_entries(self, caller: str) -> list[dict]:
        """List entries without their passwords.

        Raises:
            VaultLockedError: No active session, or the payload failed to decrypt
        """
        key = self._require_key(caller)
        _, entries = self._open(caller, key)
        return [entry.public_dict() for entry in entries]

    def get_entry(self, caller: str, entry_id: str) -> dict:
        """Return one entry including its password.

        Raises:
            VaultLockedError: No active session, or the payload failed to decrypt
            EntryNotFoundError: No entry with that id
        """
        key = self._require_key(caller)
        _, entries = self._open(caller, key)
        return self._find(entries, entry_id).to_dict()

    def create_entry(self, caller: str, values: dict) -> dict:
        """Add an entry and persist the vault.

        Returns:
            The new entry without its password

        Raises:
            VaultLockedError: No active session
            InvalidEntryError: Missing name or password, or bad fields
        """
        key = self._require_key(caller)
        entry = CredentialEntry.new(validate_fields(values))

        with self._write_lock:
            record, entries = self._open(caller, key)
            entries.append(entry)
            self._persist(record, key, entries)

        log_security_event("entry_created", "SUCCESS", caller, {"entry_id": entry.id})
        return entry.public_dict()

    def update_entry(self, caller: str, entry_id: str, values: dict) -> dict:
        """Change the provided fields of an entry and persist the vault.

        Returns:
            The updated entry without its password

        Raises:
            VaultLockedError: No active session
            EntryNotFoundError: No entry with that id
            InvalidEntryError: Bad fields
        """
        key = self._require_key(caller)
        cleaned = validate_fields(values, partial=True)

        with self._write_lock:
            record, entries = self._open(caller, key)
            entry = self._find(entries, entry_id)
            entry.apply(cleaned)
            self._persist(record, key, entries)

        log_security_event(
            "entry_updated", "SUCCESS", caller,
            {"entry_id": entry_id, "fields": sorted(cleaned)}
        )
        return entry.public_dict()

    def delete_entry(self, caller: str, entry_id: str) -> None:
        """Remove an entry and persist the vault.

        Raises:
            VaultLockedError: No active session
            EntryNotFoundError: No entry with that id
        """
        key = self._require_key(caller)

        with self._write_lock:
            record, entries = self._open(caller, key)
            entry = self._find(entries, entry_id)
            entries.remove(entry)
            self._persist(record, key, entries)

        log_security_event("entry_deleted", "SUCCESS", caller, {"entry_id": entry_id})

    @staticmethod
    def generate_password(
        length: int = DEFAULT_PASSWORD_LENGTH,
        include_uppercase: bool = True,
        include_numbers: bool = True,
        include_symbols: bool = True
    ) -> str:
        """Generate a random password. Does not need an unlocked vault."""
        return generate_password(length, include_uppercase, include_numbers, include_symbols)

    def _require_key(self, caller: str) -> bytes:
        key = self.sessions.get(caller)
        if key is None:
            raise VaultLockedError()
        return key

    def _open(self, caller: str, key: bytes) -> tuple[VaultRecord, list[CredentialEntry]]:
        """Load and decrypt the vault for a caller with a session key.

        A payload that fails authentication force-locks the caller so the
        same key is not retried.
        """
        record = self.store.load()
        if record is None:
            self.sessions.remove(caller)
            raise VaultLockedError()

        try:
            plaintext = self.cipher.decrypt(
                record.encrypted_payload, key, record.iv, record.auth_tag
            )
        except TamperOrWrongKeyError:
            self.sessions.remove(caller)
            logger.error("Vault payload failed integrity check; session force-locked")
            log_security_event("vault_integrity", "FORCED", caller, {"action": "force_lock"})
            raise VaultLockedError()

        return record, deserialize_entries(plaintext)

    def _persist(self, record: VaultRecord, key: bytes, entries: list[CredentialEntry]) -> None:
        encrypted = self.cipher.encrypt(serialize_entries(entries), key)
        self.store.replace(replace(
            record,
            iv=encrypted.iv,
            auth_tag=encrypted.auth_tag,
            encrypted_payload=encrypted.ciphertext,
        ))

    @staticmethod
    def _find(entries: list[CredentialEntry], entry_id: str) -> CredentialEntry:
        for entry in entries:
            if entry.id == entry_id:
                return entry
        raise EntryNotFoundError()
