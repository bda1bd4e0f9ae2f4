"""Durable storage for the vault record.

The whole vault lives in one JSON document. Every write goes to a temporary
file in the same directory and is swapped into place with os.replace, so a
reader sees either the previous record or the new one, never a mix.
Implements secure file permissions for sensitive data on Unix systems.
"""

import json
import logging
import os
import stat
import sys
import tempfile
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from vault_core.config import LOG_DIR, RECORD_VERSION, STORAGE_RETRY_ATTEMPTS, VAULT_FILE
from vault_core.exceptions import StorageCorruptedError, StorageUnavailableError


logger = logging.getLogger(__name__)

T = TypeVar("T")

# Secure file permission: owner read/write only (0600 in octal)
SECURE_FILE_MODE = stat.S_IRUSR | stat.S_IWUSR  # 0o600

_HEX_FIELDS = ("salt", "iv", "auth_tag", "encrypted_payload", "verification_hash")


@dataclass(frozen=True)
class VaultRecord:
    """The single persisted vault.

    iv, auth_tag and encrypted_payload come from one encryption and are
    only ever replaced together.
    """
    salt: bytes
    iv: bytes
    auth_tag: bytes
    encrypted_payload: bytes
    verification_hash: bytes

    def to_dict(self) -> dict:
        data = {"version": RECORD_VERSION}
        for field in _HEX_FIELDS:
            data[field] = getattr(self, field).hex()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "VaultRecord":
        """Build a record from its JSON form.

        Raises:
            StorageCorruptedError: If a field is missing or not valid hex
        """
        if not isinstance(data, dict):
            raise StorageCorruptedError()
        try:
            return cls(**{field: bytes.fromhex(data[field]) for field in _HEX_FIELDS})
        except (KeyError, TypeError, ValueError):
            raise StorageCorruptedError()


def _set_secure_permissions(filepath: str) -> None:
    """Set restrictive file permissions on sensitive files.

    On Unix systems: Sets file to mode 0600 (owner read/write only)
    On Windows: No-op (Windows uses ACLs, not Unix permissions)

    Args:
        filepath: Path to the file to secure
    """
    # Skip on Windows - permissions work differently
    if sys.platform == "win32":
        return

    try:
        os.chmod(filepath, SECURE_FILE_MODE)
    except OSError:
        # Best effort - don't fail the write if we can't set permissions
        logger.warning("Could not restrict permissions on %s", os.path.basename(filepath))


def ensure_directory(directory: str) -> None:
    """Create a directory if it doesn't exist.

    On Unix systems, directories are created with mode 0700 (owner only).
    """
    if not directory:
        return
    if sys.platform != "win32":
        os.makedirs(directory, mode=0o700, exist_ok=True)
    else:
        os.makedirs(directory, exist_ok=True)


def ensure_directories() -> None:
    """Create the log directory."""
    ensure_directory(LOG_DIR)


def load_json(filepath: str) -> Optional[dict]:
    """Load JSON data from file.

    Args:
        filepath: Path to JSON file

    Returns:
        Parsed JSON data, or None if file doesn't exist

    Raises:
        StorageCorruptedError: If file exists but is not valid UTF-8 JSON
        OSError: If the file cannot be read
    """
    if not os.path.exists(filepath):
        return None

    try:
        with open(filepath, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise StorageCorruptedError(f"Invalid JSON in {os.path.basename(filepath)}")


def load_lines(filepath: str) -> list[str]:
    """Read non-empty lines from a text file.

    Returns:
        List of lines without trailing newlines, empty if file doesn't exist
    """
    if not os.path.exists(filepath):
        return []

    with open(filepath, "r", encoding="utf-8") as f:
        return [line.rstrip("\n") for line in f if line.strip()]


def save_json_atomic(filepath: str, data: dict, indent: int = 2) -> None:
    """Save data to a JSON file, replacing it atomically.

    The data is written and fsynced to a temporary file next to the target,
    which is then renamed over it.

    Args:
        filepath: Path to JSON file
        data: Dictionary to save
        indent: JSON indentation level

    Raises:
        OSError: If any step of the write fails
    """
    directory = os.path.dirname(os.path.abspath(filepath))
    ensure_directory(directory)

    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".vault-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent)
            f.flush()
            os.fsync(f.fileno())
        _set_secure_permissions(tmp_path)
        os.replace(tmp_path, filepath)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


class VaultStore:
    """File-backed store for the deployment's single VaultRecord."""

    def __init__(self, filepath: str = VAULT_FILE, retries: int = STORAGE_RETRY_ATTEMPTS):
        self.filepath = filepath
        self.retries = retries

    def _with_retry(self, action: str, operation: Callable[[], T]) -> T:
        """Run an I/O operation, retrying transient OSErrors.

        Raises:
            StorageUnavailableError: If every attempt fails
        """
        attempts = self.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return operation()
            except OSError as e:
                if attempt < attempts:
                    logger.warning(
                        "Vault %s failed (attempt %d/%d): %s", action, attempt, attempts, e.strerror
                    )
                    continue
                logger.error("Vault %s failed after %d attempts: %s", action, attempts, e.strerror)
                raise StorageUnavailableError() from e

    def exists(self) -> bool:
        """Check whether a vault record has been written."""
        return os.path.exists(self.filepath)

    def load(self) -> Optional[VaultRecord]:
        """Read the vault record.

        Returns:
            The stored VaultRecord, or None if the vault was never set up

        Raises:
            StorageUnavailableError: On I/O failure after retry
            StorageCorruptedError: If the file holds no valid record
        """
        data = self._with_retry("read", lambda: load_json(self.filepath))
        if data is None:
            return None
        return VaultRecord.from_dict(data)

    def replace(self, record: VaultRecord) -> None:
        """Atomically swap in a new vault record.

        Raises:
            StorageUnavailableError: On I/O failure after retry
        """
        payload = record.to_dict()
        self._with_retry("write", lambda: save_json_atomic(self.filepath, payload))
