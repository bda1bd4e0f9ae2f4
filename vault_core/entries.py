"""Credential entries and their field validation.

Entries only exist decrypted inside a single vault operation; the list is
serialized to JSON and encrypted as one payload.
"""

import json
import uuid
from dataclasses import asdict, dataclass, fields
from datetime import datetime, timezone
from typing import Optional

from vault_core.exceptions import InvalidEntryError, StorageCorruptedError


EDITABLE_FIELDS = ("name", "username", "password", "url", "notes")
REQUIRED_FIELDS = ("name", "password")
OPTIONAL_FIELDS = ("url", "notes")


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


@dataclass
class CredentialEntry:
    """A single stored credential."""
    id: str
    name: str
    username: str
    password: str
    created_at: str
    updated_at: str
    url: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def new(cls, values: dict) -> "CredentialEntry":
        """Create an entry with a fresh id and timestamps from validated values."""
        now = utc_timestamp()
        return cls(
            id=str(uuid.uuid4()),
            name=values["name"],
            username=values.get("username", ""),
            password=values["password"],
            url=values.get("url"),
            notes=values.get("notes"),
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "CredentialEntry":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> dict:
        return asdict(self)

    def public_dict(self) -> dict:
        """Entry as a dict without the password; unset optional fields omitted."""
        data = self.to_dict()
        del data["password"]
        for field in OPTIONAL_FIELDS:
            if data[field] is None:
                del data[field]
        return data

    def apply(self, values: dict) -> None:
        """Apply validated partial values and bump updated_at."""
        for field, value in values.items():
            setattr(self, field, value)
        self.updated_at = utc_timestamp()


def validate_fields(values: dict, partial: bool = False) -> dict:
    """Normalize and validate entry fields.

    Args:
        values: Raw field values from the caller
        partial: True for updates, where every field is optional

    Returns:
        Cleaned values containing only the fields that were provided

    Raises:
        InvalidEntryError: On unknown fields, wrong types or empty required fields
    """
    unknown = set(values) - set(EDITABLE_FIELDS)
    if unknown:
        raise InvalidEntryError(f"Unknown entry fields: {', '.join(sorted(unknown))}")

    cleaned = {}
    for field, value in values.items():
        if field in OPTIONAL_FIELDS:
            if value is not None and not isinstance(value, str):
                raise InvalidEntryError(f"Field '{field}' must be a string")
            cleaned[field] = value or None
        elif field == "username":
            if value is not None and not isinstance(value, str):
                raise InvalidEntryError("Field 'username' must be a string")
            cleaned[field] = value or ""
        else:
            if not isinstance(value, str):
                raise InvalidEntryError(f"Field '{field}' must be a string")
            cleaned[field] = value

    if "name" in cleaned:
        cleaned["name"] = cleaned["name"].strip()

    for field in REQUIRED_FIELDS:
        if field in cleaned and not cleaned[field]:
            raise InvalidEntryError(f"Field '{field}' cannot be empty")
        if not partial and field not in cleaned:
            raise InvalidEntryError(f"Field '{field}' is required")

    return cleaned


def serialize_entries(entries: list[CredentialEntry]) -> bytes:
    return json.dumps([entry.to_dict() for entry in entries]).encode("utf-8")


def deserialize_entries(plaintext: bytes) -> list[CredentialEntry]:
    """Parse a decrypted payload into entries.

    Raises:
        StorageCorruptedError: If the payload is not a list of entry objects
    """
    try:
        data = json.loads(plaintext.decode("utf-8"))
        return [CredentialEntry.from_dict(item) for item in data]
    except (UnicodeDecodeError, json.JSONDecodeError, TypeError, AttributeError):
        raise StorageCorruptedError("Vault payload is not a valid entry list")
