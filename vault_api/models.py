"""Pydantic models for API request/response validation.

Defines data structures for all vault endpoints. Wire names are camelCase;
Python attributes stay snake_case.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from vault_core.config import DEFAULT_PASSWORD_LENGTH


class ApiModel(BaseModel):
    """Base model mapping snake_case fields to camelCase JSON."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MasterPasswordRequest(ApiModel):
    """Request model for setup and unlock.

    Length policy is enforced by the vault so that a short password on
    unlock fails the same way as a wrong one.
    """
    master_password: str = Field(..., description="Master password")


class SuccessResponse(ApiModel):
    """Generic success response."""
    success: bool = True


class StatusResponse(ApiModel):
    """Vault status for the caller."""
    is_setup: bool
    is_unlocked: bool


class EntryCreateRequest(ApiModel):
    """Request model for creating an entry."""
    name: str = Field(..., min_length=1, description="Display name")
    username: str = Field(default="", description="Account username")
    password: str = Field(..., min_length=1, description="Secret to store")
    url: Optional[str] = None
    notes: Optional[str] = None


class EntryUpdateRequest(ApiModel):
    """Request model for updating an entry. Only provided fields change."""
    name: Optional[str] = Field(default=None, min_length=1)
    username: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=1)
    url: Optional[str] = None
    notes: Optional[str] = None


class EntrySummary(ApiModel):
    """An entry as shown in listings, never with its password."""
    id: str
    name: str
    username: str
    url: Optional[str] = None
    notes: Optional[str] = None
    created_at: str
    updated_at: str


class EntryDetail(EntrySummary):
    """A single entry including its password."""
    password: str


class EntryListResponse(ApiModel):
    entries: list[EntrySummary]


class EntrySummaryResponse(ApiModel):
    entry: EntrySummary


class EntryDetailResponse(ApiModel):
    entry: EntryDetail


class PasswordGenerateRequest(ApiModel):
    """Request model for password generation.

    Out-of-range lengths are clamped, not rejected.
    """
    length: int = Field(default=DEFAULT_PASSWORD_LENGTH, description="Password length (8-128)")
    include_uppercase: bool = Field(default=True, description="Include uppercase letters")
    include_numbers: bool = Field(default=True, description="Include digits")
    include_symbols: bool = Field(default=True, description="Include symbols")


class PasswordGenerateResponse(ApiModel):
    """Response model for generated password."""
    password: str


class HealthResponse(ApiModel):
    """Health check response."""
    status: str
    time: str
