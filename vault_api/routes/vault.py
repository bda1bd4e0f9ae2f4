"""Vault management endpoints.

Protected endpoints for vault lifecycle and credential CRUD.
Route functions are sync; FastAPI runs them on its worker thread pool.
Vault errors are turned into responses by the handler in vault_api.main.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from vault_api.dependencies import get_caller_identity, get_vault_service, limiter
from vault_api.models import (
    EntryCreateRequest,
    EntryDetailResponse,
    EntryListResponse,
    EntrySummaryResponse,
    EntryUpdateRequest,
    MasterPasswordRequest,
    PasswordGenerateRequest,
    PasswordGenerateResponse,
    StatusResponse,
    SuccessResponse,
)
from vault_core import VaultService
from vault_core.config import UNLOCK_RATE_LIMIT


router = APIRouter(prefix="/api/vault", tags=["Vault"])


@router.post("/setup", response_model=SuccessResponse)
def setup_vault(
    body: MasterPasswordRequest,
    caller: str = Depends(get_caller_identity),
    vault: VaultService = Depends(get_vault_service),
):
    """Create the vault with a master password and unlock it."""
    vault.setup(caller, body.master_password)
    return SuccessResponse()


@router.post("/unlock", response_model=SuccessResponse)
@limiter.limit(UNLOCK_RATE_LIMIT)
def unlock_vault(
    request: Request,
    body: MasterPasswordRequest,
    caller: str = Depends(get_caller_identity),
    vault: VaultService = Depends(get_vault_service),
):
    """Unlock the vault for the caller."""
    vault.unlock(caller, body.master_password)
    return SuccessResponse()


@router.post("/lock", response_model=SuccessResponse)
def lock_vault(
    caller: str = Depends(get_caller_identity),
    vault: VaultService = Depends(get_vault_service),
):
    """Lock the vault for the caller."""
    vault.lock(caller)
    return SuccessResponse()


@router.get("/status", response_model=StatusResponse)
def vault_status(
    caller: str = Depends(get_caller_identity),
    vault: VaultService = Depends(get_vault_service),
):
    """Report whether the vault is set up and unlocked."""
    return StatusResponse(**vault.status(caller))


@router.get("/entries", response_model=EntryListResponse, response_model_exclude_none=True)
def list_entries(
    caller: str = Depends(get_caller_identity),
    vault: VaultService = Depends(get_vault_service),
):
    """List all entries without passwords."""
    return EntryListResponse(entries=vault.list_entries(caller))


@router.get("/entries/{entry_id}", response_model=EntryDetailResponse, response_model_exclude_none=True)
def get_entry(
    entry_id: str,
    caller: str = Depends(get_caller_identity),
    vault: VaultService = Depends(get_vault_service),
):
    """Get a single entry including its password."""
    return EntryDetailResponse(entry=vault.get_entry(caller, entry_id))


@router.post("/entries", response_model=EntrySummaryResponse, response_model_exclude_none=True)
def create_entry(
    body: EntryCreateRequest,
    caller: str = Depends(get_caller_identity),
    vault: VaultService = Depends(get_vault_service),
):
    """Save a new entry to the vault."""
    return EntrySummaryResponse(entry=vault.create_entry(caller, body.model_dump()))


@router.put("/entries/{entry_id}", response_model=EntrySummaryResponse, response_model_exclude_none=True)
def update_entry(
    entry_id: str,
    body: EntryUpdateRequest,
    caller: str = Depends(get_caller_identity),
    vault: VaultService = Depends(get_vault_service),
):
    """Update the provided fields of an entry."""
    values = body.model_dump(exclude_unset=True)
    return EntrySummaryResponse(entry=vault.update_entry(caller, entry_id, values))


@router.delete("/entries/{entry_id}", response_model=SuccessResponse)
def delete_entry(
    entry_id: str,
    caller: str = Depends(get_caller_identity),
    vault: VaultService = Depends(get_vault_service),
):
    """Delete an entry from the vault."""
    vault.delete_entry(caller, entry_id)
    return SuccessResponse()


@router.post("/generate", response_model=PasswordGenerateResponse)
def generate_password(
    body: Optional[PasswordGenerateRequest] = None,
    caller: str = Depends(get_caller_identity),
):
    """Generate a secure random password. Works while locked."""
    body = body or PasswordGenerateRequest()
    password = VaultService.generate_password(
        length=body.length,
        include_uppercase=body.include_uppercase,
        include_numbers=body.include_numbers,
        include_symbols=body.include_symbols,
    )
    return PasswordGenerateResponse(password=password)
