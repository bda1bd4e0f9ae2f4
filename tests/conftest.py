"""Shared fixtures for vault tests."""

import os
import sys
import tempfile

# Settings are read at import time, so they must be in place before vault_core loads
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-identity-tokens-0123456789"
os.environ["VAULT_LOG_DIR"] = tempfile.mkdtemp(prefix="vault-logs-")
os.environ["VAULT_FILE"] = os.path.join(tempfile.mkdtemp(prefix="vault-data-"), "vault.json")
os.environ["UNLOCK_RATE_LIMIT"] = "1000/minute"
os.environ["ALLOWED_EMAILS"] = ""
os.environ["REQUIRE_HTTPS"] = "false"

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from vault_core import KeyDerivation, SessionRegistry, VaultService, VaultStore


class FakeClock:
    """Manually advanced clock for session expiry tests."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fast_kdf():
    """Key derivation with low iteration counts to keep tests quick."""
    return KeyDerivation(encryption_iterations=1_000, verification_iterations=2_000)


@pytest.fixture
def vault_path(tmp_path):
    return str(tmp_path / "vault.json")


@pytest.fixture
def store(vault_path):
    return VaultStore(vault_path)


@pytest.fixture
def sessions(clock):
    return SessionRegistry(ttl_seconds=300, clock=clock)


@pytest.fixture
def service(store, sessions, fast_kdf):
    return VaultService(store=store, sessions=sessions, kdf=fast_kdf)
