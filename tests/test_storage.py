"""Tests for vault record persistence."""

import json
import os
import stat
import sys

import pytest

from vault_core import StorageCorruptedError, StorageUnavailableError, VaultRecord, VaultStore
from vault_core import storage


def _record(marker: int = 1) -> VaultRecord:
    return VaultRecord(
        salt=bytes([marker]) * 16,
        iv=bytes([marker]) * 12,
        auth_tag=bytes([marker]) * 16,
        encrypted_payload=bytes([marker]) * 40,
        verification_hash=bytes([marker]) * 64,
    )


class TestVaultStore:
    """Test load, replace and exists."""

    def test_load_missing_returns_none(self, store):
        """A vault that was never written loads as None."""
        assert store.load() is None
        assert not store.exists()

    def test_replace_then_load(self, store):
        """A written record loads back unchanged."""
        store.replace(_record(1))
        assert store.exists()
        assert store.load() == _record(1)

    def test_replace_overwrites_all_fields(self, store):
        """The second write fully supersedes the first."""
        store.replace(_record(1))
        store.replace(_record(2))
        assert store.load() == _record(2)

    def test_record_is_hex_json(self, store, vault_path):
        """Binary fields are stored as hex text with a version."""
        store.replace(_record(3))
        with open(vault_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        assert data["version"] == 1
        assert data["salt"] == "03" * 16
        assert set(data) == {"version", "salt", "iv", "auth_tag", "encrypted_payload", "verification_hash"}

    def test_no_temporary_files_left(self, store, tmp_path):
        """The atomic swap leaves only the vault file behind."""
        store.replace(_record(1))
        store.replace(_record(2))
        assert os.listdir(tmp_path) == ["vault.json"]

    def test_creates_parent_directory(self, tmp_path):
        """Missing parent directories are created on first write."""
        nested = VaultStore(str(tmp_path / "nested" / "dir" / "vault.json"))
        nested.replace(_record(1))
        assert nested.load() == _record(1)

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions only")
    def test_secure_permissions(self, store, vault_path):
        """Vault file is readable by the owner only."""
        store.replace(_record(1))
        assert stat.S_IMODE(os.stat(vault_path).st_mode) == 0o600

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions only")
    def test_chmod_failure_does_not_fail_write(self, store, monkeypatch):
        """Permissions are best effort; the record is still replaced."""
        def refuse_chmod(path, mode):
            raise OSError(1, "Operation not permitted")

        monkeypatch.setattr(storage.os, "chmod", refuse_chmod)
        store.replace(_record(2))
        monkeypatch.undo()
        assert store.load() == _record(2)


class TestCorruption:
    """Test handling of unreadable vault files."""

    def test_invalid_json(self, store, vault_path):
        """Garbage in the vault file is reported as corruption."""
        with open(vault_path, "w", encoding="utf-8") as f:
            f.write("not json {")
        with pytest.raises(StorageCorruptedError):
            store.load()

    def test_missing_field(self, store, vault_path):
        """A record without all fields is reported as corruption."""
        data = _record(1).to_dict()
        del data["auth_tag"]
        with open(vault_path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        with pytest.raises(StorageCorruptedError):
            store.load()

    def test_invalid_hex(self, store, vault_path):
        """Non-hex field values are reported as corruption."""
        data = _record(1).to_dict()
        data["iv"] = "zz"
        with open(vault_path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        with pytest.raises(StorageCorruptedError):
            store.load()

    def test_invalid_utf8(self, store, vault_path):
        """Bytes that are not UTF-8 are reported as corruption."""
        with open(vault_path, "wb") as f:
            f.write(b'{"salt": "\xff\xfe"}')
        with pytest.raises(StorageCorruptedError):
            store.load()

    def test_corruption_is_storage_unavailable(self):
        """Corruption is a kind of storage failure."""
        assert issubclass(StorageCorruptedError, StorageUnavailableError)


class TestRetry:
    """Test the single retry on transient I/O errors."""

    def test_read_retried_once(self, store, monkeypatch):
        """One transient read failure is absorbed."""
        store.replace(_record(1))
        real_load = storage.load_json
        calls = []

        def flaky_load(filepath):
            calls.append(filepath)
            if len(calls) == 1:
                raise OSError(5, "Input/output error")
            return real_load(filepath)

        monkeypatch.setattr(storage, "load_json", flaky_load)
        assert store.load() == _record(1)
        assert len(calls) == 2

    def test_read_fails_after_retry(self, store, monkeypatch):
        """Two read failures surface as StorageUnavailableError."""
        def broken_load(filepath):
            raise OSError(5, "Input/output error")

        monkeypatch.setattr(storage, "load_json", broken_load)
        with pytest.raises(StorageUnavailableError):
            store.load()

    def test_write_retried_once(self, store, monkeypatch):
        """One transient write failure is absorbed."""
        real_save = storage.save_json_atomic
        calls = []

        def flaky_save(filepath, data):
            calls.append(filepath)
            if len(calls) == 1:
                raise OSError(28, "No space left on device")
            real_save(filepath, data)

        monkeypatch.setattr(storage, "save_json_atomic", flaky_save)
        store.replace(_record(2))
        assert len(calls) == 2
        assert store.load() == _record(2)

    def test_failed_write_keeps_previous_record(self, store, monkeypatch):
        """A write that never succeeds raises and leaves the old record."""
        store.replace(_record(1))

        def broken_save(filepath, data):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr(storage, "save_json_atomic", broken_save)
        with pytest.raises(StorageUnavailableError):
            store.replace(_record(2))

        monkeypatch.undo()
        assert store.load() == _record(1)

    def test_corruption_not_retried(self, store, vault_path, monkeypatch):
        """Corrupted files fail immediately."""
        with open(vault_path, "w", encoding="utf-8") as f:
            f.write("[broken")
        real_load = storage.load_json
        calls = []

        def counting_load(filepath):
            calls.append(filepath)
            return real_load(filepath)

        monkeypatch.setattr(storage, "load_json", counting_load)
        with pytest.raises(StorageCorruptedError):
            store.load()
        assert len(calls) == 1
