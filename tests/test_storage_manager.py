"""Unit tests for StorageManager."""

from unittest.mock import patch

import pytest

from core.crypto import encrypt_data
from core.errors import BackupNotFoundError, PersistenceError
from core.persistence import FileStorageAdapter, MemoryStorageAdapter
from core.storage_manager import StorageManager, is_sensitive_key
from models.mcp import MCP, RemoteTransport, StdioTransport
from models.profile import Profile
from models.settings import Settings


@pytest.fixture
def adapter():
    return MemoryStorageAdapter()


@pytest.fixture
def github_mcp():
    """Create a stdio MCP with a secret and a plain env value."""
    return MCP(
        name="github",
        transport=StdioTransport("npx", ["-y", "@modelcontextprotocol/server-github"]),
        env={"GITHUB_TOKEN": "ghp_secret", "LOG_LEVEL": "debug"}
    )


class TestSensitiveKeys:
    """Tests for sensitive env key detection."""

    @pytest.mark.parametrize("key", [
        "GITHUB_TOKEN", "api_key", "OPENAI-API-KEY", "DB_PASSWORD", "client_secret",
        "AUTH_HEADER", "AWS_CREDENTIALS", "access_token"
    ])
    def test_sensitive(self, key):
        """Test secret-looking names are detected."""
        assert is_sensitive_key(key) is True

    @pytest.mark.parametrize("key", ["LOG_LEVEL", "PATH", "PORT", "HOME"])
    def test_not_sensitive(self, key):
        """Test ordinary names are not."""
        assert is_sensitive_key(key) is False


class TestEncryption:
    """Tests for env encryption at rest."""

    def test_sensitive_values_encrypted_at_rest(self, adapter, github_mcp):
        """Test only sensitive values are encrypted in storage."""
        storage = StorageManager(adapter, password="pw")
        storage.save_mcps([github_mcp])

        stored_env = adapter.get_mcps()[0]["env"]
        assert stored_env["GITHUB_TOKEN"] != "ghp_secret"
        assert stored_env["LOG_LEVEL"] == "debug"

        loaded = storage.get_mcps()[0]
        assert loaded.env == {"GITHUB_TOKEN": "ghp_secret", "LOG_LEVEL": "debug"}

    def test_no_password_stores_plaintext(self, adapter, github_mcp):
        """Test values are stored as-is without a password."""
        storage = StorageManager(adapter)
        assert storage.encryption_active is False
        storage.save_mcps([github_mcp])
        assert adapter.get_mcps()[0]["env"]["GITHUB_TOKEN"] == "ghp_secret"

    def test_wrong_password_keeps_stored_value(self, adapter, github_mcp):
        """Test decrypting with a different password does not raise."""
        StorageManager(adapter, password="right").save_mcps([github_mcp])
        stored_value = adapter.get_mcps()[0]["env"]["GITHUB_TOKEN"]

        loaded = StorageManager(adapter, password="wrong").get_mcps()[0]
        assert loaded.env["GITHUB_TOKEN"] == stored_value

    def test_plaintext_readable_after_enabling_encryption(self, adapter, github_mcp):
        """Test values written before a password was set still load."""
        StorageManager(adapter).save_mcps([github_mcp])
        loaded = StorageManager(adapter, password="pw").get_mcps()[0]
        assert loaded.env["GITHUB_TOKEN"] == "ghp_secret"

    def test_clear_password(self, adapter):
        """Test clearing the password disables encryption."""
        storage = StorageManager(adapter, password="pw")
        assert storage.encryption_active is True
        storage.clear_encryption_password()
        assert storage.encryption_active is False

    def test_encrypt_failure_falls_back_to_plaintext(self, adapter, github_mcp):
        """Test a failing cipher stores the value unencrypted."""
        from core.errors import EncryptionError
        storage = StorageManager(adapter, password="pw")
        with patch("core.storage_manager.encrypt_data", side_effect=EncryptionError("boom")):
            storage.save_mcps([github_mcp])
        assert adapter.get_mcps()[0]["env"]["GITHUB_TOKEN"] == "ghp_secret"

    def test_decrypt_record(self, adapter):
        """Test raw record decryption."""
        storage = StorageManager(adapter, password="pw")
        record = {"id": "1", "env": {"API_KEY": encrypt_data("k", "pw")}}
        assert storage.decrypt_record(record)["env"]["API_KEY"] == "k"
        # input left untouched
        assert record["env"]["API_KEY"] != "k"


class TestTypedCollections:
    """Tests for model conversion."""

    def test_profiles_round_trip(self, adapter):
        """Test profiles are stored as camelCase records."""
        storage = StorageManager(adapter)
        profile = Profile(name="Dev", mcp_ids=["a"])
        storage.save_profiles([profile])
        assert adapter.get_profiles()[0]["mcpIds"] == ["a"]
        assert storage.get_profiles() == [profile]

    def test_settings_round_trip(self, adapter):
        """Test settings persist."""
        storage = StorageManager(adapter)
        storage.save_settings(Settings(theme="dark", auto_backup=False))
        settings = storage.get_settings()
        assert settings.theme == "dark"
        assert settings.auto_backup is False

    def test_remote_mcp_round_trip(self, adapter):
        """Test http records keep url and headers."""
        storage = StorageManager(adapter)
        mcp = MCP(name="vercel", transport=RemoteTransport(url="https://mcp.vercel.com", headers={"X": "1"}))
        storage.save_mcps([mcp])
        assert storage.get_mcps() == [mcp]

    def test_backup_and_restore(self, adapter, github_mcp):
        """Test snapshots keep the stored (encrypted) form."""
        storage = StorageManager(adapter, password="pw")
        storage.save_mcps([github_mcp])
        backup = storage.create_backup("snap")

        assert backup.mcp_count == 1
        assert backup.data["mcps"][0]["env"]["GITHUB_TOKEN"] != "ghp_secret"

        storage.save_mcps([])
        storage.restore_from_backup(backup.id)
        assert storage.get_mcps()[0].env["GITHUB_TOKEN"] == "ghp_secret"
        assert storage.get_backups()[0].id == backup.id

    def test_restore_unknown_backup(self, adapter):
        """Test not-found errors pass through unwrapped."""
        with pytest.raises(BackupNotFoundError):
            StorageManager(adapter).restore_from_backup("nope")


class TestFailures:
    """Tests for persistence failure handling."""

    def test_write_failure_wrapped(self, adapter, github_mcp):
        """Test adapter exceptions surface as PersistenceError."""
        storage = StorageManager(adapter)
        with patch.object(adapter, "save_mcps", side_effect=OSError("disk full")):
            with pytest.raises(PersistenceError, match="disk full"):
                storage.save_mcps([github_mcp])

    def test_read_failure_wrapped(self, adapter):
        """Test read failures name the collection."""
        storage = StorageManager(adapter)
        with patch.object(adapter, "get_profiles", side_effect=RuntimeError("gone")):
            with pytest.raises(PersistenceError, match="profiles"):
                storage.get_profiles()

    def test_storage_info_never_raises(self, adapter):
        """Test storage info falls back to zeros."""
        storage = StorageManager(adapter)
        with patch.object(adapter, "get_storage_info", side_effect=OSError("x")):
            assert storage.get_storage_info() == {"used": 0, "available": 0}

    def test_file_adapter_integration(self, tmp_path, github_mcp):
        """Test encryption through the file adapter."""
        storage = StorageManager(FileStorageAdapter(tmp_path), password="pw")
        storage.save_mcps([github_mcp])
        assert "ghp_secret" not in (tmp_path / "mcps.json").read_text(encoding="utf-8")
        assert storage.get_mcps()[0].env["GITHUB_TOKEN"] == "ghp_secret"
