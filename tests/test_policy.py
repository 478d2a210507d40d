"""
Unit Tests for Policy Configuration and Secret Sources
=======================================================
"""

import json
import types
from unittest.mock import MagicMock

import pytest

from tests.conftest import SECRET_HEX


def write_secret(tmp_path, payload, name="secret.json"):
    path = tmp_path / name
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload))
    return str(path)


class TestConfigure:
    """Tests for configure()."""
    
    def test_defaults(self, secret_file):
        from webhook_auth import HashAlgorithm, configure
        
        policy = configure({"secret_file": secret_file, "nonce_dir": "/tmp/nonces"})
        
        assert policy.enabled is True
        assert policy.secret == SECRET_HEX.encode()
        assert policy.algorithm is HashAlgorithm.SHA256
        assert policy.ttl_seconds == 300
        assert policy.clock_skew_seconds == 60
        assert policy.allowed_sources == ()
        assert policy.bind_context is False
        assert policy.nonce_dir == "/tmp/nonces"
        assert policy.header_names.signature == "X-Webhook-Signature"
        assert policy.header_names.timestamp == "X-Webhook-Timestamp"
        assert policy.header_names.nonce == "X-Webhook-Nonce"
    
    def test_overrides_and_normalization(self, secret_file):
        from webhook_auth import HashAlgorithm, configure
        
        policy = configure({
            "secret_file": secret_file,
            "nonce_dir": "memory://",
            "algo": " SHA512 ",
            "ttl_seconds": "120",
            "ttl_clock_skew_tolerance": 0,
            "bind_context": True,
            "allowed_ips": ["10.0.0.0/8", None, ["nested"], 7],
            "header_signature": "HTTP_X_SIG",
            "header_timestamp": "HTTP_X_TS",
            "header_nonce": "HTTP_X_NONCE",
        })
        
        assert policy.algorithm is HashAlgorithm.SHA512
        assert policy.ttl_seconds == 120
        assert policy.clock_skew_seconds == 0
        assert policy.bind_context is True
        assert policy.allowed_sources == ("10.0.0.0/8", "7")
        assert policy.header_names.signature == "HTTP_X_SIG"
    
    def test_accepts_attribute_bag(self, secret_file):
        from webhook_auth import configure
        
        options = types.SimpleNamespace(secret_file=secret_file, nonce_dir="memory://", ttl_seconds=30)
        
        assert configure(options).ttl_seconds == 30
    
    def test_policy_is_immutable(self, secret_file):
        from dataclasses import FrozenInstanceError
        from webhook_auth import configure
        
        policy = configure({"secret_file": secret_file, "nonce_dir": "memory://"})
        
        with pytest.raises(FrozenInstanceError):
            policy.ttl_seconds = 1
    
    def test_secret_not_in_repr(self, secret_file):
        from webhook_auth import configure
        
        policy = configure({"secret_file": secret_file, "nonce_dir": "memory://"})
        
        assert SECRET_HEX not in repr(policy)
    
    def test_missing_secret_when_enabled(self, tmp_path):
        from webhook_auth import ConfigurationError, configure
        
        with pytest.raises(ConfigurationError, match="Missing HMAC secret"):
            configure({"secret_file": str(tmp_path / "absent.json"), "nonce_dir": "memory://"})
    
    def test_missing_nonce_dir_when_enabled(self, secret_file, monkeypatch):
        import webhook_auth.policy.loader as loader
        from webhook_auth import ConfigurationError, configure
        
        monkeypatch.setattr(loader, "DEFAULT_NONCE_DIR", None)
        
        with pytest.raises(ConfigurationError, match="Missing nonce_dir"):
            configure({"secret_file": secret_file})
    
    @pytest.mark.parametrize(
        "override,message",
        [
            ({"ttl_seconds": 0}, "ttl_seconds must be >= 1"),
            ({"ttl_clock_skew_tolerance": -1}, "ttl_clock_skew_tolerance must be >= 0"),
            ({"algo": "md5"}, "Unsupported algo"),
            ({"ttl_seconds": "soon"}, "ttl_seconds must be an integer"),
        ],
    )
    def test_invalid_values_when_enabled(self, secret_file, override, message):
        from webhook_auth import ConfigurationError, configure
        
        options = {"secret_file": secret_file, "nonce_dir": "memory://"}
        options.update(override)
        
        with pytest.raises(ConfigurationError, match=message):
            configure(options)
    
    def test_disabled_accepts_incomplete_configuration(self, tmp_path):
        from webhook_auth import HashAlgorithm, configure
        
        policy = configure({
            "enabled": False,
            "secret_file": str(tmp_path / "absent.json"),
            "ttl_seconds": 0,
            "algo": "md5",
        })
        
        assert policy.enabled is False
        assert policy.secret == b""
        assert policy.algorithm is HashAlgorithm.SHA256
        assert policy.is_configured is False
    
    def test_algorithm_hint_fills_default(self, tmp_path):
        """The secret source hint applies only when algo is not configured."""
        from webhook_auth import HashAlgorithm, configure
        
        path = write_secret(tmp_path, {"secret": SECRET_HEX, "algo": "sha512"})
        
        hinted = configure({"secret_file": path, "nonce_dir": "memory://"})
        explicit = configure({"secret_file": path, "nonce_dir": "memory://", "algo": "sha256"})
        
        assert hinted.algorithm is HashAlgorithm.SHA512
        assert explicit.algorithm is HashAlgorithm.SHA256
    
    def test_unknown_algorithm_hint_is_ignored(self, tmp_path):
        from webhook_auth import HashAlgorithm, configure
        
        path = write_secret(tmp_path, {"secret": SECRET_HEX, "algo": "md5"})
        
        assert configure({"secret_file": path, "nonce_dir": "memory://"}).algorithm is HashAlgorithm.SHA256
    
    def test_custom_secret_source(self):
        from webhook_auth import HashAlgorithm, ResolvedSecret, SecretSource, configure
        
        class StaticSource:
            def resolve(self):
                return ResolvedSecret(secret=b"abcd", algorithm=HashAlgorithm.SHA512)
        
        source = StaticSource()
        policy = configure({"nonce_dir": "memory://"}, secret_source=source)
        
        assert isinstance(source, SecretSource)
        assert policy.secret == b"abcd"
        assert policy.algorithm is HashAlgorithm.SHA512


class TestFileSecretSource:
    """Tests for the JSON secret file."""
    
    def test_secret_is_lowercased(self, tmp_path):
        from webhook_auth import FileSecretSource
        
        path = write_secret(tmp_path, {"secret": SECRET_HEX.upper()})
        
        assert FileSecretSource(path).resolve().secret == SECRET_HEX.encode()
    
    def test_missing_file(self, tmp_path):
        from webhook_auth import FileSecretSource, SecretNotFoundError
        
        with pytest.raises(SecretNotFoundError):
            FileSecretSource(str(tmp_path / "nope.json")).resolve()
        with pytest.raises(SecretNotFoundError):
            FileSecretSource("").resolve()
    
    @pytest.mark.parametrize(
        "payload",
        [
            "{not json",
            ["a1b2"],
            {"algo": "sha256"},
            {"secret": ""},
            {"secret": "not-hex!"},
        ],
    )
    def test_malformed_file(self, tmp_path, payload):
        from webhook_auth import FileSecretSource, SecretError, SecretNotFoundError
        
        path = write_secret(tmp_path, payload)
        
        with pytest.raises(SecretError) as exc_info:
            FileSecretSource(path).resolve()
        assert not isinstance(exc_info.value, SecretNotFoundError)
    
    def test_malformed_file_fails_configure_even_when_disabled(self, tmp_path):
        from webhook_auth import SecretError, configure
        
        path = write_secret(tmp_path, {"secret": "zz"})
        
        with pytest.raises(SecretError):
            configure({"enabled": False, "secret_file": path})
    
    def test_secret_error_is_configuration_error(self):
        from webhook_auth import ConfigurationError, SecretError, SecretNotFoundError
        
        assert issubclass(SecretError, ConfigurationError)
        assert issubclass(SecretNotFoundError, SecretError)


class TestEnvSecretSource:
    """Tests for environment-provided secrets."""
    
    def test_resolve(self, monkeypatch):
        from webhook_auth import EnvSecretSource, HashAlgorithm
        
        monkeypatch.setenv("WEBHOOK_AUTH_SECRET", SECRET_HEX)
        monkeypatch.setenv("WEBHOOK_AUTH_ALGO", "sha512")
        
        resolved = EnvSecretSource().resolve()
        
        assert resolved.secret == SECRET_HEX.encode()
        assert resolved.algorithm is HashAlgorithm.SHA512
    
    def test_unset(self, monkeypatch):
        from webhook_auth import EnvSecretSource, SecretNotFoundError
        
        monkeypatch.delenv("WEBHOOK_AUTH_SECRET", raising=False)
        
        with pytest.raises(SecretNotFoundError):
            EnvSecretSource().resolve()


class TestVaultSecretSource:
    """Tests for the Vault KV v2 source with a mocked client."""
    
    def test_resolve(self):
        from webhook_auth import HashAlgorithm, VaultSecretSource
        
        client = MagicMock()
        client.secrets.kv.v2.read_secret_version.return_value = {
            "data": {"data": {"secret": SECRET_HEX, "algo": "sha512"}}
        }
        
        resolved = VaultSecretSource(path="webhooks", client=client).resolve()
        
        assert resolved.secret == SECRET_HEX.encode()
        assert resolved.algorithm is HashAlgorithm.SHA512
        client.secrets.kv.v2.read_secret_version.assert_called_once_with(
            path="webhooks", mount_point="secret"
        )
    
    def test_invalid_path(self):
        import hvac
        from webhook_auth import SecretNotFoundError, VaultSecretSource
        
        client = MagicMock()
        client.secrets.kv.v2.read_secret_version.side_effect = hvac.exceptions.InvalidPath()
        
        with pytest.raises(SecretNotFoundError):
            VaultSecretSource(client=client).resolve()
    
    def test_vault_failure(self):
        from webhook_auth import SecretError, SecretNotFoundError, VaultSecretSource
        
        client = MagicMock()
        client.secrets.kv.v2.read_secret_version.side_effect = RuntimeError("sealed")
        
        with pytest.raises(SecretError) as exc_info:
            VaultSecretSource(client=client).resolve()
        assert not isinstance(exc_info.value, SecretNotFoundError)


class TestOptionsFromEnv:
    """Tests for environment-driven options."""
    
    def test_reads_set_variables_only(self, monkeypatch):
        from webhook_auth import options_from_env
        
        for name in ("ENABLED", "SECRET_FILE", "NONCE_DIR", "TTL_SECONDS", "CLOCK_SKEW",
                     "ALLOWED_IPS", "ALGO", "BIND_CONTEXT", "HEADER_SIGNATURE",
                     "HEADER_TIMESTAMP", "HEADER_NONCE"):
            monkeypatch.delenv(f"WEBHOOK_AUTH_{name}", raising=False)
        monkeypatch.setenv("WEBHOOK_AUTH_ENABLED", "false")
        monkeypatch.setenv("WEBHOOK_AUTH_TTL_SECONDS", "90")
        monkeypatch.setenv("WEBHOOK_AUTH_ALLOWED_IPS", "10.0.0.1, 192.168.0.0/16,")
        monkeypatch.setenv("WEBHOOK_AUTH_BIND_CONTEXT", "yes")
        
        assert options_from_env() == {
            "enabled": False,
            "ttl_seconds": "90",
            "allowed_ips": ["10.0.0.1", "192.168.0.0/16"],
            "bind_context": True,
        }
    
    def test_feeds_configure(self, monkeypatch, secret_file):
        from webhook_auth import configure, options_from_env
        
        monkeypatch.setenv("WEBHOOK_AUTH_SECRET_FILE", secret_file)
        monkeypatch.setenv("WEBHOOK_AUTH_NONCE_DIR", "memory://")
        monkeypatch.setenv("WEBHOOK_AUTH_CLOCK_SKEW", "15")
        
        policy = configure(options_from_env())
        
        assert policy.clock_skew_seconds == 15
        assert policy.nonce_dir == "memory://"
