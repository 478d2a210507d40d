"""
Secret Source Module
====================
Pluggable providers for the webhook HMAC secret.
"""

# Re-export all public APIs
from .base import ResolvedSecret, SecretSource, parse_secret_payload
from .file_source import FileSecretSource
from .env_source import EnvSecretSource
from .vault_source import VaultSecretSource

__all__ = [
    "ResolvedSecret",
    "SecretSource",
    "parse_secret_payload",
    "FileSecretSource",
    "EnvSecretSource",
    "VaultSecretSource",
]
