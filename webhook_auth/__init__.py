"""
Webhook Auth
============
HMAC authentication gate for inbound webhooks: source allow-listing,
timestamp freshness, single-use nonces and constant-time signature checks.
"""

__version__ = "0.1.0"

# Exceptions
from webhook_auth.exceptions import (
    WebhookAuthError,
    AuthorizationDenied,
    ConfigurationError,
    SecretError,
    SecretNotFoundError,
)

# Signing
from webhook_auth.signing import (
    CanonicalMode,
    HashAlgorithm,
    build_base_string,
    compute_signature,
    hash_body,
    verify_signature,
)

# IP allow-list
from webhook_auth.ip_utils import is_ip_allowed, normalize_allowed_ips

# Secret sources
from webhook_auth.secret_source import (
    SecretSource,
    ResolvedSecret,
    FileSecretSource,
    EnvSecretSource,
    VaultSecretSource,
)

# Policy
from webhook_auth.policy import HeaderNames, Policy, configure, options_from_env

# Nonce ledgers
from webhook_auth.nonce import (
    NonceLedger,
    InMemoryNonceLedger,
    FileNonceLedger,
    RedisNonceLedger,
    ledger_from_location,
)

# Gate
from webhook_auth.gate import DenialReason, RequestContext, Verdict, WebhookGate

# Client helpers
from webhook_auth.client import create_signed_headers, generate_nonce

__all__ = [
    # Exceptions
    "WebhookAuthError",
    "AuthorizationDenied",
    "ConfigurationError",
    "SecretError",
    "SecretNotFoundError",
    # Signing
    "CanonicalMode",
    "HashAlgorithm",
    "build_base_string",
    "compute_signature",
    "hash_body",
    "verify_signature",
    # IP allow-list
    "is_ip_allowed",
    "normalize_allowed_ips",
    # Secret sources
    "SecretSource",
    "ResolvedSecret",
    "FileSecretSource",
    "EnvSecretSource",
    "VaultSecretSource",
    # Policy
    "HeaderNames",
    "Policy",
    "configure",
    "options_from_env",
    # Nonce ledgers
    "NonceLedger",
    "InMemoryNonceLedger",
    "FileNonceLedger",
    "RedisNonceLedger",
    "ledger_from_location",
    # Gate
    "DenialReason",
    "RequestContext",
    "Verdict",
    "WebhookGate",
    # Client helpers
    "create_signed_headers",
    "generate_nonce",
]
