"""
Webhook Auth Configuration
==========================
Default values and environment-driven options.
"""

import os
from typing import Any, Dict, List

ENV_PREFIX = "WEBHOOK_AUTH_"

DEFAULT_SECRET_FILE = os.getenv(
    "WEBHOOK_AUTH_SECRET_FILE", os.path.join("var", "secrets", "webhooks.secret.json")
)
DEFAULT_NONCE_DIR = os.getenv("WEBHOOK_AUTH_NONCE_DIR")
DEFAULT_TTL_SECONDS = 300
DEFAULT_CLOCK_SKEW_SECONDS = 60
DEFAULT_ALGORITHM = "sha256"

# Header keys as they appear in the request header mapping
DEFAULT_HEADER_SIGNATURE = "X-Webhook-Signature"
DEFAULT_HEADER_TIMESTAMP = "X-Webhook-Timestamp"
DEFAULT_HEADER_NONCE = "X-Webhook-Nonce"

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str) -> bool:
    return os.environ[name].strip().lower() in _TRUTHY


def _env_list(name: str) -> List[str]:
    return [item.strip() for item in os.environ[name].split(",") if item.strip()]


# option name -> (environment suffix, parser)
_ENV_OPTIONS = {
    "enabled": ("ENABLED", _env_bool),
    "secret_file": ("SECRET_FILE", None),
    "nonce_dir": ("NONCE_DIR", None),
    "ttl_seconds": ("TTL_SECONDS", None),
    "ttl_clock_skew_tolerance": ("CLOCK_SKEW", None),
    "allowed_ips": ("ALLOWED_IPS", _env_list),
    "algo": ("ALGO", None),
    "bind_context": ("BIND_CONTEXT", _env_bool),
    "header_signature": ("HEADER_SIGNATURE", None),
    "header_timestamp": ("HEADER_TIMESTAMP", None),
    "header_nonce": ("HEADER_NONCE", None),
}


def options_from_env() -> Dict[str, Any]:
    """
    Build an options mapping for ``configure()`` from WEBHOOK_AUTH_* variables.
    
    Only variables that are set are included, so ``configure()`` applies its
    own defaults for the rest. Integer values are left as strings and
    coerced during validation.
    """
    options: Dict[str, Any] = {}
    for option, (suffix, parser) in _ENV_OPTIONS.items():
        name = ENV_PREFIX + suffix
        if name not in os.environ:
            continue
        options[option] = parser(name) if parser else os.environ[name]
    return options
