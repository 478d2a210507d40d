"""
Policy Module
=============
Validated, immutable configuration for the webhook gate.
"""

# Re-export all public APIs
from .config import (
    DEFAULT_CLOCK_SKEW_SECONDS,
    DEFAULT_HEADER_NONCE,
    DEFAULT_HEADER_SIGNATURE,
    DEFAULT_HEADER_TIMESTAMP,
    DEFAULT_SECRET_FILE,
    DEFAULT_TTL_SECONDS,
    options_from_env,
)
from .models import HeaderNames, Policy
from .loader import configure

__all__ = [
    # Config
    "DEFAULT_CLOCK_SKEW_SECONDS",
    "DEFAULT_HEADER_NONCE",
    "DEFAULT_HEADER_SIGNATURE",
    "DEFAULT_HEADER_TIMESTAMP",
    "DEFAULT_SECRET_FILE",
    "DEFAULT_TTL_SECONDS",
    "options_from_env",
    # Models
    "HeaderNames",
    "Policy",
    # Loader
    "configure",
]
