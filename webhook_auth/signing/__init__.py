"""
Signing Module
==============
Canonical base strings and HMAC signatures for webhook requests.
"""

# Re-export all public APIs
from .canonical import (
    CanonicalMode,
    build_base_string,
    hash_body,
    split_request_target,
)
from .signature import (
    HashAlgorithm,
    compute_signature,
    is_hex,
    is_well_formed_signature,
    verify_signature,
)

__all__ = [
    # Canonical
    "CanonicalMode",
    "build_base_string",
    "hash_body",
    "split_request_target",
    # Signature
    "HashAlgorithm",
    "compute_signature",
    "is_hex",
    "is_well_formed_signature",
    "verify_signature",
]
