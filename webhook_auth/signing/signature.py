"""
Signature Functions
===================
HMAC signature computation and verification for webhook authentication.
"""

import hashlib
import hmac
import re
from enum import Enum
from typing import Optional

_HEX_RE = re.compile(r"[0-9a-fA-F]+")


class HashAlgorithm(str, Enum):
    """Supported HMAC digest algorithms."""
    SHA256 = "sha256"
    SHA512 = "sha512"
    
    @property
    def hex_length(self) -> int:
        """Length of a hex-encoded digest for this algorithm."""
        return 128 if self is HashAlgorithm.SHA512 else 64
    
    @property
    def digestmod(self):
        return hashlib.sha512 if self is HashAlgorithm.SHA512 else hashlib.sha256
    
    @classmethod
    def parse(cls, value) -> Optional["HashAlgorithm"]:
        """Return the matching algorithm for a loosely-typed value, or None."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


def is_hex(value: str) -> bool:
    """True if value is a non-empty string of hex digits."""
    return isinstance(value, str) and _HEX_RE.fullmatch(value) is not None


def compute_signature(
    secret: bytes,
    message: bytes,
    algorithm: HashAlgorithm = HashAlgorithm.SHA256,
) -> str:
    """
    Compute an HMAC signature over a canonical base string.
    
    Args:
        secret: HMAC key
        message: Canonical base string
        algorithm: Digest algorithm
        
    Returns:
        Lowercase hex-encoded HMAC
    """
    return hmac.new(secret, message, algorithm.digestmod).hexdigest()


def is_well_formed_signature(signature: str, algorithm: HashAlgorithm) -> bool:
    """Check the signature is hex of the exact length for the algorithm."""
    return len(signature) == algorithm.hex_length and is_hex(signature)


def verify_signature(
    secret: bytes,
    message: bytes,
    provided_signature: str,
    algorithm: HashAlgorithm = HashAlgorithm.SHA256,
) -> bool:
    """
    Verify a client signature using constant-time comparison.
    
    The client hex is lowercased before comparing, so upper and lower case
    hex are accepted alike.
    """
    if not is_hex(provided_signature):
        return False
    expected_signature = compute_signature(secret, message, algorithm)
    return hmac.compare_digest(expected_signature, provided_signature.lower())
