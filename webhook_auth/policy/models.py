"""
Policy Models
=============
Immutable configuration objects consumed by the webhook gate.
"""

from dataclasses import dataclass, field
from typing import Tuple

from ..signing import HashAlgorithm
from .config import (
    DEFAULT_CLOCK_SKEW_SECONDS,
    DEFAULT_HEADER_NONCE,
    DEFAULT_HEADER_SIGNATURE,
    DEFAULT_HEADER_TIMESTAMP,
    DEFAULT_TTL_SECONDS,
)


@dataclass(frozen=True)
class HeaderNames:
    """Keys used to look up the authentication headers."""
    signature: str = DEFAULT_HEADER_SIGNATURE
    timestamp: str = DEFAULT_HEADER_TIMESTAMP
    nonce: str = DEFAULT_HEADER_NONCE


@dataclass(frozen=True)
class Policy:
    """
    Validated webhook authorization policy.
    
    Built once by ``configure()`` and shared read-only across requests.
    ``secret`` is the HMAC key: the lowercase hex secret as ASCII bytes.
    ``nonce_dir`` is the nonce ledger location (directory or URL).
    Nonces are held for ``ttl_seconds`` only, so the last
    ``clock_skew_seconds`` of the accepted window is not replay protected.
    """
    enabled: bool = True
    secret: bytes = field(default=b"", repr=False)
    algorithm: HashAlgorithm = HashAlgorithm.SHA256
    ttl_seconds: int = DEFAULT_TTL_SECONDS
    clock_skew_seconds: int = DEFAULT_CLOCK_SKEW_SECONDS
    allowed_sources: Tuple[str, ...] = ()
    bind_context: bool = False
    header_names: HeaderNames = field(default_factory=HeaderNames)
    nonce_dir: str = ""
    
    @property
    def is_configured(self) -> bool:
        return bool(self.secret) and bool(self.nonce_dir)
