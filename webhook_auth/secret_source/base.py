"""
Secret Source Base
==================
Capability interface for HMAC secret providers and payload validation.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, runtime_checkable

from ..exceptions import SecretError
from ..signing import HashAlgorithm, is_hex


@dataclass(frozen=True)
class ResolvedSecret:
    """HMAC key material plus an optional algorithm hint."""
    secret: bytes = field(repr=False)
    algorithm: Optional[HashAlgorithm] = None


@runtime_checkable
class SecretSource(Protocol):
    """Side-effect-free provider of the webhook HMAC secret."""
    
    def resolve(self) -> ResolvedSecret:
        """
        Load the secret.
        
        Raises:
            SecretNotFoundError: the source does not exist
            SecretError: the source is unreadable or malformed
        """
        ...


def parse_secret_payload(data: Any, source: str = "secret source") -> ResolvedSecret:
    """
    Validate a ``{"secret": <hex>, "algo": ...}`` payload.
    
    The secret is lowercased and used as the HMAC key in its hex text form.
    An unknown ``algo`` hint is ignored.
    
    Raises:
        SecretError: payload is not a mapping or the secret is not hex
    """
    if not isinstance(data, Mapping):
        raise SecretError(f"{source} did not return a mapping.")
    
    secret = data.get("secret")
    if not isinstance(secret, str):
        secret = "" if secret is None else str(secret)
    secret = secret.strip()
    if not secret or not is_hex(secret):
        raise SecretError(f'{source} "secret" must be hex.')
    
    return ResolvedSecret(
        secret=secret.lower().encode("ascii"),
        algorithm=HashAlgorithm.parse(data.get("algo")),
    )
