"""
Client Signing Helpers
======================
Functions for senders to produce correctly signed webhook requests.
"""

import time
import uuid
from typing import Dict, Optional, Union

from .policy import HeaderNames
from .signing import CanonicalMode, HashAlgorithm, build_base_string, compute_signature


def generate_nonce() -> str:
    """Generate a unique nonce for request signing (32 lowercase hex chars)."""
    return uuid.uuid4().hex


def create_signed_headers(
    secret: Union[str, bytes],
    body: bytes = b"",
    *,
    algorithm: HashAlgorithm = HashAlgorithm.SHA256,
    bind_context: bool = False,
    method: str = "POST",
    target: str = "/",
    header_names: Optional[HeaderNames] = None,
    timestamp: Optional[int] = None,
    nonce: Optional[str] = None,
) -> Dict[str, str]:
    """
    Create headers for a signed webhook request.
    
    Args:
        secret: Shared hex secret (used as the HMAC key in lowercase hex form)
        body: Raw request body exactly as it will be sent
        algorithm: Digest algorithm configured on the receiver
        bind_context: Whether the receiver binds method/path/query/body hash
        method: HTTP method (context mode only)
        target: Request path with optional query (context mode only)
        header_names: Receiver's header keys
        timestamp: Signing time, defaults to now
        nonce: Unique nonce, generated when omitted
        
    Returns:
        Dictionary of headers to include in request
    """
    if isinstance(secret, str):
        secret = secret.strip().lower().encode("ascii")
    names = header_names or HeaderNames()
    timestamp = int(time.time()) if timestamp is None else int(timestamp)
    nonce = nonce or generate_nonce()
    
    base = build_base_string(
        CanonicalMode.for_policy(bind_context),
        timestamp,
        nonce,
        body,
        method=method,
        target=target,
    )
    
    return {
        names.signature: compute_signature(secret, base, algorithm),
        names.timestamp: str(timestamp),
        names.nonce: nonce,
    }
