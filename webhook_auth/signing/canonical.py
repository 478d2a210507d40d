"""
Canonical Base String
=====================
Deterministic serialization of a webhook request for HMAC signing.

Two layouts exist and both are part of the client wire contract:

- Simple mode: ``"<ts>.<nonce>.<rawBody>"``
- Context mode: six newline-joined fields, in order
  ``ts``, ``nonce``, ``METHOD``, ``/path``, ``query``, ``sha256(rawBody)``
  with no trailing newline.
"""

import hashlib
from enum import Enum
from typing import Optional, Tuple


class CanonicalMode(str, Enum):
    """Base string layout."""
    SIMPLE = "simple"
    CONTEXT = "context"
    
    @classmethod
    def for_policy(cls, bind_context: bool) -> "CanonicalMode":
        return cls.CONTEXT if bind_context else cls.SIMPLE


def hash_body(body: bytes) -> str:
    """
    Compute SHA-256 hash of request body.
    
    Args:
        body: Raw request body bytes
        
    Returns:
        Hex-encoded SHA-256 hash (digest of b"" for an empty body)
    """
    return hashlib.sha256(body or b"").hexdigest()


def split_request_target(target: Optional[str]) -> Tuple[str, str]:
    """
    Split a request target into a normalized path and raw query string.
    
    The target is split on the first "?". Both parts are whitespace-trimmed,
    and the path always starts with "/" ("/" for an empty path).
    """
    uri = (target or "").strip()
    path, _, query = uri.partition("?")
    path = path.strip()
    query = query.strip()
    if not path.startswith("/"):
        path = "/" + path.lstrip("/")
    return path, query


def build_base_string(
    mode: CanonicalMode,
    timestamp: int,
    nonce: str,
    raw_body: bytes,
    method: Optional[str] = None,
    target: Optional[str] = None,
) -> bytes:
    """
    Build the canonical byte string covered by the HMAC.
    
    Args:
        mode: Simple or context-bound layout
        timestamp: Unix timestamp in seconds (already validated)
        nonce: Client-supplied nonce
        raw_body: Raw request body, appended verbatim in simple mode
        method: HTTP method, context mode only (missing -> "")
        target: Request target (path + optional query), context mode only
        
    Returns:
        Canonical base string as bytes
    """
    raw_body = raw_body or b""
    
    if mode is CanonicalMode.SIMPLE:
        return f"{int(timestamp)}.{nonce}.".encode("utf-8") + raw_body
    
    path, query = split_request_target(target)
    fields = [
        str(int(timestamp)),
        nonce,
        (method or "").upper(),
        path,
        query,
        hash_body(raw_body),
    ]
    return "\n".join(fields).encode("utf-8")
