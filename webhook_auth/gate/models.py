"""
Gate Models
===========
Request context, denial reasons and verdicts.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional


class DenialReason(str, Enum):
    """Reasons for denying a webhook request."""
    DISABLED = "disabled"
    NOT_CONFIGURED = "not_configured"
    SOURCE_NOT_ALLOWED = "source_not_allowed"
    MISSING_HEADERS = "missing_headers"
    MALFORMED_SIGNATURE = "malformed_signature"
    TIMESTAMP_OUT_OF_WINDOW = "timestamp_out_of_window"
    NONCE_REJECTED = "nonce_rejected"
    INVALID_SIGNATURE = "invalid_signature"
    INTERNAL_ERROR = "internal_error"
    
    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    DenialReason.DISABLED: "Webhooks are disabled.",
    DenialReason.NOT_CONFIGURED: "Webhooks not configured (missing secret or nonce_dir).",
    DenialReason.SOURCE_NOT_ALLOWED: "Source IP not allowed.",
    DenialReason.MISSING_HEADERS: "Missing required authentication headers.",
    DenialReason.MALFORMED_SIGNATURE: "Malformed signature.",
    DenialReason.TIMESTAMP_OUT_OF_WINDOW: "Request timestamp outside allowed window.",
    DenialReason.NONCE_REJECTED: "Nonce already used or storage failure.",
    DenialReason.INVALID_SIGNATURE: "Invalid HMAC signature.",
    DenialReason.INTERNAL_ERROR: "Internal error during webhook authorization.",
}


@dataclass(frozen=True)
class RequestContext:
    """Per-call request material handed to the gate. Never persisted."""
    client_address: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    raw_body: bytes = b""
    method: str = ""
    request_target: str = ""
    
    @classmethod
    def from_wsgi_environ(cls, environ: Mapping[str, str], raw_body: bytes = b"") -> "RequestContext":
        """
        Build a context from a WSGI environ.
        
        ``HTTP_X_FOO_BAR`` keys become ``X-Foo-Bar`` headers; the request
        target prefers ``RAW_URI``/``REQUEST_URI`` over PATH_INFO + QUERY_STRING.
        """
        headers = {}
        for key, value in environ.items():
            if key.startswith("HTTP_"):
                name = "-".join(part.capitalize() for part in key[5:].split("_"))
                headers[name] = value
        
        target = environ.get("RAW_URI") or environ.get("REQUEST_URI")
        if not target:
            target = environ.get("PATH_INFO", "") or ""
            if environ.get("QUERY_STRING"):
                target = f"{target}?{environ['QUERY_STRING']}"
        
        return cls(
            client_address=environ.get("REMOTE_ADDR", "") or "",
            headers=headers,
            raw_body=raw_body,
            method=environ.get("REQUEST_METHOD", "") or "",
            request_target=target,
        )


@dataclass(frozen=True)
class Verdict:
    """
    Outcome of one authorization attempt.
    
    Truthy iff authorized. Denied verdicts carry the reason code and a
    diagnostic message that must not be sent to untrusted clients.
    """
    authorized: bool
    reason: Optional[DenialReason] = None
    message: Optional[str] = None
    
    @classmethod
    def allow(cls) -> "Verdict":
        return cls(authorized=True)
    
    @classmethod
    def deny(cls, reason: DenialReason, message: Optional[str] = None) -> "Verdict":
        return cls(authorized=False, reason=reason, message=message or reason.message)
    
    def __bool__(self) -> bool:
        return self.authorized
