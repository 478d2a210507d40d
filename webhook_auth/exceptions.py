"""
Webhook Auth Exceptions
=======================
Exception hierarchy for configuration and request authorization failures.
"""

from typing import Optional


class WebhookAuthError(Exception):
    """Base class for all webhook auth errors."""
    pass


class ConfigurationError(WebhookAuthError):
    """Raised at setup time when the policy cannot be built."""
    pass


class SecretError(ConfigurationError):
    """Raised when the HMAC secret source is unreadable or malformed."""
    pass


class SecretNotFoundError(SecretError):
    """Raised when the secret source does not exist at all."""
    pass


class AuthorizationDenied(WebhookAuthError):
    """Raised by the gate on the first failed authorization step."""
    
    def __init__(self, reason, message: Optional[str] = None):
        self.reason = reason
        self.message = message or reason.message
        super().__init__(self.message)
