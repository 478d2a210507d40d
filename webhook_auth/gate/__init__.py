"""
Gate Module
===========
Webhook authorization pipeline and its result types.
"""

# Re-export all public APIs
from .models import DenialReason, RequestContext, Verdict
from .gate import WebhookGate

__all__ = [
    "DenialReason",
    "RequestContext",
    "Verdict",
    "WebhookGate",
]
