"""
Nonce Ledger Module
===================
Single-use nonce storage for replay protection.
"""

import structlog

from .base import NonceLedger, is_acceptable_nonce, MAX_NONCE_LENGTH, MAX_TTL_SECONDS
from .memory import InMemoryNonceLedger
from .filesystem import FileNonceLedger
from .redis_ledger import RedisNonceLedger

logger = structlog.get_logger(__name__)

REDIS_SCHEMES = ("redis://", "rediss://", "unix://")
MEMORY_LOCATION = "memory://"


def ledger_from_location(location: str) -> NonceLedger:
    """
    Build a ledger from a configured location.
    
    - ``redis://`` / ``rediss://`` / ``unix://`` URL -> RedisNonceLedger
    - ``memory://`` -> InMemoryNonceLedger (process-local)
    - anything else is a filesystem directory -> FileNonceLedger
    """
    if location.startswith(REDIS_SCHEMES):
        ledger = RedisNonceLedger.from_url(location)
    elif location == MEMORY_LOCATION:
        ledger = InMemoryNonceLedger()
    else:
        ledger = FileNonceLedger(location)
    logger.info("webhook_nonce_ledger_selected", backend=type(ledger).__name__)
    return ledger


__all__ = [
    "NonceLedger",
    "is_acceptable_nonce",
    "MAX_NONCE_LENGTH",
    "MAX_TTL_SECONDS",
    "InMemoryNonceLedger",
    "FileNonceLedger",
    "RedisNonceLedger",
    "ledger_from_location",
]
