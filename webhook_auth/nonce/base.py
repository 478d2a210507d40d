"""
Nonce Ledger Base
=================
Single-method contract for replay protection storage.
"""

import re
from typing import Protocol, runtime_checkable

MAX_NONCE_LENGTH = 128
MAX_TTL_SECONDS = 86400
NONCE_PATTERN = re.compile(r"[A-Za-z0-9._:-]{1,128}")


@runtime_checkable
class NonceLedger(Protocol):
    """
    Persistent store of single-use nonces.
    
    ``check_and_store`` must be atomic: of two concurrent calls presenting
    the same nonce, exactly one returns True.
    """
    
    def check_and_store(self, nonce: str, ttl_seconds: int) -> bool:
        """
        Record a nonce if unseen.
        
        Returns:
            True if the nonce was newly stored; False if it is already
            present (replay) or the store failed
        """
        ...


def is_acceptable_nonce(nonce: str, ttl_seconds: int) -> bool:
    """Input constraints shared by all ledgers (length, charset, TTL cap)."""
    if ttl_seconds <= 0 or ttl_seconds > MAX_TTL_SECONDS:
        return False
    if not isinstance(nonce, str) or not nonce or len(nonce) > MAX_NONCE_LENGTH:
        return False
    return NONCE_PATTERN.fullmatch(nonce) is not None
