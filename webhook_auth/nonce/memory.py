"""
In-Memory Nonce Ledger
======================
Process-local nonce ledger for tests and single-worker deployments.
"""

import threading
import time
from typing import Callable, Dict

import structlog

from .base import is_acceptable_nonce

logger = structlog.get_logger(__name__)


class InMemoryNonceLedger:
    """
    In-memory nonce ledger for replay protection.
    
    Not shared across processes. In production, use Redis or the
    filesystem ledger.
    """
    
    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._expiry: Dict[str, float] = {}
        self._lock = threading.Lock()
    
    def check_and_store(self, nonce: str, ttl_seconds: int) -> bool:
        """
        Check if nonce is fresh and store it.
        
        Args:
            nonce: The nonce to check
            ttl_seconds: How long the nonce stays reserved
            
        Returns:
            True if nonce is fresh (not seen before)
        """
        if not is_acceptable_nonce(nonce, ttl_seconds):
            return False
        
        with self._lock:
            now = self._clock()
            self._cleanup(now)
            
            if nonce in self._expiry:
                logger.warning("webhook_nonce_replay_detected", nonce=nonce[:8])
                return False
            
            self._expiry[nonce] = now + ttl_seconds
            return True
    
    def purge_expired(self) -> int:
        """Remove expired nonces and return how many were dropped."""
        with self._lock:
            return self._cleanup(self._clock())
    
    def __len__(self) -> int:
        return len(self._expiry)
    
    def _cleanup(self, now: float) -> int:
        expired = [nonce for nonce, expires in self._expiry.items() if expires <= now]
        for nonce in expired:
            del self._expiry[nonce]
        return len(expired)
