"""
Redis Nonce Ledger
==================
Distributed nonce ledger using atomic ``SET NX EX``.
"""

import time

import redis
import structlog

from .base import is_acceptable_nonce

logger = structlog.get_logger(__name__)


class RedisNonceLedger:
    """
    Redis-backed nonce ledger.
    
    Keys expire on their own after the TTL, so no cleanup is scheduled.
    """
    
    def __init__(self, redis_client, key_prefix: str = "webhook_auth:nonce:"):
        """
        Args:
            redis_client: Sync Redis client
            key_prefix: Namespace for nonce keys
        """
        self.redis = redis_client
        self.key_prefix = key_prefix
    
    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisNonceLedger":
        return cls(redis.from_url(url, decode_responses=True), **kwargs)
    
    def get_key(self, nonce: str) -> str:
        return f"{self.key_prefix}{nonce}"
    
    def check_and_store(self, nonce: str, ttl_seconds: int) -> bool:
        if not is_acceptable_nonce(nonce, ttl_seconds):
            return False
        
        try:
            stored = self.redis.set(
                self.get_key(nonce),
                int(time.time()),
                nx=True,
                ex=ttl_seconds,
            )
        except redis.RedisError as e:
            logger.error("webhook_nonce_store_failed", backend="redis", error=str(e))
            return False
        
        if not stored:
            logger.warning("webhook_nonce_replay_detected", nonce=nonce[:8])
            return False
        return True
