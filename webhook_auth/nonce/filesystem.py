"""
Filesystem Nonce Ledger
=======================
Replay protection backed by one small file per nonce.

Storage model:
- Filename: sha256(nonce) hex + ".nonce"; the raw nonce never touches a path
- Content: creation timestamp; the file mtime is the canonical age
- Atomicity: O_CREAT | O_EXCL creation, safe across processes sharing the
  same directory on POSIX filesystems
- Eviction: replacing an expired file and purge sweeps run under an
  exclusive flock on a per-directory lock file, with a re-stat under the lock
"""

import contextlib
import fcntl
import hashlib
import os
import random
import time
from typing import Callable, Optional

import structlog

from ..exceptions import ConfigurationError
from .base import is_acceptable_nonce

logger = structlog.get_logger(__name__)


class FileNonceLedger:
    """Filesystem-backed nonce ledger."""
    
    EXTENSION = ".nonce"
    LOCK_NAME = ".evict.lock"
    PURGE_BATCH = 25
    
    def __init__(
        self,
        directory: str,
        root: Optional[str] = None,
        purge_probability: float = 0.02,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            directory: Writable directory for nonce files (created lazily)
            root: If set, the resolved directory must live under it
            purge_probability: Chance per successful store of a small purge sweep
            clock: Time source in Unix seconds
        """
        directory = os.fspath(directory).strip() if directory else ""
        if not directory or "\0" in directory:
            raise ConfigurationError("Missing or invalid nonce directory.")
        self.directory = directory
        self.root = os.path.realpath(root) if root else None
        self.purge_probability = purge_probability
        self._clock = clock
    
    def check_and_store(self, nonce: str, ttl_seconds: int) -> bool:
        if not is_acceptable_nonce(nonce, ttl_seconds):
            return False
        
        if not self._ensure_dir():
            return False
        
        now = int(self._clock())
        path = self._path_for(nonce)
        
        fd = self._create(path)
        if fd is None:
            if not self._is_expired(path, now, ttl_seconds):
                logger.warning("webhook_nonce_replay_detected", nonce=nonce[:8])
                return False
            fd = self._replace_expired(path, nonce, now, ttl_seconds)
            if fd is None:
                return False
        
        try:
            os.write(fd, str(now).encode("ascii"))
        except OSError as e:
            logger.error("webhook_nonce_store_failed", path=path, error=str(e))
            return False
        finally:
            os.close(fd)
        
        try:
            os.utime(path, (now, now))
            os.chmod(path, 0o660)
        except OSError as e:
            logger.warning("webhook_nonce_metadata_failed", error=str(e))
        
        if self.purge_probability > 0 and random.random() < self.purge_probability:
            self._sweep(ttl_seconds, self.PURGE_BATCH)
        
        return True
    
    def purge_expired(self, ttl_seconds: int, max_entries: int = 500) -> int:
        """
        Delete expired nonce files (bulk cleanup for admin jobs or cron).
        
        Args:
            ttl_seconds: Files at least this old are removed
            max_entries: Maximum number of nonce files to inspect
            
        Returns:
            Number of files removed
        """
        if ttl_seconds <= 0 or max_entries <= 0:
            return 0
        if not os.path.isdir(self.directory):
            return 0
        return self._sweep(ttl_seconds, max_entries)
    
    def _path_for(self, nonce: str) -> str:
        digest = hashlib.sha256(nonce.encode("utf-8")).hexdigest()
        return os.path.join(self.directory, digest + self.EXTENSION)
    
    def _create(self, path: str) -> Optional[int]:
        try:
            return os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o660)
        except FileExistsError:
            return None
        except OSError as e:
            logger.error("webhook_nonce_store_failed", path=path, error=str(e))
            return None
    
    def _is_expired(self, path: str, now: int, ttl_seconds: int) -> bool:
        try:
            age = now - int(os.stat(path).st_mtime)
        except FileNotFoundError:
            return True
        except OSError:
            return False
        return age >= ttl_seconds
    
    def _replace_expired(self, path: str, nonce: str, now: int, ttl_seconds: int) -> Optional[int]:
        """Evict an expired leftover and create a fresh file, once."""
        try:
            with self._evict_lock():
                # Another caller may have replaced it since the first stat
                if not self._is_expired(path, now, ttl_seconds):
                    logger.warning("webhook_nonce_replay_detected", nonce=nonce[:8])
                    return None
                try:
                    os.unlink(path)
                except FileNotFoundError:
                    pass
                return self._create(path)
        except OSError as e:
            logger.error("webhook_nonce_evict_failed", error=str(e))
            return None
    
    @contextlib.contextmanager
    def _evict_lock(self):
        """Exclusive flock on the directory's lock file; serializes evictions and sweeps."""
        fd = os.open(os.path.join(self.directory, self.LOCK_NAME), os.O_RDWR | os.O_CREAT, 0o660)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)
    
    def _ensure_dir(self) -> bool:
        try:
            os.makedirs(self.directory, mode=0o775, exist_ok=True)
        except OSError as e:
            logger.error("webhook_nonce_dir_unavailable", directory=self.directory, error=str(e))
            return False
        
        real = os.path.realpath(self.directory)
        if self.root is not None and not real.startswith(self.root + os.sep) and real != self.root:
            logger.error("webhook_nonce_dir_outside_root", directory=real, root=self.root)
            return False
        
        return os.access(real, os.W_OK)
    
    def _sweep(self, ttl_seconds: int, limit: int) -> int:
        try:
            with self._evict_lock():
                return self._sweep_locked(ttl_seconds, limit)
        except OSError as e:
            logger.error("webhook_nonce_purge_failed", directory=self.directory, error=str(e))
            return 0
    
    def _sweep_locked(self, ttl_seconds: int, limit: int) -> int:
        now = int(self._clock())
        removed = 0
        processed = 0
        
        with os.scandir(self.directory) as entries:
            for entry in entries:
                if processed >= limit:
                    break
                if not entry.name.endswith(self.EXTENSION):
                    continue
                try:
                    if not entry.is_file(follow_symlinks=False):
                        continue
                    mtime = entry.stat(follow_symlinks=False).st_mtime
                except OSError:
                    continue
                
                processed += 1
                if now - int(mtime) >= ttl_seconds:
                    try:
                        os.unlink(entry.path)
                        removed += 1
                    except OSError:
                        pass
        
        if removed:
            logger.info("webhook_nonce_purged", removed=removed, inspected=processed)
        return removed
