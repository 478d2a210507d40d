"""
File Secret Source
==================
Loads the webhook secret from a JSON file.
"""

import json
import os

import structlog

from ..exceptions import SecretError, SecretNotFoundError
from .base import ResolvedSecret, parse_secret_payload

logger = structlog.get_logger(__name__)


class FileSecretSource:
    """
    Secret stored as a JSON document on disk.
    
    Expected shape::
    
        {"secret": "<hex>", "algo": "sha256"}
    
    The file must not be committed; keep only a template in VCS.
    """
    
    def __init__(self, path: str):
        self.path = os.fspath(path) if path else ""
    
    def resolve(self) -> ResolvedSecret:
        if not self.path or not os.path.isfile(self.path):
            raise SecretNotFoundError(f"secret_file not found: {self.path or '<unset>'}")
        
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            logger.error("webhook_secret_file_unreadable", path=self.path, error=str(e))
            raise SecretError(f"secret_file could not be read: {self.path}") from e
        
        return parse_secret_payload(data, source="secret_file")
    
    def __repr__(self) -> str:
        return f"FileSecretSource(path={self.path!r})"
