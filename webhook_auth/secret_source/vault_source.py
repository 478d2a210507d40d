"""
Vault Secret Source
===================
Loads the webhook secret from HashiCorp Vault KV v2.

Usage:
    source = VaultSecretSource(path="webhooks")
    policy = configure(options, secret_source=source)
"""

import os
from typing import Optional

import hvac
import structlog

from ..exceptions import SecretError, SecretNotFoundError
from .base import ResolvedSecret, parse_secret_payload

logger = structlog.get_logger(__name__)


class VaultSecretSource:
    """Webhook secret stored under a Vault KV v2 path."""
    
    def __init__(
        self,
        path: str = "webhooks",
        mount_point: str = "secret",
        url: Optional[str] = None,
        token: Optional[str] = None,
        client: Optional[hvac.Client] = None,
    ):
        self.path = path
        self.mount_point = mount_point
        self.url = url or os.environ.get("VAULT_ADDR", "http://127.0.0.1:8200")
        self.token = token or os.environ.get("VAULT_TOKEN")
        self._client = client
    
    @property
    def client(self) -> hvac.Client:
        """Lazy-loaded Vault client."""
        if self._client is None:
            self._client = hvac.Client(url=self.url, token=self.token)
        return self._client
    
    def resolve(self) -> ResolvedSecret:
        location = f"{self.mount_point}/{self.path}"
        try:
            secret = self.client.secrets.kv.v2.read_secret_version(
                path=self.path,
                mount_point=self.mount_point,
            )
            data = secret["data"]["data"]
        except hvac.exceptions.InvalidPath as e:
            raise SecretNotFoundError(f"Vault secret not found: {location}") from e
        except Exception as e:
            logger.error("webhook_secret_vault_failed", location=location, error=str(e))
            raise SecretError(f"Vault secret could not be read: {location}") from e
        
        return parse_secret_payload(data, source=f"vault:{location}")
