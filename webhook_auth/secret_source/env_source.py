"""
Environment Secret Source
=========================
Loads the webhook secret from environment variables.
"""

import os

from ..exceptions import SecretNotFoundError
from .base import ResolvedSecret, parse_secret_payload


class EnvSecretSource:
    """Secret from ``WEBHOOK_AUTH_SECRET`` (and optional ``WEBHOOK_AUTH_ALGO``)."""
    
    def __init__(
        self,
        secret_var: str = "WEBHOOK_AUTH_SECRET",
        algo_var: str = "WEBHOOK_AUTH_ALGO",
    ):
        self.secret_var = secret_var
        self.algo_var = algo_var
    
    def resolve(self) -> ResolvedSecret:
        secret = os.environ.get(self.secret_var)
        if not secret:
            raise SecretNotFoundError(f"{self.secret_var} is not set")
        return parse_secret_payload(
            {"secret": secret, "algo": os.environ.get(self.algo_var)},
            source=self.secret_var,
        )
