"""
Shared fixtures for webhook_auth tests.
"""

import json

import pytest

SECRET_HEX = "a1b2c3d4e5f60718293a4b5c6d7e8f90a1b2c3d4e5f60718293a4b5c6d7e8f90"
NOW = 1_700_000_000


class FixedClock:
    """Controllable time source."""
    
    def __init__(self, now: float = NOW):
        self.now = now
    
    def __call__(self) -> float:
        return self.now
    
    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def secret_file(tmp_path):
    """JSON secret file without an algorithm hint."""
    path = tmp_path / "webhooks.secret.json"
    path.write_text(json.dumps({"secret": SECRET_HEX}))
    return str(path)


@pytest.fixture
def make_gate(secret_file, clock):
    """Factory for a gate with an in-memory ledger and a fixed clock."""
    from webhook_auth import InMemoryNonceLedger, WebhookGate, configure
    
    def factory(ledger=None, **options):
        opts = {"secret_file": secret_file, "nonce_dir": "memory://"}
        opts.update(options)
        policy = configure(opts)
        return WebhookGate(
            policy,
            ledger=ledger if ledger is not None else InMemoryNonceLedger(clock=clock),
            clock=clock,
        )
    
    return factory


def signed_context(
    body: bytes = b'{"event":"deploy"}',
    timestamp: int = NOW - 5,
    nonce: str = None,
    client_address: str = "203.0.113.10",
    method: str = "POST",
    target: str = "/hooks/run",
    **sign_kwargs,
):
    """Build a RequestContext carrying a valid signature."""
    from webhook_auth import RequestContext, create_signed_headers
    
    headers = create_signed_headers(
        SECRET_HEX,
        body,
        timestamp=timestamp,
        nonce=nonce,
        method=method,
        target=target,
        **sign_kwargs,
    )
    return RequestContext(
        client_address=client_address,
        headers=headers,
        raw_body=body,
        method=method,
        request_target=target,
    )
