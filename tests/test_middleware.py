"""
Unit Tests for the Starlette Middleware
=======================================
"""

import json

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from tests.conftest import SECRET_HEX


async def run_job(request: Request):
    body = await request.body()
    return JSONResponse({"received": json.loads(body or b"{}")})


async def health(request: Request):
    return JSONResponse({"status": "ok"})


def build_app(gate, **kwargs):
    from webhook_auth.middleware import WebhookAuthMiddleware
    
    app = Starlette(
        routes=[
            Route("/_system/run", run_job, methods=["POST"]),
            Route("/health", health),
        ]
    )
    app.add_middleware(
        WebhookAuthMiddleware,
        gate=gate,
        protected_paths={"/_system/"},
        **kwargs,
    )
    return app


@pytest.fixture
def gate(secret_file):
    from webhook_auth import InMemoryNonceLedger, WebhookGate, configure
    
    policy = configure({"secret_file": secret_file, "nonce_dir": "memory://", "bind_context": True})
    return WebhookGate(policy, ledger=InMemoryNonceLedger())


def signed(body, target="/_system/run?x=1", **kwargs):
    from webhook_auth import create_signed_headers
    
    return create_signed_headers(
        SECRET_HEX, body, bind_context=True, method="POST", target=target, **kwargs
    )


class TestWebhookAuthMiddleware:
    """Tests for WebhookAuthMiddleware."""
    
    def test_signed_request_reaches_handler(self, gate):
        client = TestClient(build_app(gate))
        body = b'{"job":"reindex"}'
        
        response = client.post("/_system/run?x=1", content=body, headers=signed(body))
        
        assert response.status_code == 200
        assert response.json() == {"received": {"job": "reindex"}}
    
    def test_unsigned_request_hidden_as_not_found(self, gate):
        client = TestClient(build_app(gate))
        
        response = client.post("/_system/run", content=b"{}")
        
        assert response.status_code == 404
        assert response.json() == {"error": "not_found", "message": "Not Found"}
    
    def test_replay_rejected(self, gate):
        client = TestClient(build_app(gate))
        body = b"{}"
        headers = signed(body)
        
        first = client.post("/_system/run?x=1", content=body, headers=headers)
        second = client.post("/_system/run?x=1", content=body, headers=headers)
        
        assert first.status_code == 200
        assert second.status_code == 404
    
    def test_query_is_bound(self, gate):
        client = TestClient(build_app(gate))
        body = b"{}"
        
        response = client.post("/_system/run?x=2", content=body, headers=signed(body))
        
        assert response.status_code == 404
    
    def test_custom_failure_status(self, gate):
        client = TestClient(build_app(gate, failure_status=403))
        
        response = client.post("/_system/run", content=b"{}")
        
        assert response.status_code == 403
        assert response.json() == {"error": "forbidden", "message": "Request not authorized"}
    
    def test_denial_reason_not_disclosed(self, gate):
        client = TestClient(build_app(gate))
        body = b"{}"
        headers = signed(body, timestamp=1000)
        
        response = client.post("/_system/run?x=1", content=body, headers=headers)
        
        assert response.status_code == 404
        assert "timestamp" not in response.text.lower()
    
    def test_unprotected_path_passes_through(self, gate):
        client = TestClient(build_app(gate))
        
        response = client.get("/health")
        
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
    
    def test_source_allow_list_uses_client_host(self, secret_file):
        from webhook_auth import InMemoryNonceLedger, WebhookGate, configure
        
        policy = configure({
            "secret_file": secret_file,
            "nonce_dir": "memory://",
            "bind_context": True,
            "allowed_ips": ["10.0.0.0/8"],
        })
        client = TestClient(build_app(WebhookGate(policy, ledger=InMemoryNonceLedger())))
        body = b"{}"
        
        response = client.post("/_system/run?x=1", content=body, headers=signed(body))
        
        assert response.status_code == 404
    
    def test_disabled_gate_blocks_everything_protected(self):
        from webhook_auth import WebhookGate, configure
        
        gate = WebhookGate(configure({"enabled": False}))
        client = TestClient(build_app(gate))
        body = b"{}"
        
        assert client.post("/_system/run?x=1", content=body, headers=signed(body)).status_code == 404
        assert client.get("/health").status_code == 200
