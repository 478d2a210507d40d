"""
Webhook Auth Middleware
=======================
Starlette middleware that puts the webhook gate in front of protected paths.

Usage:
    policy = configure(options_from_env())
    app.add_middleware(
        WebhookAuthMiddleware,
        gate=WebhookGate(policy),
        protected_paths={"/_system/"},
    )
"""

from typing import Iterable, Optional

import structlog
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from .gate import RequestContext, WebhookGate

logger = structlog.get_logger(__name__)


class WebhookAuthMiddleware(BaseHTTPMiddleware):
    """
    Reject unauthorized requests to protected path prefixes.
    
    Failures answer with ``failure_status`` (404 by default, so protected
    endpoints stay undisclosed) and a generic body. The denial reason is
    only logged.
    """
    
    def __init__(
        self,
        app,
        gate: WebhookGate,
        protected_paths: Optional[Iterable[str]] = None,
        failure_status: int = 404,
    ):
        super().__init__(app)
        self.gate = gate
        self.protected_paths = tuple(protected_paths or ("/",))
        self.failure_status = failure_status
    
    def _is_protected(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.protected_paths)
    
    def _get_client_ip(self, request: Request) -> str:
        client = request.client
        if client:
            return client.host
        return ""
    
    async def _build_context(self, request: Request) -> RequestContext:
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"
        
        return RequestContext(
            client_address=self._get_client_ip(request),
            headers=request.headers,
            raw_body=await request.body(),
            method=request.method,
            request_target=target,
        )
    
    async def dispatch(self, request: Request, call_next):
        """Authorize protected requests before handing them on."""
        if not self._is_protected(request.url.path):
            return await call_next(request)
        
        ctx = await self._build_context(request)
        verdict = await run_in_threadpool(self.gate.guard, ctx)
        
        if not verdict:
            logger.warning(
                "webhook_request_rejected",
                path=request.url.path,
                reason=verdict.reason.value if verdict.reason else None,
                status=self.failure_status,
            )
            return self._denied_response()
        
        return await call_next(request)
    
    def _denied_response(self) -> JSONResponse:
        if self.failure_status == 404:
            content = {"error": "not_found", "message": "Not Found"}
        else:
            content = {"error": "forbidden", "message": "Request not authorized"}
        return JSONResponse(status_code=self.failure_status, content=content)
