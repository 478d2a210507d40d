"""
Webhook Gate
============
Layered authorization pipeline for inbound webhook requests.

Steps, in order, terminal on the first failure:

1. Enabled and configured (secret + nonce ledger location)
2. Source address allow-list (only when configured)
3. Signature, timestamp and nonce headers present
4. Signature is hex of the algorithm's digest length
5. Timestamp within ttl_seconds + clock skew (past) and clock skew (future)
6. Nonce unused, atomically reserved in the ledger
7. HMAC over the canonical base string, compared in constant time
"""

import threading
import time
from typing import Callable, Mapping, Optional

import structlog

from ..exceptions import AuthorizationDenied
from ..ip_utils import is_ip_allowed
from ..metrics import record_decision
from ..nonce import NonceLedger, ledger_from_location
from ..policy import Policy
from ..signing import (
    CanonicalMode,
    build_base_string,
    is_well_formed_signature,
    verify_signature,
)
from .models import DenialReason, RequestContext, Verdict

logger = structlog.get_logger(__name__)


def _header(headers: Mapping[str, str], name: str) -> str:
    """Exact key lookup, then case-insensitive."""
    value = headers.get(name)
    if value is None:
        lowered = name.lower()
        for key, candidate in headers.items():
            if isinstance(key, str) and key.lower() == lowered:
                value = candidate
                break
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("latin-1")
    return str(value)


class WebhookGate:
    """
    Stateless webhook authorization gate.

    The policy is read-only and the gate keeps no per-request state, so one
    instance can serve concurrent requests. The only shared resource is the
    nonce ledger.

    Nonces are reserved for ``ttl_seconds`` while timestamps are accepted up
    to ``ttl_seconds + clock_skew_seconds`` old. A captured request replayed
    in that last ``clock_skew_seconds`` finds its nonce expired and passes
    once more. Keep the skew small where that matters.
    """

    def __init__(
        self,
        policy: Policy,
        ledger: Optional[NonceLedger] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            policy: Validated policy from ``configure()``
            ledger: Nonce ledger; built from ``policy.nonce_dir`` when omitted
            clock: Time source in Unix seconds
        """
        self.policy = policy
        self._ledger = ledger
        self._ledger_lock = threading.Lock()
        self._clock = clock

    @property
    def ledger(self) -> NonceLedger:
        if self._ledger is None:
            with self._ledger_lock:
                if self._ledger is None:
                    self._ledger = ledger_from_location(self.policy.nonce_dir)
        return self._ledger

    def assert_authorized(self, ctx: RequestContext) -> Verdict:
        """
        Strict authorization.

        Returns:
            An authorized Verdict

        Raises:
            AuthorizationDenied: on the first failed step, with its reason
        """
        try:
            self._run_pipeline(ctx)
        except AuthorizationDenied as denied:
            self._log_denial(ctx, denied.reason, denied.message)
            record_decision(False, denied.reason.value)
            raise

        record_decision(True)
        logger.debug("webhook_authorized", client_ip=ctx.client_address)
        return Verdict.allow()

    def guard(self, ctx: RequestContext) -> Verdict:
        """
        Non-raising authorization.

        Any failure, including unexpected faults, becomes a denied Verdict
        whose message is for logs only.
        """
        try:
            return self.assert_authorized(ctx)
        except AuthorizationDenied as denied:
            return Verdict.deny(denied.reason, denied.message)
        except Exception as e:
            logger.exception("webhook_auth_internal_error", error=str(e))
            record_decision(False, DenialReason.INTERNAL_ERROR.value)
            return Verdict.deny(DenialReason.INTERNAL_ERROR, str(e) or type(e).__name__)

    def _run_pipeline(self, ctx: RequestContext) -> None:
        policy = self.policy

        if not policy.enabled:
            raise AuthorizationDenied(DenialReason.DISABLED)
        if not policy.is_configured:
            raise AuthorizationDenied(DenialReason.NOT_CONFIGURED)

        if policy.allowed_sources:
            if not is_ip_allowed(ctx.client_address or "", policy.allowed_sources):
                raise AuthorizationDenied(DenialReason.SOURCE_NOT_ALLOWED)

        names = policy.header_names
        signature = _header(ctx.headers, names.signature)
        ts_raw = _header(ctx.headers, names.timestamp)
        nonce = _header(ctx.headers, names.nonce)
        if not signature or not ts_raw or not nonce:
            raise AuthorizationDenied(DenialReason.MISSING_HEADERS)

        if not is_well_formed_signature(signature, policy.algorithm):
            raise AuthorizationDenied(DenialReason.MALFORMED_SIGNATURE)

        timestamp = self._check_timestamp(ts_raw)

        try:
            nonce_ok = self.ledger.check_and_store(nonce, policy.ttl_seconds)
        except Exception as e:
            logger.error("webhook_nonce_ledger_failed", error=str(e))
            nonce_ok = False
        if not nonce_ok:
            raise AuthorizationDenied(DenialReason.NONCE_REJECTED)

        base = build_base_string(
            CanonicalMode.for_policy(policy.bind_context),
            timestamp,
            nonce,
            ctx.raw_body,
            method=ctx.method,
            target=ctx.request_target,
        )
        if not verify_signature(policy.secret, base, signature, policy.algorithm):
            raise AuthorizationDenied(DenialReason.INVALID_SIGNATURE)

    def _check_timestamp(self, ts_raw: str) -> int:
        try:
            timestamp = int(ts_raw)
        except ValueError:
            raise AuthorizationDenied(DenialReason.TIMESTAMP_OUT_OF_WINDOW) from None

        now = int(self._clock())
        skew = self.policy.clock_skew_seconds
        max_age = self.policy.ttl_seconds + skew

        if timestamp <= 0 or now - timestamp > max_age or timestamp - now > skew:
            raise AuthorizationDenied(DenialReason.TIMESTAMP_OUT_OF_WINDOW)
        return timestamp

    def _log_denial(self, ctx: RequestContext, reason: DenialReason, message: str) -> None:
        log = logger.info if reason is DenialReason.DISABLED else logger.warning
        log(
            "webhook_auth_denied",
            reason=reason.value,
            detail=message,
            client_ip=ctx.client_address,
            method=ctx.method,
        )
