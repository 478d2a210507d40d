"""
Webhook Auth Metrics
====================
Prometheus counters for gate decisions.
"""

from prometheus_client import CollectorRegistry, Counter, generate_latest

# Custom registry for webhook auth metrics
WEBHOOK_AUTH_REGISTRY = CollectorRegistry()

WEBHOOK_AUTH_DECISIONS = Counter(
    name="webhook_auth_decisions_total",
    documentation="Webhook authorization decisions by outcome and denial reason",
    labelnames=["decision", "reason"],
    registry=WEBHOOK_AUTH_REGISTRY,
)


def record_decision(authorized: bool, reason: str = "") -> None:
    """
    Record one gate evaluation.
    
    Args:
        authorized: Whether the request passed every step
        reason: Denial reason code ("" when authorized)
    """
    WEBHOOK_AUTH_DECISIONS.labels(
        decision="allow" if authorized else "deny",
        reason=reason or "none",
    ).inc()


def get_metrics_text() -> bytes:
    """Get metrics in Prometheus text format."""
    return generate_latest(WEBHOOK_AUTH_REGISTRY)
