"""
Policy Loader
=============
Builds a validated Policy from a loosely-typed options bag.
"""

from collections.abc import Mapping
from typing import Any, Optional

import structlog

from ..exceptions import ConfigurationError, SecretNotFoundError
from ..ip_utils import normalize_allowed_ips
from ..secret_source import FileSecretSource, ResolvedSecret, SecretSource
from ..signing import HashAlgorithm
from .config import (
    DEFAULT_ALGORITHM,
    DEFAULT_CLOCK_SKEW_SECONDS,
    DEFAULT_HEADER_NONCE,
    DEFAULT_HEADER_SIGNATURE,
    DEFAULT_HEADER_TIMESTAMP,
    DEFAULT_NONCE_DIR,
    DEFAULT_SECRET_FILE,
    DEFAULT_TTL_SECONDS,
)
from .models import HeaderNames, Policy

logger = structlog.get_logger(__name__)

_MISSING = object()


def _get(options: Any, key: str, default: Any = None) -> Any:
    """Read ``key`` from a mapping or attribute bag; None counts as absent."""
    if options is None:
        return default
    if isinstance(options, Mapping):
        value = options.get(key, _MISSING)
    else:
        value = getattr(options, key, _MISSING)
    if value is _MISSING or value is None:
        return default
    return value


def _has(options: Any, key: str) -> bool:
    return _get(options, key, _MISSING) is not _MISSING


def _as_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be an integer.") from None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _load_secret(source: SecretSource) -> Optional[ResolvedSecret]:
    try:
        return source.resolve()
    except SecretNotFoundError as e:
        # Absent secret is only fatal when enabled; checked by the caller
        logger.debug("webhook_secret_not_found", detail=str(e))
        return None


def configure(options: Any = None, secret_source: Optional[SecretSource] = None) -> Policy:
    """
    Validate and normalize webhook auth options into a Policy.

    Recognized keys: enabled, secret_file, nonce_dir, ttl_seconds,
    ttl_clock_skew_tolerance, allowed_ips, algo, bind_context,
    header_signature, header_timestamp, header_nonce.

    The secret is resolved eagerly so a broken secret source fails at
    startup. Required-value checks only fire when ``enabled`` is true.

    Args:
        options: Mapping or object with attributes
        secret_source: Overrides the ``secret_file`` lookup

    Returns:
        Immutable Policy

    Raises:
        ConfigurationError: missing or invalid values while enabled
        SecretError: the secret source exists but is unreadable or malformed
    """
    enabled = _as_bool(_get(options, "enabled", True))
    ttl_seconds = _as_int(_get(options, "ttl_seconds", DEFAULT_TTL_SECONDS), "ttl_seconds")
    clock_skew = _as_int(
        _get(options, "ttl_clock_skew_tolerance", DEFAULT_CLOCK_SKEW_SECONDS),
        "ttl_clock_skew_tolerance",
    )
    bind_context = _as_bool(_get(options, "bind_context", False))
    allowed_sources = tuple(normalize_allowed_ips(_get(options, "allowed_ips", [])))
    nonce_dir = str(_get(options, "nonce_dir", DEFAULT_NONCE_DIR) or "").strip()

    explicit_algo = _has(options, "algo")
    algo_name = str(_get(options, "algo", DEFAULT_ALGORITHM)).strip().lower()

    if secret_source is None:
        secret_source = FileSecretSource(_get(options, "secret_file", DEFAULT_SECRET_FILE))
    resolved = _load_secret(secret_source)

    # Configured algo wins; the source hint only fills in the default
    if not explicit_algo and resolved is not None and resolved.algorithm is not None:
        algo_name = resolved.algorithm.value

    header_names = HeaderNames(
        signature=str(_get(options, "header_signature", DEFAULT_HEADER_SIGNATURE)),
        timestamp=str(_get(options, "header_timestamp", DEFAULT_HEADER_TIMESTAMP)),
        nonce=str(_get(options, "header_nonce", DEFAULT_HEADER_NONCE)),
    )
    secret = resolved.secret if resolved is not None else b""
    algorithm = HashAlgorithm.parse(algo_name)

    if enabled:
        if not secret:
            raise ConfigurationError("Missing HMAC secret (expected via secret_file).")
        if not nonce_dir:
            raise ConfigurationError("Missing nonce_dir.")
        if ttl_seconds < 1:
            raise ConfigurationError("ttl_seconds must be >= 1.")
        if clock_skew < 0:
            raise ConfigurationError("ttl_clock_skew_tolerance must be >= 0.")
        if algorithm is None:
            raise ConfigurationError("Unsupported algo (expected sha256 or sha512).")
    elif algorithm is None:
        logger.warning("webhook_auth_unsupported_algo_ignored", algo=algo_name)
        algorithm = HashAlgorithm.SHA256

    policy = Policy(
        enabled=enabled,
        secret=secret,
        algorithm=algorithm,
        ttl_seconds=ttl_seconds,
        clock_skew_seconds=clock_skew,
        allowed_sources=allowed_sources,
        bind_context=bind_context,
        header_names=header_names,
        nonce_dir=nonce_dir,
    )

    logger.info(
        "webhook_auth_configured",
        enabled=policy.enabled,
        algorithm=policy.algorithm.value,
        ttl_seconds=policy.ttl_seconds,
        clock_skew_seconds=policy.clock_skew_seconds,
        allowed_sources=len(policy.allowed_sources),
        bind_context=policy.bind_context,
    )
    return policy
