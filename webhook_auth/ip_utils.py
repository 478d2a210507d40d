"""
IP Utility Functions
====================
Source address allow-list matching (exact addresses and IPv4 CIDR blocks).
"""

import ipaddress
from typing import Iterable, List, Optional, Sequence


def normalize_allowed_ips(raw) -> List[str]:
    """
    Normalize an allow-list option to a list of non-empty strings.

    Accepts a single string or an iterable. Only str and int entries are
    kept (bools are rejected); anything else is dropped silently.
    """
    if raw is None:
        return []
    if isinstance(raw, (str, int)) and not isinstance(raw, bool):
        raw = [raw]
    elif not isinstance(raw, Iterable) or isinstance(raw, (bytes, dict)):
        return []

    allowed = []
    for item in raw:
        if isinstance(item, bool) or not isinstance(item, (str, int)):
            continue
        value = str(item).strip()
        if value:
            allowed.append(value)
    return allowed


def _parse_ipv4(value: str) -> Optional[ipaddress.IPv4Address]:
    try:
        return ipaddress.IPv4Address(value)
    except ValueError:
        return None


def _cidr_match(client: ipaddress.IPv4Address, entry: str) -> bool:
    network, sep, bits = entry.partition("/")
    if not sep:
        return False

    try:
        prefix_length = int(bits)
    except ValueError:
        return False
    if prefix_length < 1 or prefix_length > 32:
        return False

    network_address = _parse_ipv4(network)
    if network_address is None:
        return False

    mask = (0xFFFFFFFF << (32 - prefix_length)) & 0xFFFFFFFF
    return (int(client) & mask) == (int(network_address) & mask)


def is_ip_allowed(client_ip: str, allowed: Sequence[str]) -> bool:
    """
    Check if a client address is covered by an allow-list.

    Exact string matches are checked first. Then each "network/prefix"
    entry with a prefix of 1..32 is compared using an IPv4 bitmask.
    Malformed, out-of-range and IPv6 entries are skipped, not errors.

    Args:
        client_ip: Client address as reported by the transport
        allowed: Exact addresses and IPv4 CIDR blocks

    Returns:
        True if allowed
    """
    if not client_ip:
        return False

    if client_ip in allowed:
        return True

    client = _parse_ipv4(client_ip)
    if client is None:
        return False

    return any(
        _cidr_match(client, entry)
        for entry in allowed
        if isinstance(entry, str)
    )
