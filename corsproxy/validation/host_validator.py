"""
Hostname classification used to vet proxy targets.

The TLD check is deliberately permissive: a short list of generic labels plus
anything shaped like a two-letter country code. It is not a registry lookup.
"""

import ipaddress
import re
from typing import Optional

TLD_PATTERN = re.compile(r"^(?:com|net|org|edu|gov|mil|[a-z]{2})$", re.IGNORECASE)
LABEL_PATTERN = re.compile(r"^[a-z0-9_](?:[a-z0-9_-]{0,61}[a-z0-9_])?$", re.IGNORECASE)


def _strip_brackets(hostname: str) -> str:
    if hostname.startswith("[") and hostname.endswith("]"):
        return hostname[1:-1]
    return hostname


def is_valid_ipv4(hostname: Optional[str]) -> bool:
    if not hostname:
        return False
    try:
        ipaddress.IPv4Address(hostname)
    except ValueError:
        return False
    return True


def is_valid_ipv6(hostname: Optional[str]) -> bool:
    if not hostname:
        return False
    try:
        ipaddress.IPv6Address(_strip_brackets(hostname))
    except ValueError:
        return False
    return True


def has_valid_tld(hostname: Optional[str]) -> bool:
    """Check that every label is well formed and the last one is a known TLD shape."""
    if not hostname:
        return False
    name = hostname[:-1] if hostname.endswith(".") else hostname
    labels = name.split(".")
    if len(labels) < 2:
        return False
    if not all(LABEL_PATTERN.match(label) for label in labels):
        return False
    return bool(TLD_PATTERN.match(labels[-1]))


def is_valid_host(hostname: Optional[str]) -> bool:
    """
    Return True when the hostname is an IPv4 literal, an IPv6 literal or a
    domain name with a recognized top-level label.
    """
    if not hostname:
        return False
    return is_valid_ipv4(hostname) or is_valid_ipv6(hostname) or has_valid_tld(hostname)
