import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from corsproxy.errors import BadTarget
from corsproxy.policy.config import PolicyConfig
from corsproxy.validation import is_valid_host

logger = logging.getLogger("uvicorn.error")

ALLOWED_SCHEMES = ("http", "https")

# protocol, host[:port], hostname, port, path-and-query
PARTIAL_URL_PATTERN = re.compile(
    r"^(?:(https?:)?//)?(([^/?]+?)(?::(\d{0,5})(?=[/?]|$))?)([/?][\s\S]*|$)",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class TargetDescriptor:
    scheme: str
    host: str
    port: Optional[int]
    path_and_query: str
    url: str


def normalize_partial_url(raw: str) -> Optional[str]:
    """
    Turn a schemeless address like ``example.com:443/x`` into an absolute URL.

    The scheme is inferred from an explicit port: 443 means https, anything
    else means http. Returns None when the input cannot be made absolute.
    """
    match = PARTIAL_URL_PATTERN.match(raw)
    if not match:
        return None
    protocol, port = match.group(1), match.group(4)
    if protocol:
        return raw
    if re.match(r"^https?:", raw, re.IGNORECASE):
        # "http:/x" and friends: a scheme without an authority
        return None
    if not raw.startswith("//"):
        raw = "//" + raw
    return ("https:" if port == "443" else "http:") + raw


class TargetResolver:
    """Parses and validates the 'url' query parameter into a TargetDescriptor."""

    def __init__(self, config: PolicyConfig):
        self.lenient = config.lenient_urls

    def resolve(self, raw: Optional[str]) -> TargetDescriptor:
        if raw is None or raw.strip() == "":
            logger.warning("[Target] Missing or empty 'url' parameter in the request.")
            raise BadTarget("Please provide a valid 'url' query parameter.")

        raw = raw.strip()
        candidate = raw
        if self.lenient and "://" not in raw:
            candidate = normalize_partial_url(raw)
            if candidate is None:
                logger.warning(f"[Target] Could not normalize URL: {raw}")
                raise BadTarget("Invalid URL format.")
            logger.debug(f"[Target] Normalized {raw} -> {candidate}")

        try:
            parts = urlsplit(candidate)
            hostname = parts.hostname
            port = parts.port
        except ValueError as e:
            logger.warning(f"[Target] Invalid URL format: {raw} ({e})")
            raise BadTarget("Invalid URL format.")

        if not parts.scheme or not parts.netloc or not hostname:
            logger.warning(f"[Target] Invalid URL format: {raw}")
            raise BadTarget("Invalid URL format.")

        scheme = parts.scheme.lower()
        if scheme not in ALLOWED_SCHEMES:
            logger.warning(f"[Target] Unsupported scheme {scheme!r} in {raw}")
            raise BadTarget(f"Unsupported URL scheme: {scheme}")

        if not is_valid_host(hostname):
            logger.warning(f"[Target] Host validation failed: {hostname}")
            raise BadTarget(f"Invalid host: {hostname}")

        path_and_query = parts.path or "/"
        if parts.query:
            path_and_query = f"{path_and_query}?{parts.query}"

        logger.info(f"[Target] Target URL validated. Host: {hostname}, Scheme: {scheme}")
        return TargetDescriptor(
            scheme=scheme,
            host=hostname,
            port=port,
            path_and_query=path_and_query,
            url=candidate,
        )
