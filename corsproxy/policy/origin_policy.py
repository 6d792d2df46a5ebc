import logging
from typing import Iterable, Optional

from corsproxy.policy.config import PolicyConfig
from corsproxy.errors import PolicyViolation

logger = logging.getLogger("uvicorn.error")


class OriginPolicy:
    """Evaluates the caller's Origin header against the configured white- and blacklists."""

    def __init__(self, config: PolicyConfig):
        self.whitelist = config.origin_whitelist
        self.blacklist = config.origin_blacklist

    def is_allowed(self, origin: Optional[str]) -> bool:
        if not self.whitelist:
            return True
        if origin is None:
            return False
        return origin in self.whitelist

    def is_blocked(self, origin: Optional[str]) -> bool:
        if not self.blacklist or origin is None:
            return False
        return origin in self.blacklist

    def enforce(self, origins: Iterable[str]) -> None:
        """
        Raise PolicyViolation unless the request may proceed.

        A request may carry several Origin values; one whitelisted value is
        enough to pass, and one blacklisted value is enough to be refused.
        """
        origins = list(origins)
        if not (any(self.is_allowed(o) for o in origins) or self.is_allowed(None)):
            logger.warning(f"[Origin] Request blocked, origin not in whitelist: {origins}")
            raise PolicyViolation("Origin is not allowed.")
        if any(self.is_blocked(o) for o in origins):
            logger.warning(f"[Origin] Request blocked, origin is blacklisted: {origins}")
            raise PolicyViolation("Origin is explicitly blocked.")
        logger.debug(f"[Origin] Origin validation passed: {origins}")
