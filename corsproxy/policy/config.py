import logging
import os
from dataclasses import dataclass
from typing import FrozenSet, Mapping, Optional

logger = logging.getLogger("uvicorn.error")

DEFAULT_MAX_REDIRECTS = 5
DEFAULT_CORS_MAX_AGE = 3600
DEFAULT_PROXY_TIMEOUT = 30.0


def _parse_origin_list(raw: Optional[str]) -> FrozenSet[str]:
    if not raw:
        return frozenset()
    return frozenset(o.strip() for o in raw.split(",") if o.strip())


def _parse_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() == "true"


def _parse_int(name: str, raw: Optional[str], default: int, minimum: int = 0) -> int:
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning(f"[Config] Ignoring non-integer {name}={raw!r}, using {default}")
        return default
    if value < minimum:
        logger.warning(f"[Config] Ignoring out-of-range {name}={value}, using {default}")
        return default
    return value


def _parse_float(name: str, raw: Optional[str], default: float) -> float:
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw.strip())
    except ValueError:
        logger.warning(f"[Config] Ignoring non-numeric {name}={raw!r}, using {default}")
        return default
    if value <= 0:
        logger.warning(f"[Config] Ignoring non-positive {name}={value}, using {default}")
        return default
    return value


@dataclass(frozen=True)
class PolicyConfig:
    """
    Process-wide proxy policy, loaded once at startup and never mutated.

    An empty whitelist allows every origin; an empty blacklist blocks none.
    """

    origin_whitelist: FrozenSet[str] = frozenset()
    origin_blacklist: FrozenSet[str] = frozenset()
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    cors_max_age: int = DEFAULT_CORS_MAX_AGE
    allow_unsafe_cert: bool = True
    proxy_timeout: float = DEFAULT_PROXY_TIMEOUT
    lenient_urls: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PolicyConfig":
        env = os.environ if environ is None else environ
        config = cls(
            origin_whitelist=_parse_origin_list(env.get("CORS_WHITELIST")),
            origin_blacklist=_parse_origin_list(env.get("CORS_BLACKLIST")),
            max_redirects=_parse_int(
                "MAX_REDIRECTS", env.get("MAX_REDIRECTS"), DEFAULT_MAX_REDIRECTS
            ),
            cors_max_age=_parse_int(
                "CORS_MAX_AGE", env.get("CORS_MAX_AGE"), DEFAULT_CORS_MAX_AGE
            ),
            allow_unsafe_cert=_parse_bool(env.get("PROXY_ALLOW_UNSAFE_CERT"), True),
            proxy_timeout=_parse_float(
                "PROXY_TIMEOUT", env.get("PROXY_TIMEOUT"), DEFAULT_PROXY_TIMEOUT
            ),
            lenient_urls=_parse_bool(env.get("PROXY_LENIENT_URLS"), False),
        )
        logger.info(
            f"[Config] Loaded policy: whitelist={len(config.origin_whitelist)} origins, "
            f"blacklist={len(config.origin_blacklist)} origins, "
            f"max_redirects={config.max_redirects}, cors_max_age={config.cors_max_age}, "
            f"allow_unsafe_cert={config.allow_unsafe_cert}, lenient_urls={config.lenient_urls}"
        )
        if config.allow_unsafe_cert:
            logger.warning(
                "[Config] Upstream TLS certificate verification is disabled "
                "(PROXY_ALLOW_UNSAFE_CERT=true)"
            )
        return config
