from typing import Iterable, List, Optional, Tuple

from corsproxy.policy.config import PolicyConfig
from corsproxy.proxy.models import InboundRequest

ALLOW_ORIGIN = "Access-Control-Allow-Origin"
ALLOW_METHODS = "Access-Control-Allow-Methods"
ALLOW_HEADERS = "Access-Control-Allow-Headers"
MAX_AGE = "Access-Control-Max-Age"
EXPOSE_HEADERS = "Access-Control-Expose-Headers"

REQUEST_METHOD = "access-control-request-method"
REQUEST_HEADERS = "access-control-request-headers"


class CorsHeaderComposer:
    """
    Computes the CORS headers for a client-facing response.

    Origin restriction is enforced by OriginPolicy before anything reaches
    this point, so the browser is always told ``*``.

    Call ``compose`` only once every other client header is known: the
    exposed-headers list is derived from those names.
    """

    def __init__(self, config: PolicyConfig):
        self.max_age = config.cors_max_age

    def preflight_headers(self, inbound: InboundRequest) -> List[Tuple[str, str]]:
        headers = [(ALLOW_ORIGIN, "*")]
        if inbound.method != "OPTIONS":
            return headers

        requested_method: Optional[str] = inbound.header(REQUEST_METHOD)
        if requested_method:
            headers.append((ALLOW_METHODS, requested_method))
        requested_headers: Optional[str] = inbound.header(REQUEST_HEADERS)
        if requested_headers:
            headers.append((ALLOW_HEADERS, requested_headers))
        if self.max_age and self.max_age > 0:
            headers.append((MAX_AGE, str(self.max_age)))
        return headers

    def compose(
        self,
        inbound: InboundRequest,
        client_headers: Iterable[Tuple[str, str]] = (),
    ) -> List[Tuple[str, str]]:
        """Return the CORS headers to add on top of ``client_headers``."""
        cors_headers = self.preflight_headers(inbound)

        exposed: List[str] = []
        seen = set()
        for name, _ in [*cors_headers, *client_headers]:
            key = name.lower()
            if key in seen or key == EXPOSE_HEADERS.lower():
                continue
            seen.add(key)
            exposed.append(name)

        cors_headers.append((EXPOSE_HEADERS, ",".join(exposed)))
        return cors_headers
