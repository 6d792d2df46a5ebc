import logging
from typing import List, Optional, Tuple
from urllib.parse import urljoin

from starlette.responses import Response

from corsproxy.errors import BadTarget
from corsproxy.policy.config import PolicyConfig
from corsproxy.proxy.cors import CorsHeaderComposer
from corsproxy.proxy.header_filter import strip_response_headers
from corsproxy.proxy.models import InboundRequest, OutboundRequest, OutboundResponse
from corsproxy.proxy.request_handler import ProxyRequestHandler
from corsproxy.proxy.target_resolver import TargetResolver
from corsproxy.utils import redact_url

logger = logging.getLogger("uvicorn.error")

REDIRECT_HEADER = "X-CORS-Redirect"
REQUEST_URL_HEADER = "X-Request-URL"
FINAL_URL_HEADER = "X-Final-URL"
DEFAULT_CONTENT_TYPE = "application/json"

# Set by the proxy itself, so the upstream copy is dropped
PROXY_OWNED_HEADERS = frozenset(
    {
        "content-type",
        "content-length",
        REDIRECT_HEADER.lower(),
        REQUEST_URL_HEADER.lower(),
        FINAL_URL_HEADER.lower(),
        "access-control-allow-origin",
        "access-control-allow-methods",
        "access-control-allow-headers",
        "access-control-max-age",
        "access-control-expose-headers",
    }
)


class ProxyResponseHandler:
    """
    Follows upstream redirects and turns the final upstream response into the
    client response.

    The redirect count travels as an argument through the recursion, so one
    handler instance can serve any number of concurrent requests.
    """

    def __init__(
        self,
        config: PolicyConfig,
        request_handler: ProxyRequestHandler,
        cors: CorsHeaderComposer,
        target_resolver: TargetResolver,
    ):
        self.max_redirects = config.max_redirects
        self.request_handler = request_handler
        self.cors = cors
        self.target_resolver = target_resolver

    async def handle(
        self,
        inbound: InboundRequest,
        upstream: OutboundResponse,
        redirect_count: int = 0,
        redirects: Tuple[str, ...] = (),
        request_url: Optional[str] = None,
    ) -> Response:
        request_url = request_url or upstream.url

        if upstream.is_redirect:
            raw_location = upstream.header("location")
            try:
                location = urljoin(upstream.url, raw_location)
            except ValueError:
                logger.warning(
                    f"[Redirect] Unparseable Location on {upstream.status_code} "
                    f"from {redact_url(upstream.url)}"
                )
                redirects = redirects + (f"{upstream.status_code} {raw_location}",)
                return self.build_client_response(inbound, upstream, redirects, request_url)
            redirects = redirects + (f"{upstream.status_code} {location}",)

            if redirect_count < self.max_redirects and self._followable(location):
                logger.info(
                    f"[Redirect] Following {upstream.status_code} to {redact_url(location)} "
                    f"({redirect_count + 1}/{self.max_redirects})"
                )
                followed = await self.request_handler.send(
                    OutboundRequest(method="GET", url=location)
                )
                return await self.handle(
                    inbound, followed, redirect_count + 1, redirects, request_url
                )

            logger.info(
                f"[Redirect] Not following {upstream.status_code} to {redact_url(location)} "
                f"after {redirect_count} redirects"
            )

        return self.build_client_response(inbound, upstream, redirects, request_url)

    def _followable(self, location: str) -> bool:
        try:
            self.target_resolver.resolve(location)
        except BadTarget:
            return False
        return True

    def build_client_response(
        self,
        inbound: InboundRequest,
        upstream: OutboundResponse,
        redirects: Tuple[str, ...] = (),
        request_url: Optional[str] = None,
    ) -> Response:
        # Phase one: everything destined for the client except CORS
        headers: List[Tuple[str, str]] = [
            (name, value)
            for name, value in strip_response_headers(upstream.headers)
            if name.lower() not in PROXY_OWNED_HEADERS
        ]
        headers.append(("Content-Type", upstream.content_type or DEFAULT_CONTENT_TYPE))
        headers.extend((REDIRECT_HEADER, redirect) for redirect in redirects)
        headers.append((REQUEST_URL_HEADER, redact_url(request_url or upstream.url)))
        headers.append((FINAL_URL_HEADER, redact_url(upstream.url)))

        # Phase two: CORS headers, exposing the complete set from phase one
        headers = self.cors.compose(inbound, headers) + headers

        response = Response(content=upstream.content, status_code=upstream.status_code)
        for name, value in headers:
            response.headers.append(name, value)
        return response
