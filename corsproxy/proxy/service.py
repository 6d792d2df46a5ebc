import logging

import httpx
from opentelemetry import trace
from starlette.responses import Response

from corsproxy.policy import OriginPolicy, PolicyConfig
from corsproxy.proxy.cors import CorsHeaderComposer
from corsproxy.proxy.models import InboundRequest
from corsproxy.proxy.request_handler import ProxyRequestHandler
from corsproxy.proxy.response_handler import ProxyResponseHandler
from corsproxy.proxy.target_resolver import TargetResolver
from corsproxy.utils import redact_url
from corsproxy.utils.traced_requests import traced_request

logger = logging.getLogger("uvicorn.error")
tracer = trace.get_tracer(__name__)

URL_PARAM = "url"


def build_http_client(config: PolicyConfig) -> httpx.AsyncClient:
    """Outbound client shared by all requests; redirects are followed by the proxy, not httpx."""
    return httpx.AsyncClient(
        verify=not config.allow_unsafe_cert,
        timeout=httpx.Timeout(config.proxy_timeout),
        follow_redirects=False,
    )


class ProxyService:
    """Runs one inbound request through the forwarding pipeline."""

    def __init__(self, config: PolicyConfig, client: httpx.AsyncClient):
        self.config = config
        self.origin_policy = OriginPolicy(config)
        self.target_resolver = TargetResolver(config)
        self.cors = CorsHeaderComposer(config)
        self.request_handler = ProxyRequestHandler(client)
        self.response_handler = ProxyResponseHandler(
            config, self.request_handler, self.cors, self.target_resolver
        )

    def preflight(self, inbound: InboundRequest) -> Response:
        logger.info("[Proxy] Handling CORS preflight request.")
        response = Response(status_code=200)
        for name, value in self.cors.compose(inbound):
            response.headers.append(name, value)
        return response

    async def handle(self, inbound: InboundRequest) -> Response:
        with traced_request(
            tracer,
            operation="proxy_request",
            start_message=f"[Proxy] Received HTTP request: {inbound.method} {redact_url(inbound.url)}",
            extra_attrs={"proxy.method": inbound.method},
        ) as span:
            self.origin_policy.enforce(inbound.header_values("origin"))

            if inbound.method == "OPTIONS":
                return self.preflight(inbound)

            target = self.target_resolver.resolve(inbound.query_param(URL_PARAM))
            span.set_attribute("proxy.target_url", redact_url(target.url))

            outbound = self.request_handler.build(inbound, target)
            upstream = await self.request_handler.send(outbound)
            response = await self.response_handler.handle(inbound, upstream)
            span.set_attribute("proxy.status_code", response.status_code)
            return response
