import logging

import httpx
from opentelemetry import trace

from corsproxy.errors import UpstreamUnreachable
from corsproxy.proxy.header_filter import filter_request_headers
from corsproxy.proxy.models import InboundRequest, OutboundRequest, OutboundResponse
from corsproxy.proxy.target_resolver import TargetDescriptor
from corsproxy.utils import redact_url
from corsproxy.utils.exception_logging import format_exception_message
from corsproxy.utils.traced_requests import traced_request

logger = logging.getLogger("uvicorn.error")
tracer = trace.get_tracer(__name__)

BODY_METHODS = frozenset({"POST", "PUT", "DELETE"})


class ProxyRequestHandler:
    """
    Builds outbound requests from the client request and sends them upstream.

    Every call is a single attempt: transport failures surface as
    UpstreamUnreachable and are never retried.
    """

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    def build(self, inbound: InboundRequest, target: TargetDescriptor) -> OutboundRequest:
        headers = tuple(filter_request_headers(inbound.headers))
        body = inbound.body if inbound.method in BODY_METHODS and inbound.body else None
        logger.debug(
            f"[Proxy] Forwarding headers: {','.join(name for name, _ in headers)}"
        )
        return OutboundRequest(
            method=inbound.method,
            url=target.url,
            headers=headers,
            body=body,
        )

    async def send(self, outbound: OutboundRequest) -> OutboundResponse:
        with traced_request(
            tracer,
            operation="upstream_call",
            start_message=f"[Proxy] Sending {outbound.method} {redact_url(outbound.url)}",
            extra_attrs={
                "proxy.method": outbound.method,
                "proxy.target_url": outbound.url,
            },
        ) as span:
            try:
                request = self.client.build_request(
                    outbound.method,
                    outbound.url,
                    headers=list(outbound.headers),
                    content=outbound.body,
                )
                response = await self.client.send(request, stream=True)
                try:
                    # raw bytes: the body is relayed exactly as the upstream encoded it
                    content = b"".join([chunk async for chunk in response.aiter_raw()])
                finally:
                    await response.aclose()
            except httpx.TimeoutException as e:
                logger.error(f"[Proxy] Timeout calling {redact_url(outbound.url)}: {e!r}")
                span.set_attribute("proxy.error", "timeout")
                raise UpstreamUnreachable(
                    f"Failed to connect to the target server.\n{format_exception_message(e)}"
                )
            except (httpx.TransportError, httpx.InvalidURL) as e:
                logger.error(f"[Proxy] Failed to connect to {redact_url(outbound.url)}: {e!r}")
                span.set_attribute("proxy.error", "connection_failed")
                raise UpstreamUnreachable(
                    f"Failed to connect to the target server.\n{format_exception_message(e)}"
                )

            span.set_attribute("proxy.status_code", response.status_code)
            logger.info(
                f"[Proxy] Response status from {redact_url(outbound.url)}: {response.status_code}"
            )
            return OutboundResponse(
                status_code=response.status_code,
                url=str(response.request.url),
                headers=tuple(response.headers.multi_items()),
                content=content,
                content_type=response.headers.get("content-type"),
            )
