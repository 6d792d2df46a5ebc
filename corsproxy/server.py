import logging
from contextlib import asynccontextmanager
from typing import Sequence

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SpanExporter,
    SpanExportResult,
)
from prometheus_client import Info
from prometheus_fastapi_instrumentator import Instrumentator

from corsproxy.errors import ProxyError
from corsproxy.policy import PolicyConfig
from corsproxy.proxy.cors import ALLOW_ORIGIN
from corsproxy.proxy.route import router
from corsproxy.proxy.service import ProxyService, build_http_client
from corsproxy.utils.exception_logging import log_exception_with_details
from corsproxy.vars import LOG_LEVEL, OTLP_ENDPOINT, OTLP_HEADERS, SERVICE_NAME

logger = logging.getLogger("uvicorn.error")
if LOG_LEVEL:
    logger.setLevel(LOG_LEVEL.upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    policy = PolicyConfig.from_env()
    http_client = build_http_client(policy)
    app.state.proxy_service = ProxyService(policy, http_client)
    logger.info(f"[Server] {SERVICE_NAME} ready")
    try:
        yield
    finally:
        await http_client.aclose()


app = FastAPI(lifespan=lifespan)
instrumentator = Instrumentator()

instrumentator.instrument(app).expose(app)


class FilteringSpanExporter(SpanExporter):
    """
    Wrapper exporter that drops the per-chunk ASGI body spans so each proxied
    request shows up as one readable trace.
    """

    def __init__(self, exporter: SpanExporter):
        self.exporter = exporter

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        filtered_spans = [
            span
            for span in spans
            if not (
                span.attributes
                and span.attributes.get("asgi.event.type") == "http.response.body"
            )
        ]
        if filtered_spans:
            return self.exporter.export(filtered_spans)
        return SpanExportResult.SUCCESS

    def shutdown(self):
        return self.exporter.shutdown()

    def force_flush(self, timeout_millis: int = 30000):
        return self.exporter.force_flush(timeout_millis)


trace.set_tracer_provider(
    TracerProvider(resource=Resource.create({"service.name": SERVICE_NAME}))
)
tracer_provider = trace.get_tracer_provider()
if OTLP_ENDPOINT:
    otlp_exporter = OTLPSpanExporter(
        endpoint=OTLP_ENDPOINT,
        headers=OTLP_HEADERS or None,
    )
    tracer_provider.add_span_processor(
        BatchSpanProcessor(FilteringSpanExporter(otlp_exporter))
    )

FastAPIInstrumentor.instrument_app(app)

app_info = Info("fastapi_app_info", "Application Info")
app_info.info({"app_name": SERVICE_NAME})


@app.exception_handler(ProxyError)
async def proxy_error_handler(request: Request, exc: ProxyError):
    return PlainTextResponse(
        exc.message, status_code=exc.status_code, headers={ALLOW_ORIGIN: "*"}
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    log_exception_with_details(logger, "[Proxy]", exc)
    return PlainTextResponse(
        "Internal server error", status_code=500, headers={ALLOW_ORIGIN: "*"}
    )


app.include_router(router)
