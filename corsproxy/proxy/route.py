import asyncio
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from corsproxy.proxy.models import InboundRequest
from corsproxy.proxy.service import ProxyService
from corsproxy.vars import PROXY_BASE_PATH

router = APIRouter()
logger = logging.getLogger("uvicorn.error")

if PROXY_BASE_PATH:
    router.prefix = PROXY_BASE_PATH
    logger.info(f"Using PROXY_BASE_PATH: {PROXY_BASE_PATH}")

DISCONNECT_POLL_INTERVAL = 0.5
CLIENT_CLOSED_REQUEST = 499


def get_proxy_service(request: Request) -> ProxyService:
    return request.app.state.proxy_service


async def _wait_for_disconnect(request: Request) -> None:
    while not await request.is_disconnected():
        await asyncio.sleep(DISCONNECT_POLL_INTERVAL)


async def run_until_disconnected(request: Request, coro) -> Response:
    """
    Run the proxy pipeline, cancelling it (and any upstream call in flight)
    as soon as the client goes away.
    """
    pipeline = asyncio.create_task(coro)
    watcher = asyncio.create_task(_wait_for_disconnect(request))
    try:
        done, _ = await asyncio.wait(
            {pipeline, watcher}, return_when=asyncio.FIRST_COMPLETED
        )
    except asyncio.CancelledError:
        pipeline.cancel()
        watcher.cancel()
        raise

    if pipeline in done:
        watcher.cancel()
        return pipeline.result()

    logger.info(f"[Proxy] Client disconnected, cancelling {request.method} {request.url.path}")
    pipeline.cancel()
    try:
        await pipeline
    except asyncio.CancelledError:
        pass
    return Response(status_code=CLIENT_CLOSED_REQUEST)


@router.api_route("/", methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"])
async def proxy(request: Request, service: ProxyService = Depends(get_proxy_service)):
    """Forward the request to the address in the 'url' query parameter."""
    inbound = await InboundRequest.from_request(request)
    return await run_until_disconnected(request, service.handle(inbound))
