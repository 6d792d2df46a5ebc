from typing import Callable, Dict, List, Optional, Union

import httpx

ResponseFactory = Callable[[httpx.Request], httpx.Response]


class _UnreadStream(httpx.AsyncByteStream):
    """Body stream that is not read at Response construction, like a real transport's."""

    def __init__(self, content: bytes):
        self._content = content

    async def __aiter__(self):
        yield self._content


class ScriptedUpstream:
    """
    Fake upstream web for the proxy's httpx client.

    Each URL is scripted with a response (rebuilt on every call) or an
    exception to raise. Every request that reaches the transport is recorded.
    """

    def __init__(self):
        self.routes: Dict[str, Union[ResponseFactory, Exception]] = {}
        self.calls: List[httpx.Request] = []

    def add(
        self,
        url: str,
        status_code: int = 200,
        headers: Optional[list] = None,
        content: bytes = b"",
    ) -> "ScriptedUpstream":
        self.routes[url] = lambda request: httpx.Response(
            status_code, headers=headers or [], stream=_UnreadStream(content)
        )
        return self

    def fail(self, url: str, exc: Exception) -> "ScriptedUpstream":
        self.routes[url] = exc
        return self

    def redirect_chain(
        self,
        base: str,
        length: int,
        status_code: int = 302,
        final_content: bytes = b'{"done": true}',
    ) -> str:
        """Script ``base/0 -> base/1 -> ... -> base/<length>``; return the first URL."""
        for i in range(length):
            self.add(
                f"{base}/{i}",
                status_code=status_code,
                headers=[("Location", f"{base}/{i + 1}")],
                content=f"hop {i}".encode(),
            )
        self.add(
            f"{base}/{length}",
            headers=[("Content-Type", "application/json")],
            content=final_content,
        )
        return f"{base}/0"

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        scripted = self.routes.get(str(request.url))
        if scripted is None:
            return httpx.Response(404, content=b"not scripted")
        if isinstance(scripted, Exception):
            raise scripted
        return scripted(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.MockTransport(self.handler), follow_redirects=False
        )

    @property
    def called_urls(self) -> List[str]:
        return [str(r.url) for r in self.calls]
