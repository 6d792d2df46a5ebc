from dataclasses import dataclass
from typing import List, Optional, Tuple

from starlette.requests import Request

HeaderList = Tuple[Tuple[str, str], ...]


def _values(headers, name: str) -> List[str]:
    key = name.lower()
    return [value for header_name, value in headers if header_name.lower() == key]


@dataclass(frozen=True)
class InboundRequest:
    """Snapshot of the client request; never mutated while it is being proxied."""

    method: str
    url: str
    headers: HeaderList = ()
    query: Tuple[Tuple[str, str], ...] = ()
    body: Optional[bytes] = None

    def header(self, name: str) -> Optional[str]:
        values = _values(self.headers, name)
        return values[0] if values else None

    def header_values(self, name: str) -> List[str]:
        return _values(self.headers, name)

    def query_param(self, name: str) -> Optional[str]:
        for key, value in self.query:
            if key == name:
                return value
        return None

    @classmethod
    async def from_request(cls, request: Request) -> "InboundRequest":
        body = await request.body()
        return cls(
            method=request.method.upper(),
            url=str(request.url),
            headers=tuple(request.headers.items()),
            query=tuple(request.query_params.multi_items()),
            body=body or None,
        )


@dataclass(frozen=True)
class OutboundRequest:
    method: str
    url: str
    headers: HeaderList = ()
    body: Optional[bytes] = None


@dataclass(frozen=True)
class OutboundResponse:
    status_code: int
    url: str
    headers: HeaderList = ()
    content: bytes = b""
    content_type: Optional[str] = None

    def header(self, name: str) -> Optional[str]:
        values = _values(self.headers, name)
        return values[0] if values else None

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status_code < 400 and bool(self.header("location"))
