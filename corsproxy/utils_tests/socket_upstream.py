import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Dict, List, Optional, Tuple


class SocketUpstream:
    """
    Upstream listening on a real local socket, for tests that need the full
    httpx/h11 wire path instead of a mock transport.

    Every path answers with the same scripted status, headers and body. The
    method, path, headers and body of each request received are recorded.
    """

    def __init__(
        self,
        status_code: int = 200,
        headers: Optional[List[Tuple[str, str]]] = None,
        content: bytes = b"ok",
    ):
        self.status_code = status_code
        self.headers = headers or [("Content-Type", "text/plain")]
        self.content = content
        self.received: List[Dict] = []
        self._server: Optional[ThreadingHTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def url(self) -> str:
        host, port = self._server.server_address[:2]
        return f"http://{host}:{port}"

    def _handler_class(self):
        upstream = self

        class Handler(BaseHTTPRequestHandler):
            def _answer(self):
                length = int(self.headers.get("Content-Length") or 0)
                upstream.received.append(
                    {
                        "method": self.command,
                        "path": self.path,
                        "headers": dict(self.headers.items()),
                        "body": self.rfile.read(length) if length else b"",
                    }
                )
                self.send_response(upstream.status_code)
                for name, value in upstream.headers:
                    self.send_header(name, value)
                self.send_header("Content-Length", str(len(upstream.content)))
                self.end_headers()
                self.wfile.write(upstream.content)

            do_GET = do_POST = do_PUT = do_DELETE = _answer

            def log_message(self, format, *args):
                pass

        return Handler

    def __enter__(self) -> "SocketUpstream":
        self._server = ThreadingHTTPServer(("127.0.0.1", 0), self._handler_class())
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()
        return self

    def __exit__(self, *exc_info):
        self._server.shutdown()
        self._server.server_close()
        self._thread.join(timeout=5)
