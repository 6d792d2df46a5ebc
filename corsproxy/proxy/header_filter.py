from typing import Dict, Iterable, List, Tuple

# Inbound headers that should NOT be forwarded to the target
IGNORED_REQUEST_HEADERS = frozenset(
    {
        "host",
        "connection",
        "accept-encoding",
        "cache-control",
        "postman-token",
        # framing is recomputed by httpx from the forwarded body
        "content-length",
        "transfer-encoding",
    }
)

# Upstream headers that must never reach the browser
STRIPPED_RESPONSE_HEADERS = frozenset(
    {
        "set-cookie",
        "set-cookie2",
        "transfer-encoding",
    }
)


def is_forwardable_request_header(name: str) -> bool:
    return name.lower() not in IGNORED_REQUEST_HEADERS


def is_stripped_response_header(name: str) -> bool:
    return name.lower() in STRIPPED_RESPONSE_HEADERS


def filter_request_headers(
    headers: Iterable[Tuple[str, str]],
) -> List[Tuple[str, str]]:
    """
    Select the inbound headers that are safe to forward upstream.

    Each header name is forwarded once: the first spelling seen wins and all
    values for that name are grouped under it, in arrival order. Values are
    passed through verbatim.
    """
    grouped: Dict[str, Tuple[str, List[str]]] = {}
    for name, value in headers:
        if not is_forwardable_request_header(name):
            continue
        key = name.lower()
        if key not in grouped:
            grouped[key] = (name, [])
        grouped[key][1].append(value)

    return [(name, value) for name, values in grouped.values() for value in values]


def strip_response_headers(
    headers: Iterable[Tuple[str, str]],
) -> List[Tuple[str, str]]:
    return [(name, value) for name, value in headers if not is_stripped_response_header(name)]
