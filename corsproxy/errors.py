class ProxyError(Exception):
    """Base exception for failures that end a proxied request with a plain-text response."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class PolicyViolation(ProxyError):
    """Raised when the calling origin is not whitelisted or is blacklisted."""

    status_code = 403


class BadTarget(ProxyError):
    """Raised when the 'url' parameter is missing, unparsable or names a disallowed host."""

    status_code = 400


class UpstreamUnreachable(ProxyError):
    """Raised when the outbound call fails at the transport level."""

    status_code = 502
