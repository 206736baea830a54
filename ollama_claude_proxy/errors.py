"""
Error taxonomy for the proxy.

Every error carries the HTTP status it is surfaced with, and its message
names the kind of failure so an operator can tell them apart in a response
body or a log line.
"""
from typing import Optional


class GatewayError(Exception):
    """Base class for all proxy errors."""
    status_code: int = 500
    kind: str = "gateway error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class BadRequestError(GatewayError):
    """The inbound request could not be read or parsed."""
    status_code = 400
    kind = "bad request"


class TransportError(GatewayError):
    """The provider call could not complete (DNS, refused connection, timeout).

    Safe for the caller to retry.
    """
    status_code = 502
    kind = "transport error"

    def __init__(self, message: str, timed_out: bool = False):
        super().__init__(message)
        self.timed_out = timed_out
        if timed_out:
            self.status_code = 504
            self.kind = "timeout"


class ProviderError(GatewayError):
    """The provider answered with a non-success HTTP status."""
    status_code = 502
    kind = "provider error"

    def __init__(self, provider_status: int, body: str):
        super().__init__(f"provider returned status {provider_status}: {body}")
        self.provider_status = provider_status
        self.body = body


class DecodeError(GatewayError):
    """The provider answered 2xx but the body did not match the expected schema."""
    status_code = 500
    kind = "decode error"

    def __init__(self, message: str, body: Optional[str] = None):
        super().__init__(message)
        self.body = body


class ConfigError(GatewayError):
    """Settings are missing or invalid. Fatal at startup."""
    kind = "configuration error"
