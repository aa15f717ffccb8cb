# /kenuts/domain/errors.py
from __future__ import annotations


class KenutsError(Exception):
    """Base class for every failure the client can report."""

    kind = "error"


class AddressError(KenutsError):
    kind = "invalid_address"


class InvalidScheme(AddressError):
    kind = "invalid_scheme"


class InvalidHost(AddressError):
    kind = "invalid_host"


class InvalidPort(AddressError):
    kind = "invalid_port"

    def __init__(self, raw_port: str) -> None:
        super().__init__(f"invalid port: {raw_port!r}")
        self.raw_port = raw_port


class KenutsConnectionError(KenutsError):
    """Socket-level failure during connect, write or read."""

    kind = "connection_error"

    IO = "io"
    TIMEOUT = "timeout"
    TOO_LARGE = "too_large"

    def __init__(self, message: str, *, reason: str = IO) -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason


class MalformedResponse(KenutsError):
    """The header/body separator never appeared in the response."""

    kind = "malformed_response"


class FetchFailed(Exception):
    """Raised by FetchService.fetch_html with the user-facing message."""

    def __init__(self, message: str, kind: str) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
