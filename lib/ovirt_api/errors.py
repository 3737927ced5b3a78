from __future__ import annotations


class OvirtClientError(Exception):
    """Base client error."""


class TransportError(OvirtClientError):
    """Transport/network layer error."""


class ResponseReadError(OvirtClientError):
    """Response body could not be read."""


class ParseError(OvirtClientError):
    """Response body does not have the expected shape."""


class ConfigError(OvirtClientError):
    pass


class ClientClosedError(OvirtClientError):
    """Raised for any request made after close()."""


class RequestError(OvirtClientError):
    def __init__(self, status_code: int | None, message: str, details: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class AuthError(RequestError):
    """Auth-related API error."""
