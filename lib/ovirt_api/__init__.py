from .client import OvirtClient, connect
from .config_types import ClientConfig
from .errors import (
    AuthError,
    ClientClosedError,
    ConfigError,
    OvirtClientError,
    ParseError,
    RequestError,
    ResponseReadError,
    TransportError,
)
from .logging_ import setup_logging

__all__ = [
    "OvirtClient",
    "connect",
    "ClientConfig",
    "AuthError",
    "ClientClosedError",
    "ConfigError",
    "OvirtClientError",
    "ParseError",
    "RequestError",
    "ResponseReadError",
    "TransportError",
    "setup_logging",
]
