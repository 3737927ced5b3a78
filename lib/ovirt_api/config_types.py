from __future__ import annotations
from dataclasses import dataclass

from .errors import ConfigError

AUTH_METHODS = ("token", "cookie")


@dataclass(frozen=True)
class ClientConfig:
    base_url: str
    username: str
    password: str
    auth: str = "token"
    insecure: bool = False
    debug: bool = False
    retry_on_unauthorized: bool | None = None
    timeout_s: float = 30.0
    user_agent: str | None = None

    def __post_init__(self) -> None:
        if self.auth not in AUTH_METHODS:
            raise ConfigError(f"unknown auth method {self.auth!r}, expected one of {', '.join(AUTH_METHODS)}")
