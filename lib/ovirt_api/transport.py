from __future__ import annotations

from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Any

import httpx

from .config_types import ClientConfig
from .errors import ResponseReadError, TransportError

USER_AGENT = "ovirt-api-client/0.1.0"


def status_line(response: httpx.Response) -> str:
    reason = response.reason_phrase
    return f"{response.status_code} {reason}" if reason else str(response.status_code)


def _refusing_jar() -> CookieJar:
    # credentials travel only in the headers the authenticator sets
    return CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))


class Transport:
    def __init__(self, cfg: ClientConfig, *, transport: httpx.BaseTransport | None = None):
        self._cfg = cfg
        headers = {"User-Agent": cfg.user_agent or USER_AGENT}

        self._client = httpx.Client(
            timeout=cfg.timeout_s,
            headers=headers,
            verify=not cfg.insecure,
            transport=transport,
            cookies=_refusing_jar(),
        )

    def close(self) -> None:
        self._client.close()

    def send(
            self,
            method: str,
            url: str,
            *,
            headers: dict[str, str] | None = None,
            content: bytes | str | None = None,
            data: dict[str, Any] | None = None,
            auth: tuple[str, str] | None = None,
    ) -> httpx.Response:
        """Send a request and return the response with its body still unread."""
        request = self._client.build_request(method, url, headers=headers, content=content, data=data)
        try:
            return self._client.send(request, auth=auth, stream=True)
        except httpx.RequestError as e:
            raise TransportError(str(e)) from e

    @staticmethod
    def read(response: httpx.Response) -> bytes:
        try:
            return response.read()
        except httpx.HTTPError as e:
            raise ResponseReadError(str(e)) from e
        finally:
            response.close()

    def discard(self, response: httpx.Response) -> bytes:
        """Read what is left of a response we are about to reject, ignoring read failures."""
        try:
            return self.read(response)
        except ResponseReadError:
            return b""
