"""
Authentication strategies for the engine API.

An authenticator obtains a session credential from the engine and attaches it
to every resource request. Two strategies exist:

* ``TokenAuth``: SSO OAuth password grant, sends ``Authorization: Bearer``.
* ``CookieAuth``: HTTP Basic with ``Prefer: persistent-auth``, sends the
  session cookie back.
"""
from __future__ import annotations

import json
import logging

from .config_types import ClientConfig
from .errors import AuthError, ParseError
from .transport import Transport, status_line

SSO_TOKEN_PATH = "/sso/oauth/token"
SSO_SCOPE = "ovirt-app-api"

XML_CONTENT_TYPE = "application/xml"


def sso_token_url(base_url: str) -> str:
    """Token endpoint for an API root, e.g. ``https://e/ovirt-engine/api`` -> ``https://e/ovirt-engine/sso/oauth/token``."""
    root = base_url.rstrip("/")
    if root.endswith("/api"):
        root = root[: -len("/api")]
    return root + SSO_TOKEN_PATH


class Authenticator:
    retry_on_unauthorized = False

    def __init__(self, cfg: ClientConfig, logger: logging.Logger):
        self._cfg = cfg
        self._log = logger
        self._credential = ""

    @property
    def credential(self) -> str:
        return self._credential

    def authenticate(self, transport: Transport) -> None:
        raise NotImplementedError

    def apply(self, headers: dict[str, str]) -> dict[str, str]:
        raise NotImplementedError


class TokenAuth(Authenticator):
    retry_on_unauthorized = True

    def authenticate(self, transport: Transport) -> None:
        url = sso_token_url(self._cfg.base_url)
        payload = {
            "grant_type": "password",
            "scope": SSO_SCOPE,
            "username": self._cfg.username,
            "password": self._cfg.password,
        }
        resp = transport.send(
            "POST",
            url,
            headers={"Accept": "application/json"},
            data=payload,
        )
        body = transport.read(resp)

        try:
            data = json.loads(body)
        except ValueError as e:
            if resp.status_code != 200:
                raise AuthError(resp.status_code, status_line(resp)) from e
            raise ParseError(f"SSO response from {url} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            if resp.status_code != 200:
                raise AuthError(resp.status_code, status_line(resp))
            raise ParseError(f"SSO response from {url} is not a JSON object")

        sso_error = str(data.get("error") or "")
        if sso_error:
            raise AuthError(resp.status_code, sso_error, str(data.get("error_code") or "") or None)

        if resp.status_code != 200:
            raise AuthError(resp.status_code, status_line(resp))

        token = data.get("access_token")
        if not isinstance(token, str) or not token:
            raise AuthError(resp.status_code, "SSO response carried no access token")

        self._credential = token
        self._log.debug("authenticated as %s via SSO", self._cfg.username)

    def apply(self, headers: dict[str, str]) -> dict[str, str]:
        headers["Content-Type"] = XML_CONTENT_TYPE
        headers["Accept"] = XML_CONTENT_TYPE
        headers["Authorization"] = f"Bearer {self._credential}"
        return headers


class CookieAuth(Authenticator):
    def authenticate(self, transport: Transport) -> None:
        resp = transport.send(
            "HEAD",
            self._cfg.base_url,
            headers={"Prefer": "persistent-auth"},
            auth=(self._cfg.username, self._cfg.password),
        )
        transport.discard(resp)

        if resp.status_code != 200:
            raise AuthError(resp.status_code, status_line(resp))

        set_cookie = resp.headers.get("Set-Cookie") or ""
        cookie = set_cookie.split(";", 1)[0].strip()
        if not cookie:
            raise AuthError(resp.status_code, "engine did not issue a session cookie")

        self._credential = cookie
        self._log.debug("authenticated as %s with persistent-auth cookie", self._cfg.username)

    def apply(self, headers: dict[str, str]) -> dict[str, str]:
        headers["Content-Type"] = XML_CONTENT_TYPE
        headers["Prefer"] = "persistent-auth"
        headers["Cookie"] = self._credential
        return headers


def make_authenticator(cfg: ClientConfig, logger: logging.Logger) -> Authenticator:
    if cfg.auth == "cookie":
        return CookieAuth(cfg, logger)
    return TokenAuth(cfg, logger)
