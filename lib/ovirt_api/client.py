from __future__ import annotations

import logging
import threading
from typing import Any

import httpx

from .auth import Authenticator, make_authenticator
from .config_types import ClientConfig
from .errors import AuthError, ClientClosedError, OvirtClientError, RequestError
from .errors_utils import format_fault, parse_fault
from .transport import Transport, status_line
from .unmarshal import unmarshal

LOGGER_NAME = "ovirt_api"


def join_url(base_url: str, path: str) -> str:
    return base_url.strip("/") + "/" + path.strip("/")


class OvirtClient:
    """
    Authenticated client for the engine REST API.

    The client authenticates while it is constructed, so an instance always
    holds a session credential. A 401 answer triggers at most one
    re-authentication followed by one retry when the policy allows it.
    """

    def __init__(
            self,
            cfg: ClientConfig,
            *,
            logger: logging.Logger | None = None,
            transport: httpx.BaseTransport | None = None,
            authenticator: Authenticator | None = None,
    ):
        self._cfg = cfg
        self._log = logger or logging.getLogger(LOGGER_NAME)
        self._t = Transport(cfg, transport=transport)
        self._auth = authenticator or make_authenticator(cfg, self._log)
        self._auth_lock = threading.Lock()
        self._closed = False

        if cfg.retry_on_unauthorized is None:
            self._retry_on_unauthorized = self._auth.retry_on_unauthorized
        else:
            self._retry_on_unauthorized = cfg.retry_on_unauthorized

        try:
            self._auth.authenticate(self._t)
        except Exception:
            self._t.close()
            raise

    def __enter__(self) -> OvirtClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def config(self) -> ClientConfig:
        return self._cfg

    @property
    def closed(self) -> bool:
        return self._closed

    def authenticate(self) -> None:
        """Obtain a fresh session credential, replacing the current one."""
        self._ensure_open()
        with self._auth_lock:
            self._auth.authenticate(self._t)

    def get(self, path: str) -> bytes:
        return self.send_request(path, "GET")

    def get_and_parse(self, path: str, model: Any = None) -> Any:
        return self.send_and_parse(path, model, "GET")

    def send_and_parse(self, path: str, model: Any = None, method: str = "GET", body: bytes | str | None = None) -> Any:
        data = self.send_request(path, method, body)
        return unmarshal(data, model)

    def send_request(self, path: str, method: str = "GET", body: bytes | str | None = None) -> bytes:
        self._ensure_open()
        return self._send(path, method, body, reauth=self._retry_on_unauthorized)

    def close(self) -> None:
        """Ask the engine to release the session. Failures are ignored."""
        if self._closed:
            return
        self._closed = True
        try:
            resp = self._t.send("HEAD", self._cfg.base_url, auth=(self._cfg.username, self._cfg.password))
            self._t.discard(resp)
        except Exception as e:
            self._log.debug("ignoring error while closing session: %s", e)
        finally:
            self._t.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise ClientClosedError("client is closed")

    def _send(self, path: str, method: str, body: bytes | str | None, *, reauth: bool) -> bytes:
        uri = join_url(self._cfg.base_url, path)
        used_credential = self._auth.credential
        headers = self._auth.apply({})
        self._log.debug("%s %s", method, uri)

        resp = self._t.send(method, uri, headers=headers, content=body)

        if resp.status_code == 401 and reauth:
            self._t.discard(resp)
            try:
                self._reauthenticate(used_credential)
            except OvirtClientError as e:
                self._log.debug("re-authentication failed: %s", e)
                raise self._status_error(resp, b"") from e
            return self._send(path, method, body, reauth=False)

        if resp.status_code >= 300:
            raise self._status_error(resp, self._t.discard(resp))

        data = self._t.read(resp)

        self._log.info("Status Code: %s", status_line(resp))
        if self._cfg.debug:
            self._log.debug("Response: %s", data.decode("utf-8", errors="replace"))

        return data

    def _reauthenticate(self, used_credential: str) -> None:
        with self._auth_lock:
            if self._auth.credential != used_credential:
                # refreshed by another caller while our request was in flight
                return
            self._auth.authenticate(self._t)

    @staticmethod
    def _status_error(resp: httpx.Response, body: bytes) -> RequestError:
        details = format_fault(parse_fault(body))
        if resp.status_code in (401, 403):
            return AuthError(resp.status_code, status_line(resp), details)
        return RequestError(resp.status_code, status_line(resp), details)


def connect(
        url: str,
        username: str,
        password: str,
        *,
        auth: str = "token",
        insecure: bool = False,
        debug: bool = False,
        retry_on_unauthorized: bool | None = None,
        logger: logging.Logger | None = None,
) -> OvirtClient:
    cfg = ClientConfig(
        base_url=url,
        username=username,
        password=password,
        auth=auth,
        insecure=insecure,
        debug=debug,
        retry_on_unauthorized=retry_on_unauthorized,
    )
    return OvirtClient(cfg, logger=logger)
