from __future__ import annotations

from typing import Callable

import httpx
import pytest

API_URL = "https://engine.example.test/ovirt-engine/api"
TOKEN_URL = "https://engine.example.test/ovirt-engine/sso/oauth/token"


class FakeEngine:
    """Minimal engine double served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.api_url = API_URL
        self.token_url = TOKEN_URL
        self.tokens = ["token-1", "token-2", "token-3"]
        self.sso_status = 200
        self.sso_body: dict | None = None
        self.head_status = 200
        self.set_cookie = "JSESSIONID=session-1; Path=/ovirt-engine/api; HttpOnly"
        self.api_responses: list[httpx.Response] = []
        self.refuse = False
        self.api_handler: Callable[[httpx.Request], httpx.Response] | None = None
        self.token_requests: list[httpx.Request] = []
        self.head_requests: list[httpx.Request] = []
        self.api_requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.refuse:
            raise httpx.ConnectError("connection refused", request=request)

        if str(request.url) == TOKEN_URL:
            self.token_requests.append(request)
            if self.sso_body is not None:
                return httpx.Response(self.sso_status, json=self.sso_body)
            token = self.tokens[len(self.token_requests) - 1]
            return httpx.Response(self.sso_status, json={"access_token": token, "token_type": "bearer"})

        if request.method == "HEAD" and str(request.url).rstrip("/") == API_URL:
            self.head_requests.append(request)
            headers = {"Set-Cookie": self.set_cookie} if self.set_cookie else {}
            return httpx.Response(self.head_status, headers=headers)

        self.api_requests.append(request)
        if self.api_handler is not None:
            return self.api_handler(request)
        if self.api_responses:
            return self.api_responses.pop(0)
        return httpx.Response(200, content=b"<api><product_info><name>oVirt Engine</name></product_info></api>")

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()
