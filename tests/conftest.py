"""Shared test fixtures."""

from urllib.parse import parse_qsl

import httpx
import pytest

from uaa_auth.config import ClientConfig


class FakeIdentityProvider:
    """httpx.MockTransport 기반 가짜 UAA.

    /token, /userinfo 응답을 테스트별로 설정하고 받은 요청을 기록함.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.token_reply = {"status_code": 200, "json": {"access_token": "TOK1"}}
        self.profile_reply = {
            "status_code": 200,
            "json": {"user_id": "u1", "name": "Alice"},
        }
        self.fail_with: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with
        if request.url.path == "/token":
            return httpx.Response(**self.token_reply)
        if request.url.path == "/userinfo":
            return httpx.Response(**self.profile_reply)
        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def request_to(self, path: str) -> httpx.Request:
        return next(r for r in self.requests if r.url.path == path)

    @staticmethod
    def form(request: httpx.Request) -> dict:
        return dict(parse_qsl(request.content.decode()))


@pytest.fixture
def client_config() -> ClientConfig:
    """테스트용 UAA 설정."""
    return ClientConfig(
        user_info_url="https://idp/userinfo",
        token_url="https://idp/token",
        authorization_url="https://idp/authorize",
        client_id="abc",
        client_secret="xyz",
        callback_url="https://app/cb",
    )


@pytest.fixture
def idp() -> FakeIdentityProvider:
    return FakeIdentityProvider()
