"""UAA Provider 테스트"""

import base64
from unittest.mock import AsyncMock, MagicMock
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from uaa_auth.exceptions import MalformedResponseError, ProfileFetchError, TransportError
from uaa_auth.oauth2 import CredentialLocation, OAuth2Client, TokenResult
from uaa_auth.providers import BaseProvider, UAAProvider


class TestUAAProvider:
    """UAAProvider 기본 동작"""

    def test_is_provider(self, client_config):
        provider = UAAProvider(client_config)
        assert isinstance(provider, BaseProvider)
        assert provider.name == "uaa"
        assert provider.display_name == "Bluemix UAA"
        assert provider.identifier_field == "user_id"

    def test_default_client_uses_header_credentials(self, client_config):
        """UAA는 Basic 헤더로 client credential 전송"""
        provider = UAAProvider(client_config)
        expected = "Basic " + base64.b64encode(b"abc:xyz").decode()

        assert provider.oauth2.credential_location == CredentialLocation.HEADER
        assert provider.oauth2.custom_headers["Authorization"] == expected
        assert provider.oauth2.auth_method == "Bearer"
        assert provider.oauth2.timeout == client_config.timeout
        assert provider.oauth2.provider == "uaa"

    def test_injected_client(self, client_config):
        """OAuth2 클라이언트를 협력 객체로 주입"""
        oauth2 = MagicMock(spec=OAuth2Client)
        provider = UAAProvider(client_config, oauth2_client=oauth2)
        assert provider.oauth2 is oauth2


class TestAuthorizationUrl:
    def test_authorization_url(self, client_config):
        url = UAAProvider(client_config).authorization_url(state="s1")
        parsed = urlparse(url)
        params = parse_qs(parsed.query)

        assert url.startswith("https://idp/authorize?")
        assert params == {
            "response_type": ["code"],
            "client_id": ["abc"],
            "redirect_uri": ["https://app/cb"],
            "state": ["s1"],
        }

    def test_config_scope_used_by_default(self, client_config):
        from dataclasses import replace

        config = replace(client_config, scope="openid")
        params = parse_qs(urlparse(UAAProvider(config).authorization_url()).query)
        assert params["scope"] == ["openid"]

    def test_request_scope_overrides_config(self, client_config):
        from dataclasses import replace

        config = replace(client_config, scope="openid")
        url = UAAProvider(config).authorization_url(scope="cloud_controller.read")
        assert parse_qs(urlparse(url).query)["scope"] == ["cloud_controller.read"]


class TestExchangeCode:
    @pytest.mark.asyncio
    async def test_exchange_uses_callback_url(self, client_config):
        oauth2 = MagicMock(spec=OAuth2Client)
        oauth2.exchange_token = AsyncMock(return_value=TokenResult(access_token="TOK1"))
        provider = UAAProvider(client_config, oauth2_client=oauth2)

        token = await provider.exchange_code("AUTHCODE1")

        assert token.access_token == "TOK1"
        oauth2.exchange_token.assert_awaited_once_with("AUTHCODE1", "https://app/cb")

    @pytest.mark.asyncio
    async def test_exchange_sends_basic_header(self, client_config, idp):
        provider = UAAProvider(client_config, transport=idp.transport)

        await provider.exchange_code("AUTHCODE1")

        request = idp.request_to("/token")
        expected = "Basic " + base64.b64encode(b"abc:xyz").decode()
        assert request.headers["Authorization"] == expected
        assert "client_secret" not in idp.form(request)


class TestUserProfile:
    """프로필 조회 테스트"""

    @pytest.mark.asyncio
    async def test_profile_round_trip(self, client_config, idp):
        idp.profile_reply = {
            "status_code": 200,
            "json": {"user_id": "u1", "name": "Alice", "emails": [{"value": "a@x"}]},
        }
        provider = UAAProvider(client_config, transport=idp.transport)

        profile = await provider.user_profile("TOK1")

        assert profile == {"user_id": "u1", "name": "Alice", "emails": [{"value": "a@x"}]}
        request = idp.request_to("/userinfo")
        assert request.headers["Authorization"] == "Bearer TOK1"
        assert "TOK1" not in str(request.url)

    @pytest.mark.asyncio
    async def test_profile_null_body(self, client_config, idp):
        idp.profile_reply = {"status_code": 200, "text": "null"}
        provider = UAAProvider(client_config, transport=idp.transport)
        assert await provider.user_profile("TOK1") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403, 500])
    async def test_non_2xx_raises_profile_fetch_error(self, client_config, idp, status):
        idp.profile_reply = {"status_code": status, "text": '{"error":"invalid_token"}'}
        provider = UAAProvider(client_config, transport=idp.transport)

        with pytest.raises(ProfileFetchError) as exc_info:
            await provider.user_profile("TOK1")

        assert exc_info.value.status_code == status
        assert exc_info.value.body == '{"error":"invalid_token"}'
        assert exc_info.value.provider == "uaa"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", ["<html>login</html>", '{"user_id": "u1"', ""])
    async def test_malformed_json(self, client_config, idp, body):
        """잘못된 JSON은 부분 결과 없이 MalformedResponseError"""
        idp.profile_reply = {"status_code": 200, "text": body}
        provider = UAAProvider(client_config, transport=idp.transport)

        with pytest.raises(MalformedResponseError) as exc_info:
            await provider.user_profile("TOK1")
        assert exc_info.value.body == body

    @pytest.mark.asyncio
    async def test_transport_error(self, client_config):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        provider = UAAProvider(client_config, transport=httpx.MockTransport(handler))
        with pytest.raises(TransportError):
            await provider.user_profile("TOK1")
