"""UAA Provider

Bluemix / Cloud Foundry UAA 위임 로그인 어댑터.
- Client credential은 Authorization: Basic 헤더로 전송 (UAA 요구사항)
- .../userinfo 엔드포인트에서 Bearer 토큰으로 프로필 조회
"""

import json
import logging

import httpx

from uaa_auth.config import ClientConfig
from uaa_auth.exceptions import MalformedResponseError, ProfileFetchError
from uaa_auth.oauth2 import CredentialLocation, OAuth2Client, TokenResult
from uaa_auth.providers.base import BaseProvider

logger = logging.getLogger(__name__)


class UAAProvider(BaseProvider):
    """Bluemix Dedicated UAA Provider

    client_id, client_secret 은 UAA 서버에 등록되어 있어야 함.

    Example:
        provider = UAAProvider(ClientConfig.from_env())
        url = provider.authorization_url(state="xyz")
        token = await provider.exchange_code(code)
        profile = await provider.user_profile(token.access_token)
    """

    def __init__(
        self,
        config: ClientConfig,
        oauth2_client: OAuth2Client | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """초기화.

        Args:
            config: UAA 클라이언트 설정
            oauth2_client: 주입할 OAuth2 클라이언트 (None이면 설정으로 생성)
            transport: 기본 클라이언트 생성 시 사용할 httpx 트랜스포트
        """
        self.config = config
        self.oauth2 = oauth2_client or OAuth2Client(
            client_id=config.client_id,
            client_secret=config.client_secret,
            authorization_url=config.authorization_url,
            token_url=config.token_url,
            credential_location=CredentialLocation.HEADER,
            auth_method="Bearer",
            timeout=config.timeout,
            transport=transport,
            provider=self.name,
        )

    @property
    def name(self) -> str:
        return "uaa"

    @property
    def display_name(self) -> str:
        return "Bluemix UAA"

    @property
    def identifier_field(self) -> str:
        return self.config.identifier_field

    def authorization_url(
        self, scope: str | None = None, state: str | None = None
    ) -> str:
        return self.oauth2.build_authorization_url(
            redirect_uri=self.config.callback_url,
            scope=scope or self.config.scope,
            state=state,
        )

    async def exchange_code(self, code: str) -> TokenResult:
        return await self.oauth2.exchange_token(code, self.config.callback_url)

    async def user_profile(self, access_token: str) -> dict | None:
        """UAA 사용자 프로필 조회.

        Raises:
            ProfileFetchError: non-2xx 응답
            MalformedResponseError: 본문이 유효한 JSON이 아님
            TransportError: 네트워크/타임아웃 실패
        """
        response = await self.oauth2.authenticated_get(
            self.config.user_info_url, access_token
        )

        if not response.is_success:
            logger.error(
                "Profile fetch failed: %d %s", response.status_code, response.text
            )
            raise ProfileFetchError(
                f"user info request failed with status {response.status_code}",
                status_code=response.status_code,
                body=response.text,
                provider=self.name,
            )

        try:
            return json.loads(response.text)
        except ValueError as e:
            raise MalformedResponseError(
                "user info response is not valid JSON",
                body=response.text,
                provider=self.name,
            ) from e
