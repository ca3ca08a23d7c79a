"""Generic OAuth 2.0 Authorization Code client

특정 provider에 종속되지 않는 OAuth2 클라이언트.
Provider 어댑터는 이 클라이언트를 상속하지 않고 협력 객체로 주입받아 사용.

- 인증 URL 생성 (순수 함수, 네트워크 호출 없음)
- 인증 코드 → 토큰 교환 (POST token endpoint)
- Bearer 토큰을 사용한 인증된 GET 요청
"""

import base64
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

import httpx

from uaa_auth.config import DEFAULT_TIMEOUT_SECONDS
from uaa_auth.exceptions import (
    ConfigError,
    ExchangeError,
    MalformedResponseError,
    TransportError,
)

logger = logging.getLogger(__name__)


class CredentialLocation(str, Enum):
    """Client credential 전송 위치.

    BODY가 OAuth2 기본값. HEADER는 Authorization: Basic 헤더 사용.
    """

    BODY = "body"
    HEADER = "header"


@dataclass
class TokenResult:
    """토큰 교환 결과.

    로그인 시도 1회 동안만 호출자가 소유하며 캐시하지 않음.
    """

    access_token: str
    refresh_token: str | None = None
    token_type: str = "Bearer"
    expires_in: int | None = None
    scope: str | None = None
    raw: dict = field(default_factory=dict)

    def expires_at(self, issued_at: datetime | None = None) -> datetime | None:
        """만료 시각 계산 (expires_in 없으면 None)"""
        if self.expires_in is None:
            return None
        return (issued_at or datetime.now()) + timedelta(seconds=self.expires_in)

    @classmethod
    def from_dict(cls, data: dict) -> "TokenResult":
        """파싱된 토큰 응답에서 생성"""
        expires_in = data.get("expires_in")
        try:
            expires_in = int(expires_in) if expires_in is not None else None
        except (TypeError, ValueError):
            expires_in = None
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or None,
            token_type=data.get("token_type") or "Bearer",
            expires_in=expires_in,
            scope=data.get("scope"),
            raw=data,
        )


def encode_client_credentials(client_id: str, client_secret: str) -> str:
    """client_id:client_secret 을 Base64로 인코딩."""
    creds = f"{client_id}:{client_secret}".encode("utf-8")
    return base64.b64encode(creds).decode("ascii")


def parse_token_body(response: httpx.Response) -> dict:
    """토큰 응답 본문을 JSON 또는 form-urlencoded 로 파싱.

    Raises:
        MalformedResponseError: 파싱 실패 또는 dict가 아닐 때
    """
    text = response.text
    content_type = response.headers.get("content-type", "")

    if "json" in content_type or text.lstrip().startswith("{"):
        try:
            data = json.loads(text)
        except ValueError as e:
            raise MalformedResponseError(
                "token response is not valid JSON", body=text
            ) from e
        if not isinstance(data, dict):
            raise MalformedResponseError(
                "token response is not a JSON object", body=text
            )
        return data

    return dict(parse_qsl(text, keep_blank_values=True))


class OAuth2Client:
    """OAuth 2.0 Authorization Code 클라이언트.

    요청마다 새로운 httpx.AsyncClient를 사용하므로 공유 가변 상태가 없음.
    동시에 여러 로그인 시도가 같은 인스턴스를 사용해도 안전.

    Example:
        client = OAuth2Client(
            client_id="abc",
            client_secret="xyz",
            authorization_url="https://idp/authorize",
            token_url="https://idp/token",
            credential_location=CredentialLocation.HEADER,
        )
        url = client.build_authorization_url("https://app/cb", scope="openid")
        token = await client.exchange_token("AUTHCODE", "https://app/cb")
        response = await client.authenticated_get("https://idp/userinfo", token.access_token)
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        authorization_url: str,
        token_url: str,
        credential_location: CredentialLocation = CredentialLocation.BODY,
        custom_headers: dict[str, str] | None = None,
        auth_method: str = "Bearer",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
        provider: str | None = None,
    ):
        """초기화.

        Args:
            client_id: Client ID
            client_secret: Client Secret
            authorization_url: 인증 엔드포인트
            token_url: 토큰 엔드포인트
            credential_location: client credential 전송 위치
            custom_headers: 모든 요청에 추가할 헤더
            auth_method: authenticated_get 에서 사용할 Authorization 스킴
            timeout: 요청별 타임아웃 (초)
            transport: 커스텀 httpx 트랜스포트 (테스트용)
            provider: 에러에 기록할 provider 이름
        """
        parsed = urlparse(authorization_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigError(
                f"malformed authorization URL: {authorization_url!r}", provider
            )

        self.client_id = client_id
        self.client_secret = client_secret
        self.authorization_url = authorization_url
        self.token_url = token_url
        self.credential_location = CredentialLocation(credential_location)
        self.auth_method = auth_method
        self.timeout = timeout
        self.provider = provider
        self._transport = transport

        self.custom_headers = dict(custom_headers or {})
        if self.credential_location == CredentialLocation.HEADER:
            encoded = encode_client_credentials(client_id, client_secret)
            self.custom_headers.setdefault("Authorization", f"Basic {encoded}")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            transport=self._transport,
        )

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        # 요청별 헤더가 custom_headers 보다 우선
        headers = dict(self.custom_headers)
        if extra:
            headers.update(extra)
        return headers

    def build_authorization_url(
        self,
        redirect_uri: str,
        scope: str | list[str] | tuple[str, ...] | None = None,
        state: str | None = None,
    ) -> str:
        """인증 URL 생성.

        authorization_url 에 이미 있는 query 파라미터는 유지됨.

        Args:
            redirect_uri: 콜백 URL
            scope: 요청할 scope (리스트면 공백으로 연결)
            state: 선택적 state 값

        Returns:
            str: 인증 URL
        """
        parsed = urlparse(self.authorization_url)
        params = parse_qsl(parsed.query, keep_blank_values=True)

        params.append(("response_type", "code"))
        params.append(("client_id", self.client_id))
        params.append(("redirect_uri", redirect_uri))

        if isinstance(scope, (list, tuple)):
            scope = " ".join(scope)
        if scope:
            params.append(("scope", scope))
        if state:
            params.append(("state", state))

        return urlunparse(parsed._replace(query=urlencode(params)))

    async def exchange_token(self, code: str, redirect_uri: str) -> TokenResult:
        """인증 코드를 토큰으로 교환.

        인증 코드는 일회용이므로 실패해도 재시도하지 않음.

        Args:
            code: 인증 코드
            redirect_uri: 인증 요청 시 사용한 콜백 URL

        Returns:
            TokenResult: 토큰 응답

        Raises:
            ExchangeError: non-2xx 응답
            MalformedResponseError: 본문 파싱 실패 또는 access_token 없음
            TransportError: 네트워크/타임아웃 실패
        """
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
        }
        if self.credential_location == CredentialLocation.BODY:
            data["client_id"] = self.client_id
            data["client_secret"] = self.client_secret

        logger.info("Exchanging code for token at %s", self.token_url)
        logger.debug(
            "Code: %s..., credential location: %s",
            code[:8],
            self.credential_location.value,
        )

        try:
            async with self._client() as client:
                response = await client.post(
                    self.token_url,
                    data=data,
                    headers=self._headers({"Accept": "application/json"}),
                )
        except httpx.TransportError as e:
            logger.error("Token request failed: %s", e)
            raise TransportError(
                f"token request to {self.token_url} failed: {e}", self.provider
            ) from e

        if not response.is_success:
            logger.error(
                "Token exchange failed: %d %s", response.status_code, response.text
            )
            raise ExchangeError(
                f"token exchange failed with status {response.status_code}",
                status_code=response.status_code,
                body=response.text,
                provider=self.provider,
            )

        try:
            result = parse_token_body(response)
        except MalformedResponseError as e:
            e.provider = self.provider
            raise

        if not result.get("access_token"):
            raise MalformedResponseError(
                "token response has no access_token",
                body=response.text,
                provider=self.provider,
            )

        return TokenResult.from_dict(result)

    async def authenticated_get(self, url: str, access_token: str) -> httpx.Response:
        """access token을 Authorization 헤더에 담아 GET 요청.

        토큰은 query 파라미터로 보내지 않음 (URL/로그 노출 방지).

        Raises:
            TransportError: 네트워크/타임아웃 실패
        """
        headers = self._headers(
            {"Authorization": f"{self.auth_method} {access_token}"}
        )

        try:
            async with self._client() as client:
                return await client.get(url, headers=headers)
        except httpx.TransportError as e:
            logger.error("GET %s failed: %s", url, e)
            raise TransportError(f"request to {url} failed: {e}", self.provider) from e
