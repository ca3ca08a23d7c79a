"""Client configuration

UAA 위임 로그인에 필요한 정적 설정.
프로세스 시작 시 한 번 생성되며 이후 변경 불가.
"""

import os
from dataclasses import dataclass
from urllib.parse import urlparse

from uaa_auth.exceptions import ConfigError

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_IDENTIFIER_FIELD = "user_id"
ENV_PREFIX = "UAA_"


@dataclass(frozen=True)
class ClientConfig:
    """UAA OAuth 클라이언트 설정.

    Attributes:
        authorization_url: 인증 grant를 받는 URL (.../oauth/authorize)
        token_url: access token 발급 URL (.../oauth/token)
        user_info_url: 사용자 프로필 조회 URL (.../userinfo)
        client_id: UAA에 등록된 Client ID
        client_secret: UAA에 등록된 Client Secret
        callback_url: 인증 후 provider가 리디렉션할 URL (redirect_uri)
        scope: 요청할 scope (선택)
        timeout: HTTP 요청별 타임아웃 (초)
        identifier_field: 프로필에서 사용자를 식별하는 필드

    Example:
        config = ClientConfig(
            authorization_url="https://login.example.com/UAALoginServerWAR/oauth/authorize",
            token_url="https://uaa.example.com/oauth/token",
            user_info_url="https://uaa.example.com/userinfo",
            client_id="CLIENT_ID",
            client_secret="CLIENT_SECRET",
            callback_url="http://localhost:3000/auth/uaa/callback",
        )
    """

    authorization_url: str
    token_url: str
    user_info_url: str
    client_id: str
    client_secret: str
    callback_url: str
    scope: str | None = None
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    identifier_field: str = DEFAULT_IDENTIFIER_FIELD

    def __post_init__(self):
        if not self.user_info_url:
            raise ConfigError("missing user info URL")
        if not self.token_url:
            raise ConfigError("missing token URL")
        if not self.authorization_url:
            raise ConfigError("missing authorization URL")
        if not self.client_id:
            raise ConfigError("missing client ID")
        if not self.client_secret:
            raise ConfigError("missing client secret")

        parsed = urlparse(self.authorization_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigError(
                f"malformed authorization URL: {self.authorization_url!r}"
            )
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX) -> "ClientConfig":
        """환경변수에서 생성.

        {prefix}AUTHORIZATION_URL, {prefix}TOKEN_URL, {prefix}USER_INFO_URL,
        {prefix}CLIENT_ID, {prefix}CLIENT_SECRET, {prefix}CALLBACK_URL,
        {prefix}SCOPE, {prefix}TIMEOUT 를 읽음.

        Raises:
            ConfigError: 필수 값이 없거나 TIMEOUT이 숫자가 아닐 때
        """
        raw_timeout = os.getenv(f"{prefix}TIMEOUT")
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT_SECONDS
        except ValueError as e:
            raise ConfigError(f"invalid {prefix}TIMEOUT: {raw_timeout!r}") from e

        return cls(
            authorization_url=os.getenv(f"{prefix}AUTHORIZATION_URL", ""),
            token_url=os.getenv(f"{prefix}TOKEN_URL", ""),
            user_info_url=os.getenv(f"{prefix}USER_INFO_URL", ""),
            client_id=os.getenv(f"{prefix}CLIENT_ID", ""),
            client_secret=os.getenv(f"{prefix}CLIENT_SECRET", ""),
            callback_url=os.getenv(f"{prefix}CALLBACK_URL", ""),
            scope=os.getenv(f"{prefix}SCOPE") or None,
            timeout=timeout,
        )
