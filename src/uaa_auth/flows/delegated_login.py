"""Delegated Login Flow

Authorization Code 위임 로그인 오케스트레이터.

플로우:
1. 웹 레이어가 인증 URL로 사용자를 리디렉션
2. Provider가 인증 코드와 함께 콜백 URL로 리디렉션
3. 인증 코드 → 토큰 교환
4. 토큰으로 프로필 조회
5. 호스트가 주입한 verify 함수가 identity 또는 거부를 반환

전송/파싱 실패는 예외로 전파되고, 인증 거부는 DENIED 결과로 반환됨.
"""

import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from uaa_auth.oauth2 import TokenResult
from uaa_auth.providers.base import BaseProvider

logger = logging.getLogger(__name__)

VerifyFunc = Callable[[str, str | None, dict | None], Any]


class LoginState(str, Enum):
    """로그인 시도 1회의 상태."""

    INIT = "init"
    REDIRECTED = "redirected"
    CODE_RECEIVED = "code_received"
    TOKEN_EXCHANGED = "token_exchanged"
    PROFILE_FETCHED = "profile_fetched"
    SUCCESS = "success"
    DENIED = "denied"
    ERROR = "error"


class LoginOutcome(str, Enum):
    SUCCESS = "success"
    DENIED = "denied"


@dataclass
class LoginResult:
    """로그인 결과.

    Attributes:
        outcome: SUCCESS 또는 DENIED
        identity: verify 함수가 반환한 identity (DENIED면 None)
        access_token: 교환된 access token (DENIED면 None)
        token: 전체 토큰 교환 결과
        profile: 조회된 프로필
    """

    outcome: LoginOutcome
    identity: Any = None
    access_token: str | None = None
    token: TokenResult | None = None
    profile: dict | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == LoginOutcome.SUCCESS

    @property
    def state(self) -> LoginState:
        if self.outcome == LoginOutcome.SUCCESS:
            return LoginState.SUCCESS
        return LoginState.DENIED


class DelegatedLogin:
    """위임 로그인 오케스트레이터.

    공유 가변 상태가 없으므로 동시 로그인 시도 간 락이 필요 없음.
    토큰 교환과 프로필 조회는 항상 순서대로 실행됨.

    Example:
        def verify(access_token, refresh_token, profile):
            return User.find_or_create(profile["user_id"])

        login = DelegatedLogin(UAAProvider(config), verify)
        redirect_to = login.authorization_url(state=state)
        ...
        result = await login.complete_login(code)
        if result.succeeded:
            session["user"] = result.identity
    """

    def __init__(self, provider: BaseProvider, verify: VerifyFunc):
        self.provider = provider
        self.verify = verify

    def _transition(self, attempt: str, state: LoginState) -> None:
        logger.debug("[%s] login %s -> %s", self.provider.name, attempt, state.value)

    def authorization_url(
        self, scope: str | None = None, state: str | None = None
    ) -> str:
        """인증 URL 생성. 실제 HTTP 리디렉션은 호출자 책임."""
        self._transition("-", LoginState.INIT)
        url = self.provider.authorization_url(scope=scope, state=state)
        self._transition("-", LoginState.REDIRECTED)
        return url

    async def complete_login(self, code: str) -> LoginResult:
        """인증 코드로 로그인 완료.

        Args:
            code: 콜백으로 받은 인증 코드

        Returns:
            LoginResult: SUCCESS 또는 DENIED

        Raises:
            ValueError: code가 비어 있음
            ExchangeError, ProfileFetchError, MalformedResponseError,
            TransportError: 토큰 교환/프로필 조회 실패 (재시도 없음)
        """
        if not code:
            raise ValueError("authorization code is required")

        attempt = code[:8]
        self._transition(attempt, LoginState.CODE_RECEIVED)

        try:
            token = await self.provider.exchange_code(code)
            self._transition(attempt, LoginState.TOKEN_EXCHANGED)

            profile = await self.provider.user_profile(token.access_token)
            self._transition(attempt, LoginState.PROFILE_FETCHED)
        except Exception:
            self._transition(attempt, LoginState.ERROR)
            raise

        field = self.provider.identifier_field
        if not profile or not isinstance(profile, dict) or not profile.get(field):
            logger.info(
                "[%s] profile has no %s, login denied", self.provider.name, field
            )
            self._transition(attempt, LoginState.DENIED)
            return LoginResult(outcome=LoginOutcome.DENIED, token=token, profile=profile)

        identity = self.verify(token.access_token, token.refresh_token, profile)
        if inspect.isawaitable(identity):
            identity = await identity

        if not identity:
            logger.info("[%s] verify rejected %s", self.provider.name, profile.get(field))
            self._transition(attempt, LoginState.DENIED)
            return LoginResult(outcome=LoginOutcome.DENIED, token=token, profile=profile)

        logger.info("[%s] login succeeded for %s", self.provider.name, profile.get(field))
        self._transition(attempt, LoginState.SUCCESS)
        return LoginResult(
            outcome=LoginOutcome.SUCCESS,
            identity=identity,
            access_token=token.access_token,
            token=token,
            profile=profile,
        )
