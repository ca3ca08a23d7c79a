"""Base Provider 추상 클래스

위임 로그인 Provider 어댑터가 구현해야 하는 인터페이스 정의.
"""

from abc import ABC, abstractmethod

from uaa_auth.oauth2 import TokenResult


class BaseProvider(ABC):
    """Provider 어댑터 추상 베이스 클래스

    어댑터는 OAuth2Client를 상속하지 않고 협력 객체로 보유함.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider 이름"""
        pass

    @property
    @abstractmethod
    def display_name(self) -> str:
        """표시용 이름"""
        pass

    @property
    def identifier_field(self) -> str:
        """프로필에서 사용자 식별자로 쓰는 필드"""
        return "user_id"

    @abstractmethod
    def authorization_url(
        self, scope: str | None = None, state: str | None = None
    ) -> str:
        """인증 URL 생성 (네트워크 호출 없음)"""
        pass

    @abstractmethod
    async def exchange_code(self, code: str) -> TokenResult:
        """인증 코드를 토큰으로 교환

        Args:
            code: 인증 코드

        Returns:
            TokenResult: 토큰 교환 결과
        """
        pass

    @abstractmethod
    async def user_profile(self, access_token: str) -> dict | None:
        """사용자 프로필 조회

        Args:
            access_token: 토큰 교환으로 받은 access token

        Returns:
            dict | None: 파싱된 프로필
        """
        pass
