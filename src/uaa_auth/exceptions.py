"""Custom authentication exceptions.

UAA 위임 로그인 관련 예외 클래스 정의.
설정 오류, 전송 오류, 업스트림 HTTP 오류, 응답 파싱 오류를 구분하는 계층 구조 제공.
"""

import json


class AuthenticationError(Exception):
    """기본 인증 예외.

    모든 인증 관련 예외의 베이스 클래스.

    Attributes:
        provider: 인증 제공자 이름 (예: 'uaa')
    """

    def __init__(self, message: str, provider: str | None = None):
        self.provider = provider
        super().__init__(message)


class ConfigError(AuthenticationError):
    """정적 설정 오류.

    ClientConfig 생성 시점에 발생하며 치명적임 (네트워크 호출 이전).
    """
    pass


class TransportError(AuthenticationError):
    """네트워크/타임아웃 오류.

    토큰 교환 또는 프로필 조회 중 연결 실패를 나타냄.
    """
    pass


class UpstreamHTTPError(AuthenticationError):
    """Provider가 non-2xx 응답을 반환함.

    Attributes:
        status_code: 업스트림 HTTP 상태 코드
        body: 업스트림 응답 본문 (원문 그대로)
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        body: str = "",
        provider: str | None = None
    ):
        self.status_code = status_code
        self.body = body
        super().__init__(message, provider)


class ExchangeError(UpstreamHTTPError):
    """토큰 엔드포인트 에러.

    인증 코드 교환 실패. 인증 코드는 일회용이므로 재시도하지 않음.

    Attributes:
        error_code: OAuth 에러 코드 (예: 'invalid_grant'), 본문에서 파싱 가능할 때만
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        body: str = "",
        provider: str | None = None
    ):
        super().__init__(message, status_code, body, provider)
        self.error_code = _parse_error_code(body)


class ProfileFetchError(UpstreamHTTPError):
    """User info 엔드포인트 에러."""
    pass


class MalformedResponseError(AuthenticationError):
    """응답 본문을 기대한 형식으로 파싱할 수 없음.

    Attributes:
        body: 파싱에 실패한 원문 본문
    """

    def __init__(
        self,
        message: str,
        body: str | None = None,
        provider: str | None = None
    ):
        self.body = body
        super().__init__(message, provider)


def _parse_error_code(body: str) -> str | None:
    """OAuth 에러 응답에서 'error' 필드 추출."""
    if not body:
        return None
    try:
        data = json.loads(body)
    except ValueError:
        return None
    if isinstance(data, dict) and isinstance(data.get("error"), str):
        return data["error"]
    return None
