"""Auth Providers

위임 로그인 Provider 어댑터 구현.
"""

from uaa_auth.providers.base import BaseProvider
from uaa_auth.providers.uaa import UAAProvider

__all__ = [
    "BaseProvider",
    "UAAProvider",
]
