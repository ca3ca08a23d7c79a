"""Login Flows

Authorization Code 위임 로그인 플로우 구현.
"""

from uaa_auth.flows.delegated_login import (
    DelegatedLogin,
    LoginOutcome,
    LoginResult,
    LoginState,
)

__all__ = [
    "DelegatedLogin",
    "LoginOutcome",
    "LoginResult",
    "LoginState",
]
