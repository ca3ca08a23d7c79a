"""UAA Auth - Bluemix / Cloud Foundry UAA delegated login.

Example:
    from uaa_auth import ClientConfig, DelegatedLogin, UAAProvider

    config = ClientConfig.from_env()
    login = DelegatedLogin(UAAProvider(config), verify)
    result = await login.complete_login(code)
"""

from uaa_auth.config import ClientConfig
from uaa_auth.exceptions import (
    AuthenticationError,
    ConfigError,
    ExchangeError,
    MalformedResponseError,
    ProfileFetchError,
    TransportError,
    UpstreamHTTPError,
)
from uaa_auth.flows.delegated_login import (
    DelegatedLogin,
    LoginOutcome,
    LoginResult,
    LoginState,
)
from uaa_auth.oauth2 import CredentialLocation, OAuth2Client, TokenResult
from uaa_auth.providers.uaa import UAAProvider

__version__ = "1.0.0"

__all__ = [
    # Core
    "ClientConfig",
    "OAuth2Client",
    "CredentialLocation",
    "TokenResult",
    "UAAProvider",
    "DelegatedLogin",
    "LoginOutcome",
    "LoginResult",
    "LoginState",
    # Exceptions
    "AuthenticationError",
    "ConfigError",
    "TransportError",
    "UpstreamHTTPError",
    "ExchangeError",
    "ProfileFetchError",
    "MalformedResponseError",
]
