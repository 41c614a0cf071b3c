"""OAuth 2 token acquisition, caching and refresh.

- TokenProvider: one cached token, renewed by one shared fetch
- ClientCredentialsTokenProvider / PasswordCredentialsTokenProvider: built-in grants
- TokenProviderFactory: providers registered per interface (and name)
- OAuthTokenFilter: sets Authorization, drops the token on 401
"""

from .token import ClientCredentials, PasswordCredentials, RefreshTokenCredentials, TokenResult
from .client import HttpOAuthClient, OAuthClient, create_oauth_client
from .provider import (
    ClientCredentialsOptions,
    ClientCredentialsTokenProvider,
    CredentialsOptions,
    PasswordCredentialsOptions,
    PasswordCredentialsTokenProvider,
    TokenProvider,
)
from .factory import TokenProviderFactory
from .filter import OAuthTokenFilter

__all__ = [
    # Tokens
    "TokenResult", "ClientCredentials", "PasswordCredentials", "RefreshTokenCredentials",
    # Endpoint client
    "OAuthClient", "HttpOAuthClient", "create_oauth_client",
    # Providers
    "TokenProvider", "CredentialsOptions", "ClientCredentialsOptions", "PasswordCredentialsOptions",
    "ClientCredentialsTokenProvider", "PasswordCredentialsTokenProvider",
    "TokenProviderFactory", "OAuthTokenFilter",
]
