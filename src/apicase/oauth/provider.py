"""Token providers: one cached token per provider, renewed by one shared task.

`get_token()` decides under an asyncio.Lock whether the cached token can be
returned. Otherwise it starts a renewal task, or joins the one already in
flight, so every concurrent caller awaits the same fetch:

    no token      -> request a new one
    expired token -> refresh when it carries a refresh_token, falling back
                     to a new request if the refresh fails; else request
    then          -> the token must carry an access_token without error

All callers waiting on a renewal get its result, or the same exception. A
failed renewal is not cached, so the next caller starts a new one.
Cancelling a caller only abandons its wait; when the last waiter is
cancelled the renewal itself is cancelled.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable

import httpx
from pydantic import BaseModel, ConfigDict

from ..foundation.config import get_settings
from ..foundation.errors import ApiException, ConfigurationError, TokenAcquisitionError
from .client import OAuthClient
from .token import ClientCredentials, PasswordCredentials, RefreshTokenCredentials, TokenResult

logger = logging.getLogger("apicase.oauth")

Clock = Callable[[], float]

# ValueError covers malformed bodies and pydantic ValidationError
_REFRESH_ERRORS = (ApiException, httpx.HTTPError, ValueError)


class TokenProvider(ABC):
    """Caches one token and keeps it fresh.

    Args:
        name: Provider name used in errors and logs
        oauth_client: Token endpoint client
        clock: Monotonic seconds; tokens are stamped with it on arrival
        expiry_skew: Seconds before expiry at which a token is renewed
    """

    def __init__(
        self,
        name: str,
        oauth_client: OAuthClient,
        *,
        clock: Clock = time.monotonic,
        expiry_skew: float | None = None,
    ) -> None:
        self.name = name
        self.oauth_client = oauth_client
        self.clock = clock
        self.expiry_skew = get_settings().oauth.expiry_skew if expiry_skew is None else expiry_skew
        self._token: TokenResult | None = None
        self._lock = asyncio.Lock()
        self._renewal: asyncio.Future[TokenResult] | None = None
        self._waiters = 0

    @property
    def token(self) -> TokenResult | None:
        """The cached token, without checking or renewing it."""
        return self._token

    async def get_token(self) -> TokenResult:
        async with self._lock:
            current = self._token
            if current is not None and not current.is_expired(self.clock(), self.expiry_skew):
                return current
            if self._renewal is None or self._renewal.done():
                self._renewal = asyncio.ensure_future(self._renew(current))
                self._waiters = 0
            renewal = self._renewal
            self._waiters += 1

        try:
            return await asyncio.shield(renewal)
        finally:
            if self._renewal is renewal:
                self._waiters -= 1
                if not self._waiters and not renewal.done():
                    renewal.cancel()
                    self._renewal = None

    async def _renew(self, current: TokenResult | None) -> TokenResult:
        token = await self._request() if current is None else await self._refresh_or_request(current)
        token.ensure_success(self.name)
        self._token = token
        return token

    def clear_token(self, token: TokenResult | None = None) -> None:
        """Drop the cached token so the next call requests a new one.

        With `token`, only drop it if it is still the cached one; a stale
        401 must not discard a token another caller already renewed.
        """
        if token is None or self._token is token:
            self._token = None

    async def _request(self) -> TokenResult:
        logger.debug(f"[{self.name}] Requesting token")
        try:
            token = await self.request_token()
        except ValueError as e:
            raise TokenAcquisitionError(f"[{self.name}] unreadable token response: {e}", provider=self.name) from e
        return self._stamp(token)

    async def _refresh_or_request(self, current: TokenResult) -> TokenResult:
        if not current.can_refresh():
            return await self._request()

        logger.debug(f"[{self.name}] Refreshing token")
        try:
            refreshed = self._stamp(await self.refresh_token(current.refresh_token or ""))
        except _REFRESH_ERRORS as e:
            logger.warning(f"[{self.name}] Token refresh failed, requesting a new token: {e}")
            return await self._request()
        if not refreshed.is_success():
            logger.warning(f"[{self.name}] Token refresh rejected ({refreshed.error}), requesting a new token")
            return await self._request()
        return refreshed

    def _stamp(self, token: TokenResult | None) -> TokenResult:
        if token is None:
            raise TokenAcquisitionError(f"[{self.name}] token endpoint returned no token", provider=self.name)
        return token.model_copy(update={"issued_at": self.clock()})

    @abstractmethod
    async def request_token(self) -> TokenResult:
        """Fetch a brand new token."""

    @abstractmethod
    async def refresh_token(self, refresh_token: str) -> TokenResult:
        """Exchange a refresh_token for a new token."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class CredentialsOptions(BaseModel):
    """Token endpoint and the credentials posted to it."""

    model_config = ConfigDict(frozen=True)

    endpoint: str | None = None
    use_refresh_token: bool = True


class ClientCredentialsOptions(CredentialsOptions):
    credentials: ClientCredentials = ClientCredentials()


class PasswordCredentialsOptions(CredentialsOptions):
    credentials: PasswordCredentials = PasswordCredentials()


class _CredentialsTokenProvider(TokenProvider):
    options: ClientCredentialsOptions | PasswordCredentialsOptions

    def _endpoint(self) -> str:
        if not self.options.endpoint:
            raise ConfigurationError(f"[{self.name}] token endpoint is not configured")
        return self.options.endpoint

    async def request_token(self) -> TokenResult:
        return await self.oauth_client.request_token(self._endpoint(), self.options.credentials)

    async def refresh_token(self, refresh_token: str) -> TokenResult:
        endpoint = self._endpoint()
        if not self.options.use_refresh_token:
            return await self.request_token()
        credentials = self.options.credentials
        return await self.oauth_client.refresh_token(endpoint, RefreshTokenCredentials(
            client_id=credentials.client_id,
            client_secret=credentials.client_secret,
            refresh_token=refresh_token,
            scope=credentials.scope,
        ))


class ClientCredentialsTokenProvider(_CredentialsTokenProvider):
    """client_credentials grant."""

    def __init__(self, name: str, oauth_client: OAuthClient, options: ClientCredentialsOptions, **kwargs: object) -> None:
        super().__init__(name, oauth_client, **kwargs)  # type: ignore[arg-type]
        self.options = options


class PasswordCredentialsTokenProvider(_CredentialsTokenProvider):
    """password grant."""

    def __init__(self, name: str, oauth_client: OAuthClient, options: PasswordCredentialsOptions, **kwargs: object) -> None:
        super().__init__(name, oauth_client, **kwargs)  # type: ignore[arg-type]
        self.options = options
