"""Token provider registry keyed by (interface, name).

Registrations are plain factories; each provider is created on first use,
exactly once, even when many callers ask for it at the same time.

Example:
    >>> providers = TokenProviderFactory()
    >>> providers.add_client_credentials(UserApi, ClientCredentialsOptions(
    ...     endpoint="https://auth.example.com/token",
    ...     credentials=ClientCredentials(client_id="id", client_secret="secret"),
    ... ))
    >>> provider = providers.create(UserApi)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, cast

from ..foundation.errors import ConfigurationError
from ..io.cache import ConcurrentCache
from ..runtime import HttpApiProxy
from .client import OAuthClient, create_oauth_client
from .provider import (
    ClientCredentialsOptions,
    ClientCredentialsTokenProvider,
    Clock,
    PasswordCredentialsOptions,
    PasswordCredentialsTokenProvider,
    TokenProvider,
)

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger("apicase.oauth")

ProviderKey = tuple[type, str]


class TokenProviderFactory:
    """Creates and caches the token provider registered for an interface.

    Args:
        oauth_client: Token endpoint client shared by providers. If omitted one is
            created on first use and closed by aclose()
        clock: Clock handed to built-in providers
        expiry_skew: Expiry skew handed to built-in providers (default from settings)
    """

    __slots__ = ("_registrations", "_providers", "_oauth_client", "_owns_client", "clock", "expiry_skew")

    def __init__(
        self,
        oauth_client: OAuthClient | None = None,
        *,
        clock: Clock = time.monotonic,
        expiry_skew: float | None = None,
    ) -> None:
        self._registrations: dict[ProviderKey, Callable[[], TokenProvider]] = {}
        self._providers: ConcurrentCache[ProviderKey, TokenProvider] = ConcurrentCache()
        self._oauth_client = oauth_client
        self._owns_client = False
        self.clock = clock
        self.expiry_skew = expiry_skew

    @property
    def oauth_client(self) -> OAuthClient:
        if self._oauth_client is None:
            self._oauth_client = create_oauth_client()
            self._owns_client = True
        return self._oauth_client

    def register(self, interface: type, factory: Callable[[], TokenProvider], name: str = "") -> None:
        key = (interface, name)
        if key in self._registrations:
            raise ValueError(f"A token provider is already registered for {_label(key)}")
        self._registrations[key] = factory

    def add_client_credentials(self, interface: type, options: ClientCredentialsOptions, name: str = "") -> None:
        self.register(interface, lambda: ClientCredentialsTokenProvider(
            name or interface.__qualname__, self.oauth_client, options,
            clock=self.clock, expiry_skew=self.expiry_skew,
        ), name)

    def add_password_credentials(self, interface: type, options: PasswordCredentialsOptions, name: str = "") -> None:
        self.register(interface, lambda: PasswordCredentialsTokenProvider(
            name or interface.__qualname__, self.oauth_client, options,
            clock=self.clock, expiry_skew=self.expiry_skew,
        ), name)

    def create(self, interface: type, name: str = "") -> TokenProvider:
        """The provider registered for (interface, name). Raises ConfigurationError if none."""
        return self._providers.get_or_add((interface, name), self._build)

    def _build(self, key: ProviderKey) -> TokenProvider:
        factory = self._registrations.get(key)
        if factory is None:
            raise ConfigurationError(f"No token provider registered for {_label(key)}")
        provider = factory()
        logger.debug(f"Created {provider!r} for {_label(key)}")
        return provider

    def __contains__(self, key: ProviderKey) -> bool:
        return key in self._registrations

    async def aclose(self) -> None:
        """Close the token endpoint client if this factory created it."""
        if self._owns_client and self._oauth_client is not None:
            await cast(HttpApiProxy, self._oauth_client).aclose()
            self._owns_client = False

    async def __aenter__(self) -> TokenProviderFactory:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


def _label(key: ProviderKey) -> str:
    interface, name = key
    return f"{interface.__qualname__}[{name}]" if name else interface.__qualname__
