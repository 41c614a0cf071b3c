"""Token endpoint client.

The endpoint is itself declared as an http api interface and executed by
the same engine as user interfaces: credentials are posted as an urlencoded
form and the json body is decoded into a TokenResult whatever the status,
so OAuth error responses surface as TokenAcquisitionError rather than a
bare status failure.
"""

from __future__ import annotations

from typing import Annotated, Protocol

import httpx

from ..attributes import FormContent, JsonReturn, Uri, http_post, returns
from ..foundation.formats import FormatOptions
from ..runtime import HttpApiFactory, HttpApiOptions
from .token import ClientCredentials, PasswordCredentials, RefreshTokenCredentials, TokenResult


class OAuthClient(Protocol):
    """Anything able to exchange credentials for tokens."""

    async def request_token(
        self, endpoint: str, credentials: ClientCredentials | PasswordCredentials
    ) -> TokenResult: ...

    async def refresh_token(self, endpoint: str, credentials: RefreshTokenCredentials) -> TokenResult: ...


class HttpOAuthClient:
    """Token endpoint as an http api interface."""

    @http_post()
    @returns(JsonReturn(ensure_success_status=False))
    async def request_token(
        self,
        endpoint: Annotated[str, Uri()],
        credentials: Annotated[ClientCredentials | PasswordCredentials, FormContent()],
    ) -> TokenResult: ...

    @http_post()
    @returns(JsonReturn(ensure_success_status=False))
    async def refresh_token(
        self,
        endpoint: Annotated[str, Uri()],
        credentials: Annotated[RefreshTokenCredentials, FormContent()],
    ) -> TokenResult: ...


def create_oauth_client(
    client: httpx.AsyncClient | None = None,
    factory: HttpApiFactory | None = None,
) -> OAuthClient:
    """Token endpoint client that leaves unset credential fields out of the form."""
    options = HttpApiOptions(format_options=FormatOptions(ignore_null_property=True))
    return (factory or HttpApiFactory()).create(HttpOAuthClient, client, options)
