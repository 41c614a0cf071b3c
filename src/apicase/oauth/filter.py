"""Filter attaching the provider's token to every call of an interface."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..foundation.errors import ConfigurationError

if TYPE_CHECKING:
    from ..runtime import Next, RequestContext, ResponseContext
    from .factory import TokenProviderFactory
    from .provider import TokenProvider


class OAuthTokenFilter:
    """Sets `Authorization` from a token provider; a 401 drops the token used.

    Give either a provider, or a factory to look one up by the call's
    interface and `name`.

    Example:
        >>> @use_filter(OAuthTokenFilter(factory=providers))
        ... class UserApi: ...
    """

    __slots__ = ("provider", "factory", "name", "order")

    def __init__(
        self,
        provider: TokenProvider | None = None,
        *,
        factory: TokenProviderFactory | None = None,
        name: str = "",
        order: int = 0,
    ) -> None:
        if provider is None and factory is None:
            raise ConfigurationError("OAuthTokenFilter needs a provider or a provider factory")
        self.provider = provider
        self.factory = factory
        self.name = name
        self.order = order

    def resolve(self, ctx: RequestContext) -> TokenProvider:
        if self.provider is not None:
            return self.provider
        assert self.factory is not None
        return self.factory.create(ctx.action.identity.interface, self.name)

    async def __call__(self, ctx: RequestContext, next: Next) -> ResponseContext:
        provider = self.resolve(ctx)
        token = await provider.get_token()
        ctx.request.headers["Authorization"] = token.authorization

        response_ctx = await next(ctx)
        response = response_ctx.response
        if response is not None and response.status_code == 401:
            provider.clear_token(token)
        return response_ctx

    def __repr__(self) -> str:
        return f"OAuthTokenFilter(name={self.name!r}, order={self.order})"
