"""Dispatch from interface methods to compiled descriptors.

Descriptors are built eagerly when a client is created, so a malformed
interface fails at creation rather than on first call.

Example:
    >>> factory = HttpApiFactory()
    >>> async with factory.create(UserApi, options=HttpApiOptions(http_host="https://api.example.com")) as api:
    ...     user = await api.get_user(1)
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any, TypeVar, cast

import httpx

from ..descriptors import DescriptorRegistry
from .invoker import ActionInvoker
from .options import HttpApiOptions

if TYPE_CHECKING:
    from types import TracebackType

    from ..descriptors import ActionDescriptor

T = TypeVar("T")


class HttpApiProxy:
    """Dispatcher standing in for an interface instance."""

    __slots__ = ("_interface", "_descriptors", "_client", "_options", "_invoker", "_owns_client", "_methods")

    def __init__(
        self,
        interface: type,
        descriptors: Mapping[str, ActionDescriptor],
        client: httpx.AsyncClient,
        options: HttpApiOptions,
        invoker: ActionInvoker,
        *,
        owns_client: bool = False,
    ) -> None:
        self._interface = interface
        self._descriptors = dict(descriptors)
        self._client = client
        self._options = options
        self._invoker = invoker
        self._owns_client = owns_client
        self._methods = {name: self._bind(d) for name, d in self._descriptors.items()}

    def _bind(self, descriptor: ActionDescriptor) -> Callable[..., Awaitable[Any]]:
        invoker, client, options = self._invoker, self._client, self._options

        async def call(*args: object, **kwargs: object) -> Any:
            return await invoker.invoke(descriptor, client, options, descriptor.bind_arguments(args, kwargs))

        call.__name__ = descriptor.name
        call.__qualname__ = f"{self._interface.__qualname__}.{descriptor.name}"
        call.__doc__ = descriptor.member.__doc__
        return call

    def __getattr__(self, name: str) -> Callable[..., Awaitable[Any]]:
        try:
            return self._methods[name]
        except KeyError:
            raise AttributeError(f"{self._interface.__qualname__} has no action '{name}'") from None

    def __dir__(self) -> list[str]:
        return [*super().__dir__(), *self._methods]

    @property
    def descriptors(self) -> Mapping[str, ActionDescriptor]:
        return self._descriptors

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    @property
    def options(self) -> HttpApiOptions:
        return self._options

    async def aclose(self) -> None:
        """Close the http client if this proxy created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpApiProxy:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"<HttpApiProxy {self._interface.__qualname__} actions={list(self._methods)}>"


class HttpApiFactory:
    """Creates interface clients sharing one descriptor registry and invoker.

    Construct one per application (or per test) and pass it where clients
    are created; there is no module-level default.

    Args:
        registry: Descriptor table (new one if omitted)
        invoker: Call executor (new one if omitted)
        options: Default options for clients created without their own
    """

    __slots__ = ("registry", "invoker", "options")

    def __init__(
        self,
        registry: DescriptorRegistry | None = None,
        invoker: ActionInvoker | None = None,
        options: HttpApiOptions | None = None,
    ) -> None:
        self.registry = registry or DescriptorRegistry()
        self.invoker = invoker or ActionInvoker()
        self.options = options or HttpApiOptions()

    def create(
        self,
        interface: type[T],
        client: httpx.AsyncClient | None = None,
        options: HttpApiOptions | None = None,
    ) -> T:
        """Build every descriptor of `interface` and return its dispatcher.

        When no client is given one is created and closed by aclose().
        """
        descriptors = self.registry.build_all(interface)
        owns_client = client is None
        proxy = HttpApiProxy(
            interface,
            descriptors,
            client or httpx.AsyncClient(),
            options or self.options,
            self.invoker,
            owns_client=owns_client,
        )
        return cast(T, proxy)
