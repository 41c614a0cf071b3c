"""Behavior base classes attached to interfaces, methods, parameters and returns.

Action behaviors run first in ascending `order`, then every parameter's
binding behavior in index order, then the filter pipeline wraps the send,
and finally the return behavior decodes the response.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from ..foundation.errors import ResponseStatusError

if TYPE_CHECKING:
    from ..descriptors import ActionIdentity, ParameterDescriptor
    from ..runtime.contexts import ParameterContext, RequestContext, ResponseContext

# Orders reserved for host and method resolution, which everything else builds on
MIN_ORDER = -(2**31)
HOST_ORDER = MIN_ORDER
METHOD_ORDER = MIN_ORDER + 1


class ApiActionAttribute(ABC):
    """Request-phase step applied to every call of an action."""

    order: int = 0

    @abstractmethod
    async def on_request(self, ctx: RequestContext) -> None: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(order={self.order})"


class ApiParameterAttribute(ABC):
    """Binding behavior mapping one parameter value into the request."""

    @abstractmethod
    async def on_request(self, ctx: ParameterContext) -> None: ...

    def validate(self, parameter: ParameterDescriptor, identity: ActionIdentity) -> None:
        """Reject parameter shapes this behavior cannot bind. Runs at build time."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ApiReturnAttribute(ABC):
    """Decodes the response into the call's result."""

    accept: ClassVar[str | None] = None

    def __init__(self, *, ensure_success_status: bool = True) -> None:
        self.ensure_success_status = ensure_success_status

    async def on_request(self, ctx: RequestContext) -> None:
        if self.accept and "Accept" not in ctx.request.headers:
            ctx.request.headers["Accept"] = self.accept

    async def on_response(self, ctx: ResponseContext) -> None:
        response = ctx.response
        if ctx.has_result or response is None:
            return
        if self.ensure_success_status and not response.is_success:
            raise ResponseStatusError(response)
        ctx.result = await self.decode(ctx)

    @abstractmethod
    async def decode(self, ctx: ResponseContext) -> object: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(ensure_success_status={self.ensure_success_status})"
