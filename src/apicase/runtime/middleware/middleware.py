"""Core filter types and chain composition.

Filters follow continuation-passing style: each filter receives the request
context and a `next` continuation covering every later filter plus the
transport send. Code before `await next(ctx)` is the request phase, code
after it is the response phase, so response phases unwind in reverse order.

A filter calls `next` at most once. Not calling it short-circuits the rest of
the request phase, including the send; the filter then returns its own
ResponseContext.
"""

from __future__ import annotations

from collections.abc import Coroutine, Sequence
from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..contexts import RequestContext, ResponseContext


# Type alias for the continuation function
Next = Callable[["RequestContext"], "Coroutine[Any, Any, ResponseContext]"]


@runtime_checkable
class ApiFilter(Protocol):
    """Protocol for call filters.

    Filters intercept calls for cross-cutting concerns; `order` sorts them
    ascending (lowest runs first before the send and last after it).

    Example:
        >>> @dataclass
        ... class TimingFilter:
        ...     order: int = 0
        ...     async def __call__(self, ctx, next):
        ...         start = time.perf_counter()
        ...         response = await next(ctx)
        ...         ctx.properties["duration"] = time.perf_counter() - start
        ...         return response
    """

    order: int

    async def __call__(self, ctx: RequestContext, next: Next) -> ResponseContext:
        """Execute filter logic.

        Args:
            ctx: The call's request context
            next: Continuation to call the downstream chain

        Returns:
            The call's response context (possibly modified)
        """
        ...


def compose(filters: Sequence[ApiFilter], send: Next) -> Next:
    """Compose filters around `send` into a single execution function.

    Args:
        filters: Ordered filters (first = outermost)
        send: Innermost stage performing the transport call

    Returns:
        Composed async function: (ctx) -> ResponseContext
    """
    chain: Next = send
    for f in reversed(filters):
        # Capture f and current chain in closure
        def make_wrapper(flt: ApiFilter, nxt: Next) -> Next:
            async def wrapped(ctx: RequestContext) -> ResponseContext:
                return await flt(ctx, nxt)
            return wrapped
        chain = make_wrapper(f, chain)

    return chain
