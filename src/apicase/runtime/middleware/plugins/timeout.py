"""Timeout filter for api calls."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ....foundation.errors import ApiTimeoutError
from ..middleware import Next

if TYPE_CHECKING:
    from ...contexts import RequestContext, ResponseContext


@dataclass(slots=True)
class TimeoutFilter:
    """Bound everything inside this filter (later filters and the send) by a timeout.

    Wraps `next` in asyncio.wait_for, so the inner stages are cancelled when
    the timeout expires. Raises ApiTimeoutError.

    Args:
        timeout_seconds: Maximum time for the wrapped stages
        per_action_overrides: Dict of "Interface.method" -> timeout

    Example:
        >>> @use_filter(TimeoutFilter(
        ...     timeout_seconds=30.0,
        ...     per_action_overrides={"ReportApi.export": 120.0},
        ... ))
    """

    timeout_seconds: float = 30.0
    per_action_overrides: dict[str, float] = field(default_factory=dict)
    order: int = 0

    async def __call__(self, ctx: RequestContext, next: Next) -> ResponseContext:
        timeout = self.per_action_overrides.get(ctx.action_name, self.timeout_seconds)
        ctx.properties["timeout_configured"] = timeout
        try:
            return await asyncio.wait_for(next(ctx), timeout=timeout)
        except TimeoutError:
            raise ApiTimeoutError(ctx.action_name, timeout) from None
