"""Logging filter for api calls."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ....foundation.config import get_settings
from ..middleware import Next

if TYPE_CHECKING:
    from ...contexts import RequestContext, ResponseContext


@dataclass(slots=True)
class LoggingFilter:
    """Log each call with timing and response status.

    Logs at INFO level for 2xx/3xx responses, WARNING for error statuses and
    short-circuited calls, and records exceptions. Each action logs to
    `apicase.<Interface>.<method>`. Duration is stored in
    ctx.properties['duration_ms'].

    Args:
        log_content: Include request and response bodies (default from settings)
        max_content_length: Truncate logged bodies to this many characters

    Example:
        >>> @use_filter(LoggingFilter(log_content=True))
        ... class UserApi: ...
    """

    order: int = 0
    log_content: bool = field(default_factory=lambda: get_settings().logging.log_content)
    max_content_length: int = field(default_factory=lambda: get_settings().logging.max_content_length)

    def _logger(self, ctx: RequestContext) -> logging.Logger:
        return logging.getLogger(f"apicase.{ctx.action_name}")

    def _content(self, body: bytes | None) -> str:
        if not body:
            return ""
        text = body.decode(errors="replace")
        if len(text) > self.max_content_length:
            text = f"{text[:self.max_content_length]}..."
        return f"\n{text}"

    async def __call__(self, ctx: RequestContext, next: Next) -> ResponseContext:
        log = self._logger(ctx)
        request = ctx.request
        start = time.perf_counter()
        body = self._content(request.content) if self.log_content else ""
        log.info(f"[{ctx.action_name}] {request.method} {request.uri}{body}")

        try:
            response_ctx = await next(ctx)
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            ctx.properties["duration_ms"] = duration_ms
            log.exception(f"[{ctx.action_name}] EXCEPTION ({duration_ms:.1f}ms): {e}")
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        ctx.properties["duration_ms"] = duration_ms
        response = response_ctx.response
        if response is None:
            log.warning(f"[{ctx.action_name}] NO RESPONSE ({duration_ms:.1f}ms)")
            return response_ctx

        level = logging.WARNING if response.is_error else logging.INFO
        body = self._content(response.content) if self.log_content else ""
        log.log(level, f"[{ctx.action_name}] {response.status_code} ({duration_ms:.1f}ms){body}")
        return response_ctx
