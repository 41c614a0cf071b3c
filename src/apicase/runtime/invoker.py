"""Call execution: bindings, filter pipeline, transport, result decoding."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from ..foundation.formats import type_adapter
from ..io.cache import ConcurrentCache
from .contexts import HttpRequestMessage, ParameterContext, RequestContext, ResponseContext
from .middleware import Next, compose

if TYPE_CHECKING:
    from ..descriptors import ActionDescriptor, ActionIdentity
    from .options import HttpApiOptions

logger = logging.getLogger("apicase.runtime")


async def send(ctx: RequestContext) -> ResponseContext:
    """Innermost pipeline stage: hand the assembled request to the transport."""
    request = ctx.request.build(ctx.client)
    response = await ctx.client.send(request)
    return ResponseContext(ctx, response)


class ActionInvoker:
    """Executes calls for resolved descriptors.

    Per call, in order:
        1. Action behaviors (ascending order key)
        2. Parameter binding behaviors (parameter order)
        3. Filter pipeline around the transport send
        4. Return behavior, unless a filter already set the result

    The composed pipeline is built once per descriptor and reused.

    Args:
        transport: Innermost stage; defaults to sending through the call's httpx client
    """

    __slots__ = ("_pipelines", "_send")

    def __init__(self, transport: Next = send) -> None:
        self._pipelines: ConcurrentCache[ActionIdentity, Next] = ConcurrentCache()
        self._send = transport

    def pipeline(self, descriptor: ActionDescriptor) -> Next:
        return self._pipelines.get_or_add(descriptor.identity, lambda _: compose(descriptor.filters, self._send))

    async def invoke(
        self,
        descriptor: ActionDescriptor,
        client: httpx.AsyncClient,
        options: HttpApiOptions,
        arguments: tuple[object, ...],
    ) -> object:
        ctx = RequestContext(
            action=descriptor,
            arguments=arguments,
            client=client,
            options=options,
            request=HttpRequestMessage(uri=_base_uri(client, options), timeout=options.timeout),
        )

        for attribute in descriptor.attributes:
            await attribute.on_request(ctx)
        for parameter, value in zip(descriptor.parameters, arguments, strict=True):
            if options.validate_arguments and value is not None:
                value = type_adapter(parameter.data_type).validate_python(value)
            await parameter.attribute.on_request(ParameterContext(ctx, parameter, value))

        returns = descriptor.return_descriptor.attribute
        await returns.on_request(ctx)
        if options.use_default_user_agent and "User-Agent" not in ctx.request.headers:
            ctx.request.headers["User-Agent"] = options.user_agent

        logger.debug(f"[{ctx.action_name}] {ctx.request.method} {ctx.request.uri}")
        response_ctx = await self.pipeline(descriptor)(ctx)
        await returns.on_response(response_ctx)
        return response_ctx.result if response_ctx.has_result else None


def _base_uri(client: httpx.AsyncClient, options: HttpApiOptions) -> str | None:
    if options.http_host:
        return options.http_host
    base = str(client.base_url)
    return base or None
