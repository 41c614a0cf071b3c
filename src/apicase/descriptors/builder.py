"""Compile interface methods into ActionDescriptors, once per method.

Build steps:
    1. Validate the member: an `async def` method, not a property, static or
       class method, with no type parameters or variadic parameters
    2. Collect interface-level then method-level behaviors, stable-sorted by
       order key into action behaviors and filters
    3. Give every parameter exactly one binding behavior: its `Annotated`
       marker, else PathQuery for GET/HEAD actions and simple types, else
       JsonContent
    4. Pick the return behavior: returns(...) if declared, else RawReturn for
       str/bytes/httpx.Response/None and JsonReturn for everything else

Example:
    >>> registry = DescriptorRegistry()
    >>> descriptor = registry.get_or_build(UserApi, "get_user")
    >>> [p.attribute for p in descriptor.parameters]
    [PathQuery()]
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Annotated, TypeVar, get_args, get_origin, get_type_hints

from ..attributes import (
    ApiActionAttribute,
    ApiParameterAttribute,
    ApiReturnAttribute,
    HttpMethod,
    JsonContent,
    JsonReturn,
    RAW_TYPES,
    PathQuery,
    RawReturn,
    declared_behaviors,
)
from ..foundation.errors import UnsupportedSignature
from ..foundation.formats import is_simple_type, unwrap_optional
from ..io.cache import ConcurrentCache
from .descriptor import ActionDescriptor, ActionIdentity, ParameterDescriptor, ReturnDescriptor

if TYPE_CHECKING:
    from ..runtime.middleware import ApiFilter

logger = logging.getLogger("apicase.descriptors")

_PATH_QUERY = PathQuery()
_JSON_CONTENT = JsonContent()
_RAW_RETURN = RawReturn()
_JSON_RETURN = JsonReturn()

_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


def api_methods(interface: type) -> list[str]:
    """Public member names of an interface (and its bases) that declare actions."""
    names: dict[str, None] = {}
    for klass in reversed(interface.__mro__):
        if klass is object:
            continue
        for name, member in vars(klass).items():
            if name.startswith("_"):
                continue
            if inspect.isfunction(member) or isinstance(member, (property, staticmethod, classmethod)):
                names[name] = None
    return list(names)


def build_action_descriptor(interface: type, name: str) -> ActionDescriptor:
    """Compile one interface method. Raises UnsupportedSignature for malformed shapes."""
    where = f"{interface.__qualname__}.{name}"
    try:
        member = inspect.getattr_static(interface, name)
    except AttributeError:
        raise UnsupportedSignature(where, "no such member") from None

    if isinstance(member, property):
        raise UnsupportedSignature(where, "property accessors cannot be actions")
    if isinstance(member, (staticmethod, classmethod)):
        raise UnsupportedSignature(where, "static and class methods cannot be actions")
    if not inspect.isfunction(member):
        raise UnsupportedSignature(where, f"not a method ({type(member).__name__})")
    if getattr(member, "__type_params__", ()):
        raise UnsupportedSignature(where, "generic methods are not supported")
    if not inspect.iscoroutinefunction(member):
        raise UnsupportedSignature(where, "must be declared `async def`")

    try:
        hints = get_type_hints(member, localns=dict(vars(interface)), include_extras=True)
    except (NameError, TypeError) as e:
        raise UnsupportedSignature(where, f"unresolvable annotation: {e}") from e

    params = list(inspect.signature(member).parameters.values())[1:]  # drop self
    for p in params:
        if p.kind in _VARIADIC:
            raise UnsupportedSignature(where, f"parameter '{p.name}' is variadic and cannot be bound by position")
        if p.kind is inspect.Parameter.KEYWORD_ONLY:
            raise UnsupportedSignature(where, f"parameter '{p.name}' is keyword-only and has no position")

    annotations = {p.name: hints.get(p.name, object) for p in params}
    return_annotation = hints.get("return", object)
    for label, tp in [*annotations.items(), ("return", return_annotation)]:
        if _is_generic(tp):
            raise UnsupportedSignature(where, f"'{label}' is annotated with a type variable")

    identity = ActionIdentity(interface, name, tuple(unwrap_optional(a) for a in annotations.values()))
    actions, filters, returned = _collect_behaviors(identity, interface, member)
    is_get_head = any(isinstance(a, HttpMethod) and a.is_get_or_head for a in actions)

    parameters: list[ParameterDescriptor] = []
    for index, p in enumerate(params):
        annotation = annotations[p.name]
        data_type = unwrap_optional(annotation)
        attribute = _explicit_binding(identity, p.name, annotation) or _infer_binding(is_get_head, data_type)
        descriptor = ParameterDescriptor(index, p.name, data_type, attribute, p.default)
        attribute.validate(descriptor, identity)
        parameters.append(descriptor)

    return_type = unwrap_optional(return_annotation)
    return_attribute = returned or (_RAW_RETURN if return_type in RAW_TYPES else _JSON_RETURN)

    descriptor = ActionDescriptor(
        identity=identity,
        member=member,
        attributes=actions,
        filters=filters,
        parameters=tuple(parameters),
        return_descriptor=ReturnDescriptor(return_type, return_attribute),
    )
    logger.debug(f"[{identity}] Built descriptor: {len(actions)} behaviors, {len(filters)} filters")
    return descriptor


def _collect_behaviors(
    identity: ActionIdentity,
    interface: type,
    member: Callable[..., object],
) -> tuple[tuple[ApiActionAttribute, ...], tuple[ApiFilter, ...], ApiReturnAttribute | None]:
    declared: list[object] = []
    for klass in reversed(interface.__mro__):
        declared.extend(declared_behaviors(klass))
    declared.extend(declared_behaviors(member))

    actions: list[ApiActionAttribute] = []
    filters: list[ApiFilter] = []
    returned: ApiReturnAttribute | None = None
    for behavior in declared:
        if isinstance(behavior, ApiActionAttribute):
            actions.append(behavior)
        elif isinstance(behavior, ApiReturnAttribute):
            returned = behavior
        elif callable(behavior):
            filters.append(behavior)  # type: ignore[arg-type]
        else:
            raise UnsupportedSignature(str(identity), f"unknown behavior {behavior!r}")

    def order(b: object) -> int:
        return getattr(b, "order", 0)

    # sorted() is stable: equal keys keep declaration order
    return tuple(sorted(actions, key=order)), tuple(sorted(filters, key=order)), returned


def _explicit_binding(identity: ActionIdentity, name: str, annotation: object) -> ApiParameterAttribute | None:
    if get_origin(annotation) is not Annotated:
        return None
    markers = [m for m in annotation.__metadata__ if isinstance(m, ApiParameterAttribute)]  # type: ignore[attr-defined]
    if len(markers) > 1:
        raise UnsupportedSignature(str(identity), f"parameter '{name}' declares {len(markers)} binding behaviors")
    return markers[0] if markers else None


def _infer_binding(is_get_head: bool, data_type: object) -> ApiParameterAttribute:
    if is_get_head or is_simple_type(data_type):
        return _PATH_QUERY
    return _JSON_CONTENT


def _is_generic(tp: object) -> bool:
    if get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    if isinstance(tp, TypeVar):
        return True
    return any(_is_generic(arg) for arg in _flat_args(tp))


def _flat_args(tp: object) -> list[object]:
    args: list[object] = []
    for arg in get_args(tp):
        args.extend(arg if isinstance(arg, list) else [arg])
    return args


class DescriptorRegistry:
    """Process-local descriptor table built on a single-flight cache.

    Each (interface, method name) is compiled exactly once, even when many
    threads ask for it at the same time. Build failures are not cached.
    """

    __slots__ = ("_cache",)

    def __init__(self) -> None:
        self._cache: ConcurrentCache[tuple[type, str], ActionDescriptor] = ConcurrentCache()

    def get_or_build(self, interface: type, name: str) -> ActionDescriptor:
        return self._cache.get_or_add((interface, name), lambda key: build_action_descriptor(*key))

    def build_all(self, interface: type) -> dict[str, ActionDescriptor]:
        """Descriptors for every action of the interface, keyed by method name."""
        return {name: self.get_or_build(interface, name) for name in api_methods(interface)}

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
