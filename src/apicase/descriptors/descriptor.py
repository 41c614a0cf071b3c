"""Immutable, compiled metadata for one interface method."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..attributes import ApiActionAttribute, ApiParameterAttribute, ApiReturnAttribute
    from ..runtime.middleware import ApiFilter


def type_name(tp: object) -> str:
    return tp.__qualname__ if isinstance(tp, type) else repr(tp)


@dataclass(frozen=True, slots=True)
class ActionIdentity:
    """Owning interface + method name + parameter types."""

    interface: type
    name: str
    parameter_types: tuple[object, ...] = ()

    def __str__(self) -> str:
        params = ", ".join(type_name(t) for t in self.parameter_types)
        return f"{self.interface.__qualname__}.{self.name}({params})"


@dataclass(frozen=True, slots=True)
class ParameterDescriptor:
    """One parameter and the single behavior that binds it."""

    index: int
    name: str
    data_type: object
    attribute: ApiParameterAttribute
    default: object = inspect.Parameter.empty

    @property
    def has_default(self) -> bool:
        return self.default is not inspect.Parameter.empty


@dataclass(frozen=True, slots=True)
class ReturnDescriptor:
    """Declared result type and the behavior that decodes it."""

    data_type: object
    attribute: ApiReturnAttribute


@dataclass(frozen=True, slots=True, eq=False)
class ActionDescriptor:
    """Compiled action. Behavior tuples are sorted by order key, ties in declaration order."""

    identity: ActionIdentity
    member: Callable[..., object]
    attributes: tuple[ApiActionAttribute, ...]
    filters: tuple[ApiFilter, ...]
    parameters: tuple[ParameterDescriptor, ...]
    return_descriptor: ReturnDescriptor

    @property
    def name(self) -> str:
        return self.identity.name

    def bind_arguments(self, args: tuple[object, ...], kwargs: Mapping[str, object]) -> tuple[object, ...]:
        """Map a call's positional and keyword arguments onto parameter order."""
        if len(args) > len(self.parameters):
            raise TypeError(f"{self.identity} takes {len(self.parameters)} arguments but {len(args)} were given")
        names = {p.name for p in self.parameters}
        if unknown := set(kwargs) - names:
            raise TypeError(f"{self.identity} got unexpected keyword arguments: {', '.join(sorted(unknown))}")
        values: list[object] = []
        for p in self.parameters:
            if p.index < len(args):
                if p.name in kwargs:
                    raise TypeError(f"{self.identity} got multiple values for argument '{p.name}'")
                values.append(args[p.index])
            elif p.name in kwargs:
                values.append(kwargs[p.name])
            elif p.has_default:
                values.append(p.default)
            else:
                raise TypeError(f"{self.identity} missing required argument: '{p.name}'")
        return tuple(values)

    def __repr__(self) -> str:
        return f"ActionDescriptor({self.identity})"
