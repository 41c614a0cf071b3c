"""Tests for descriptor building and the descriptor registry."""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Annotated, TypeVar

import httpx
import pytest
from pydantic import BaseModel

from apicase.attributes import (
    ActionHeader,
    FormContent,
    Header,
    HttpHost,
    HttpMethod,
    JsonContent,
    JsonReturn,
    PathQuery,
    RawReturn,
    Uri,
    XmlReturn,
    header,
    http_get,
    http_host,
    http_post,
    returns,
    use_filter,
)
from apicase.descriptors import DescriptorRegistry, api_methods, build_action_descriptor
from apicase.foundation.errors import UnsupportedSignature

T = TypeVar("T")


class User(BaseModel):
    id: int
    name: str


class Recorder:
    def __init__(self, label: str, order: int = 0) -> None:
        self.label = label
        self.order = order

    async def __call__(self, ctx, next):  # type: ignore[no-untyped-def]
        return await next(ctx)


@http_host("https://api.example.com/")
@use_filter(Recorder("interface"))
class UserApi:
    @http_get("users/{id}")
    @header("X-First", "1")
    @header("X-Second", "2")
    async def get_user(self, id: int, fields: list[str] | None = None) -> User: ...

    @http_post("users")
    @use_filter(Recorder("late", order=2), Recorder("early", order=1))
    async def create_user(self, user: User, trace: Annotated[str | None, Header("X-Trace")] = None) -> User: ...

    @http_post("users/search")
    async def search(self, name: str, since: datetime) -> list[User]: ...

    @http_get()
    async def download(self, url: Annotated[str, Uri()]) -> bytes: ...

    @http_get("raw")
    async def raw(self) -> httpx.Response: ...

    @http_post("xml")
    @returns(XmlReturn())
    async def xml(self, user: Annotated[User, FormContent()]) -> User: ...


# ─────────────────────────────────────────────────────────────────────────────
# Building
# ─────────────────────────────────────────────────────────────────────────────


def test_behaviors_sorted_with_declaration_order_for_ties() -> None:
    descriptor = build_action_descriptor(UserApi, "get_user")
    attributes = descriptor.attributes

    assert isinstance(attributes[0], HttpHost)
    assert isinstance(attributes[1], HttpMethod)
    assert [a.name for a in attributes[2:] if isinstance(a, ActionHeader)] == ["X-First", "X-Second"]


def test_filters_interface_first_then_by_order() -> None:
    descriptor = build_action_descriptor(UserApi, "create_user")
    assert [f.label for f in descriptor.filters] == ["interface", "early", "late"]


def test_get_parameters_bind_to_path_query() -> None:
    descriptor = build_action_descriptor(UserApi, "get_user")

    assert [p.name for p in descriptor.parameters] == ["id", "fields"]
    assert all(isinstance(p.attribute, PathQuery) for p in descriptor.parameters)
    assert descriptor.parameters[1].data_type == list[str]
    assert descriptor.parameters[1].has_default
    assert isinstance(descriptor.return_descriptor.attribute, JsonReturn)
    assert descriptor.return_descriptor.data_type is User


def test_non_get_binding_inference() -> None:
    create = build_action_descriptor(UserApi, "create_user")
    assert isinstance(create.parameters[0].attribute, JsonContent)
    assert isinstance(create.parameters[1].attribute, Header)

    search = build_action_descriptor(UserApi, "search")
    assert all(isinstance(p.attribute, PathQuery) for p in search.parameters)


def test_raw_return_types() -> None:
    assert isinstance(build_action_descriptor(UserApi, "download").return_descriptor.attribute, RawReturn)
    assert isinstance(build_action_descriptor(UserApi, "raw").return_descriptor.attribute, RawReturn)


def test_declared_return_behavior_wins() -> None:
    descriptor = build_action_descriptor(UserApi, "xml")
    assert isinstance(descriptor.return_descriptor.attribute, XmlReturn)
    assert isinstance(descriptor.parameters[0].attribute, FormContent)


def test_returns_decorator_exported_next_to_return_behaviors() -> None:
    from apicase.oauth import HttpOAuthClient

    assert callable(returns)
    descriptors = DescriptorRegistry().build_all(HttpOAuthClient)
    attribute = descriptors["request_token"].return_descriptor.attribute
    assert isinstance(attribute, JsonReturn)
    assert not attribute.ensure_success_status


def test_identity_includes_parameter_types() -> None:
    identity = build_action_descriptor(UserApi, "get_user").identity
    assert identity.interface is UserApi
    assert identity.name == "get_user"
    assert identity.parameter_types == (int, list[str])


def test_bind_arguments() -> None:
    descriptor = build_action_descriptor(UserApi, "get_user")

    assert descriptor.bind_arguments((1,), {}) == (1, None)
    assert descriptor.bind_arguments((), {"id": 2, "fields": ["a"]}) == (2, ["a"])
    with pytest.raises(TypeError, match="missing"):
        descriptor.bind_arguments((), {})
    with pytest.raises(TypeError, match="unexpected"):
        descriptor.bind_arguments((1,), {"other": 1})
    with pytest.raises(TypeError, match="multiple"):
        descriptor.bind_arguments((1,), {"id": 1})


# ─────────────────────────────────────────────────────────────────────────────
# Unsupported shapes
# ─────────────────────────────────────────────────────────────────────────────


class BadApi:
    @http_get()
    async def variadic(self, *ids: int) -> str: ...

    @http_get()
    async def keywords(self, **params: str) -> str: ...

    @http_get()
    def sync(self, id: int) -> str: ...

    @http_get()
    async def generic(self, value: T) -> T: ...

    @property
    def prop(self) -> str:
        return ""

    @http_get()
    async def two_bindings(self, value: Annotated[str, PathQuery(), Header()]) -> str: ...

    @http_get()
    async def late_uri(self, id: int, url: Annotated[str, Uri()]) -> str: ...


@pytest.mark.parametrize("name", ["variadic", "keywords", "sync", "generic", "prop", "two_bindings", "late_uri"])
def test_unsupported_signatures(name: str) -> None:
    with pytest.raises(UnsupportedSignature) as exc_info:
        build_action_descriptor(BadApi, name)
    assert name in exc_info.value.method


def test_missing_member() -> None:
    with pytest.raises(UnsupportedSignature):
        build_action_descriptor(UserApi, "nope")


# ─────────────────────────────────────────────────────────────────────────────
# Registry
# ─────────────────────────────────────────────────────────────────────────────


def test_registry_builds_once_per_method() -> None:
    registry = DescriptorRegistry()

    with ThreadPoolExecutor(max_workers=16) as pool:
        descriptors = list(pool.map(lambda _: registry.get_or_build(UserApi, "get_user"), range(200)))

    assert all(d is descriptors[0] for d in descriptors)
    assert len(registry) == 1


def test_registry_build_all() -> None:
    registry = DescriptorRegistry()
    descriptors = registry.build_all(UserApi)

    assert list(descriptors) == api_methods(UserApi)
    assert set(descriptors) == {"get_user", "create_user", "search", "download", "raw", "xml"}
    assert len(registry) == 6


def test_registry_does_not_cache_failures() -> None:
    registry = DescriptorRegistry()
    with pytest.raises(UnsupportedSignature):
        registry.get_or_build(BadApi, "variadic")
    assert len(registry) == 0
