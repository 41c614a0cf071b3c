"""End-to-end tests: interface call -> descriptor -> invoker -> mock transport."""

from datetime import datetime, timedelta
from typing import Annotated

import httpx
import orjson
import pytest
from pydantic import BaseModel

from apicase.attributes import (
    FormContent,
    FormDataText,
    Header,
    Headers,
    JsonReturn,
    Timeout,
    Uri,
    XmlContent,
    XmlReturn,
    header,
    http_get,
    http_host,
    http_post,
    returns,
    timeout,
)
from apicase.foundation.errors import ConfigurationError, ResponseStatusError
from apicase.foundation.formats import FormatOptions
from apicase.runtime import HttpApiFactory, HttpApiOptions


class User(BaseModel):
    id: int
    name: str


class Page(BaseModel):
    PageIndex: int
    PageSize: int | None = None


@http_host("https://api.example.com/v1/")
class UserApi:
    @http_get("users/{id}")
    async def get_user(self, id: int, fields: list[str] | None = None) -> User: ...

    @http_get("users")
    async def list_users(self, page: Page, since: datetime | None = None) -> list[User]: ...

    @http_post("users")
    @header("X-Client", "tests")
    async def create_user(self, user: User, trace: Annotated[str | None, Header("X-Trace")] = None) -> User: ...

    @http_post("users/form")
    async def create_form(self, user: Annotated[User, FormContent()]) -> str: ...

    @http_post("users/multipart")
    async def create_multipart(self, user: Annotated[User, FormDataText()]) -> str: ...

    @http_post("users/xml")
    @returns(XmlReturn())
    async def create_xml(self, user: Annotated[User, XmlContent("user")]) -> User: ...

    @http_get("echo")
    async def echo_headers(self, headers: Annotated[dict[str, object], Headers()]) -> None: ...

    @http_get()
    async def fetch(self, url: Annotated[str, Uri()]) -> bytes: ...

    @http_get("slow")
    @timeout(5)
    async def slow(self, wait: Annotated[timedelta | None, Timeout()] = None) -> str: ...

    @http_get("missing")
    @returns(JsonReturn(ensure_success_status=False))
    async def lenient(self) -> dict[str, str]: ...


class HostlessApi:
    @http_get("users")
    async def list_users(self) -> list[User]: ...


class Recorder:
    """Mock transport handler remembering every request."""

    def __init__(self, status_code: int = 200, **kwargs: object) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = status_code
        self.kwargs = kwargs or {"json": {"id": 1, "name": "laojiu"}}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, **self.kwargs)  # type: ignore[arg-type]

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def factory() -> HttpApiFactory:
    return HttpApiFactory()


def client_for(recorder: Recorder, **kwargs: object) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(recorder), **kwargs)  # type: ignore[arg-type]


# ─────────────────────────────────────────────────────────────────────────────
# Request building
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_get_fills_path_and_query(factory: HttpApiFactory) -> None:
    recorder = Recorder()
    async with client_for(recorder) as client:
        api = factory.create(UserApi, client)
        user = await api.get_user(1, fields=["id", "name"])

    assert user == User(id=1, name="laojiu")
    request = recorder.last
    assert request.method == "GET"
    assert request.url.path == "/v1/users/1"
    assert request.url.params.get_list("fields") == ["id", "name"]
    assert request.headers["Accept"] == "application/json"
    assert request.headers["User-Agent"] == "apicase/1.0"


@pytest.mark.asyncio
async def test_get_flattens_object_into_query(factory: HttpApiFactory) -> None:
    recorder = Recorder(200, json=[{"id": 1, "name": "a"}, {"id": 2, "name": "b"}])
    options = HttpApiOptions(format_options=FormatOptions(use_camel_case=True, datetime_format="%Y-%m-%d"))
    async with client_for(recorder) as client:
        api = factory.create(UserApi, client, options)
        users = await api.list_users(Page(PageIndex=2), since=datetime(2010, 10, 10))

    assert [u.name for u in users] == ["a", "b"]
    assert list(recorder.last.url.params.multi_items()) == [("pageIndex", "2"), ("since", "2010-10-10")]


@pytest.mark.asyncio
async def test_post_json_body_and_headers(factory: HttpApiFactory) -> None:
    recorder = Recorder()
    async with client_for(recorder) as client:
        api = factory.create(UserApi, client)
        await api.create_user(User(id=1, name="laojiu"), trace="abc")

    request = recorder.last
    assert request.method == "POST"
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["X-Client"] == "tests"
    assert request.headers["X-Trace"] == "abc"
    assert orjson.loads(request.content) == {"id": 1, "name": "laojiu"}


@pytest.mark.asyncio
async def test_post_form_body(factory: HttpApiFactory) -> None:
    recorder = Recorder(200, text="ok")
    async with client_for(recorder) as client:
        api = factory.create(UserApi, client)
        assert await api.create_form(User(id=1, name="lao jiu")) == "ok"

    request = recorder.last
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert request.content == b"id=1&name=lao+jiu"


@pytest.mark.asyncio
async def test_post_multipart_text_fields(factory: HttpApiFactory) -> None:
    recorder = Recorder(200, text="ok")
    async with client_for(recorder) as client:
        api = factory.create(UserApi, client)
        await api.create_multipart(User(id=1, name="laojiu"))

    request = recorder.last
    assert request.headers["Content-Type"].startswith("multipart/form-data")
    assert b'name="name"' in request.content
    assert b"laojiu" in request.content


@pytest.mark.asyncio
async def test_xml_body_and_result(factory: HttpApiFactory) -> None:
    recorder = Recorder(200, text="<user><id>2</id><name>xml</name></user>")
    async with client_for(recorder) as client:
        api = factory.create(UserApi, client)
        user = await api.create_xml(User(id=1, name="laojiu"))

    assert user == User(id=2, name="xml")
    request = recorder.last
    assert request.headers["Content-Type"] == "application/xml"
    assert request.headers["Accept"] == "application/xml"
    assert b"<name>laojiu</name>" in request.content


@pytest.mark.asyncio
async def test_headers_from_mapping(factory: HttpApiFactory) -> None:
    recorder = Recorder(204)
    async with client_for(recorder) as client:
        api = factory.create(UserApi, client)
        assert await api.echo_headers({"class": 123, "User_Agent": "WebApiClient"}) is None

    request = recorder.last
    assert request.headers["class"] == "123"
    assert request.headers["User-Agent"] == "WebApiClient"


@pytest.mark.asyncio
async def test_uri_parameter_replaces_host(factory: HttpApiFactory) -> None:
    recorder = Recorder(200, content=b"\x00\x01")
    async with client_for(recorder) as client:
        api = factory.create(UserApi, client)
        assert await api.fetch("https://files.example.com/blob") == b"\x00\x01"

    assert str(recorder.last.url) == "https://files.example.com/blob"


@pytest.mark.asyncio
async def test_timeouts_from_action_and_parameter(factory: HttpApiFactory) -> None:
    recorder = Recorder(200, text="done")
    async with client_for(recorder) as client:
        api = factory.create(UserApi, client)
        await api.slow()
        await api.slow(timedelta(seconds=2))

    first, second = (r.extensions["timeout"] for r in recorder.requests)
    assert first["read"] == 5
    assert second["read"] == 2


# ─────────────────────────────────────────────────────────────────────────────
# Hosts and failures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_host_from_client_base_url(factory: HttpApiFactory) -> None:
    recorder = Recorder(200, json=[])
    async with client_for(recorder, base_url="https://base.example.com/api") as client:
        api = factory.create(HostlessApi, client)
        assert await api.list_users() == []

    assert str(recorder.last.url) == "https://base.example.com/api/users"


@pytest.mark.asyncio
async def test_host_from_options(factory: HttpApiFactory) -> None:
    recorder = Recorder(200, json=[])
    async with client_for(recorder) as client:
        api = factory.create(HostlessApi, client, HttpApiOptions(http_host="https://opts.example.com/"))
        await api.list_users()

    assert str(recorder.last.url) == "https://opts.example.com/users"


@pytest.mark.asyncio
async def test_missing_host_raises_configuration_error(factory: HttpApiFactory) -> None:
    recorder = Recorder()
    async with client_for(recorder) as client:
        api = factory.create(HostlessApi, client)
        with pytest.raises(ConfigurationError):
            await api.list_users()

    assert recorder.requests == []


@pytest.mark.asyncio
async def test_error_status_raises(factory: HttpApiFactory) -> None:
    recorder = Recorder(404, json={"error": "not found"})
    async with client_for(recorder) as client:
        api = factory.create(UserApi, client)
        with pytest.raises(ResponseStatusError) as exc_info:
            await api.get_user(404)
        assert await api.lenient() == {"error": "not found"}

    assert exc_info.value.status_code == 404


# ─────────────────────────────────────────────────────────────────────────────
# Proxy
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_proxy_rejects_unknown_action_and_bad_arguments(factory: HttpApiFactory) -> None:
    async with client_for(Recorder()) as client:
        api = factory.create(UserApi, client)
        with pytest.raises(AttributeError):
            api.not_an_action  # noqa: B018
        with pytest.raises(TypeError):
            await api.get_user()


@pytest.mark.asyncio
async def test_proxy_owns_client_it_creates(factory: HttpApiFactory) -> None:
    async with factory.create(UserApi) as api:
        client = api.client
    assert client.is_closed

    async with client_for(Recorder()) as shared:
        async with factory.create(UserApi, shared):
            pass
        assert not shared.is_closed


def test_factory_shares_descriptors(factory: HttpApiFactory) -> None:
    first = factory.create(UserApi, httpx.AsyncClient())
    second = factory.create(UserApi, httpx.AsyncClient())

    assert first.descriptors["get_user"] is second.descriptors["get_user"]
    assert len(factory.registry) == len(first.descriptors)
