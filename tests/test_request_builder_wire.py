from __future__ import annotations

import base64
import json
from datetime import timedelta

import httpx
from pydantic import BaseModel

from fluentrest.core.rest import RestClient
from fluentrest.core.rest.errors import ConfigurationError


class NewUser(BaseModel):
    name: str
    age: int


def _capture(store: list[httpx.Request]):
    def handler(request: httpx.Request) -> httpx.Response:
        store.append(request)
        return httpx.Response(200, json={"ok": True})

    return handler


def test_get_composes_sub_path_and_params(make_client) -> None:
    seen: list[httpx.Request] = []
    client = make_client(_capture(seen))

    result = client.get().sub_resourcef("/users/%d", 42).with_param("limit", "10").with_param("limit", "20").do()

    assert result.ok
    assert seen[0].method == "GET"
    assert seen[0].url.path == "/users/42"
    assert seen[0].url.params.get_list("limit") == ["10", "20"]


def test_forced_headers_override_caller_values(make_client) -> None:
    seen: list[httpx.Request] = []
    client = make_client(_capture(seen))

    client.get().with_header(
        {"Content-Type": "text/plain", "Accept": "text/html", "Accept-Charset": "latin-1", "Accept-Encoding": "identity"}
    ).do()

    headers = seen[0].headers
    assert headers["content-type"] == "application/json"
    assert headers["accept"] == "application/json"
    assert headers["accept-charset"] == "utf-8"
    assert headers.get("accept-encoding") != "identity"


def test_with_header_appends_to_existing_keys(make_client) -> None:
    seen: list[httpx.Request] = []
    client = make_client(_capture(seen))

    client.get().with_header({"X-Tag": "a"}).with_header(httpx.Headers([("X-Tag", "b"), ("X-Other", "c")])).do()

    assert seen[0].headers.get_list("x-tag") == ["a", "b"]
    assert seen[0].headers["x-other"] == "c"


def test_body_is_serialized_as_json(make_client) -> None:
    seen: list[httpx.Request] = []
    client = make_client(_capture(seen))

    client.post().sub_resource("users").body(NewUser(name="ada", age=36)).do()
    client.put().sub_resource("users/1").body({"tags": ["x"]}).do()

    assert json.loads(seen[0].content) == {"name": "ada", "age": 36}
    assert json.loads(seen[1].content) == {"tags": ["x"]}


def test_absent_body_is_empty_not_null(make_client) -> None:
    seen: list[httpx.Request] = []
    client = make_client(_capture(seen))

    client.post().body(None).do()

    assert seen[0].content == b""


def test_unserializable_body_short_circuits_without_network(make_client) -> None:
    seen: list[httpx.Request] = []
    client = make_client(_capture(seen))

    request = client.post().body(object())
    result = request.do()

    assert seen == []
    assert isinstance(result.error, ConfigurationError)
    assert request.error is result.error


def test_malformed_base_url_surfaces_configuration_error_without_network() -> None:
    seen: list[httpx.Request] = []
    client = RestClient(httpx.Client(transport=httpx.MockTransport(_capture(seen))), "http://api.example.com:notaport")
    request = client.get().sub_resource("users")

    first = request.do()
    second = request.do()

    assert seen == []
    assert isinstance(first.error, ConfigurationError)
    assert second.error is first.error


def test_basic_auth_applied_when_credentials_set(make_client) -> None:
    seen: list[httpx.Request] = []
    client = make_client(_capture(seen)).set_basic_auth("admin", "s3cret")

    client.delete().sub_resourcef("users/%s", "bob").do()
    client.patch().with_basic_auth("", "").do()

    expected = "Basic " + base64.b64encode(b"admin:s3cret").decode("ascii")
    assert seen[0].method == "DELETE"
    assert seen[0].headers["authorization"] == expected
    assert "authorization" not in seen[1].headers


def test_timeout_sets_query_hint_and_transport_deadline(make_client) -> None:
    seen: list[httpx.Request] = []
    client = make_client(_capture(seen))

    client.get().with_timeout(5).do()

    assert seen[0].url.params["timeout"] == "5s"
    read_timeout = seen[0].extensions["timeout"]["read"]
    assert 0 < read_timeout <= 5


def test_params_added_after_first_do_are_used_on_next_do(make_client) -> None:
    seen: list[httpx.Request] = []
    client = make_client(_capture(seen))

    request = client.get().with_params({"page": 1})
    request.do()
    request.with_param("page", 2).do()

    assert seen[0].url.params.get_list("page") == ["1"]
    assert seen[1].url.params.get_list("page") == ["1", "2"]


def test_non_positive_timeout_means_no_timeout(make_client) -> None:
    seen: list[httpx.Request] = []
    client = make_client(_capture(seen))

    first = client.get().with_timeout(-1).do()
    second = client.get().with_timeout(timedelta(seconds=-3)).do()

    assert first.ok and second.ok
    assert "timeout" not in seen[0].url.params
    assert "timeout" not in seen[1].url.params
    assert seen[0].extensions["timeout"] == client.http_client.timeout.as_dict()
