from __future__ import annotations

import json

import httpx
import pytest

from bigip_ltm.adapters.api.base import RemoteCallError
from bigip_ltm.adapters.api.bigip import HTTP_PROFILE_PATH, BigIPClient, build_base_url, uri_name
from bigip_ltm.adapters.api.http_profile import HttpProfile
from bigip_ltm.adapters.base import AdapterError
from bigip_ltm.config import DeviceSettings


def _client(handler) -> tuple[BigIPClient, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = BigIPClient(address="10.192.74.61", username="admin", password="secret")
    transport = httpx.MockTransport(recording)
    client._build_client = lambda: httpx.Client(
        base_url=client.base_url,
        headers=dict(client.default_headers),
        auth=client.auth,
        transport=transport,
    )
    return client, seen


def test_uri_name_and_base_url():
    assert uri_name("/Common/test-http") == "~Common~test-http"
    assert uri_name("/Common/apps/test-http") == "~Common~apps~test-http"
    assert build_base_url("10.0.0.1") == "https://10.0.0.1:443"
    assert build_base_url("https://bigip.example.com/", 8443) == "https://bigip.example.com:8443"


def test_get_http_profile_returns_profile():
    client, seen = _client(lambda request: httpx.Response(200, json={"name": "test-http", "fullPath": "/Common/test-http", "fallbackHost": "titanic"}))

    profile = client.get_http_profile("/Common/test-http")

    assert isinstance(profile, HttpProfile)
    assert profile.fallback_host == "titanic"
    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == f"{HTTP_PROFILE_PATH}/~Common~test-http"
    assert request.headers["Authorization"].startswith("Basic ")
    assert request.headers["User-Agent"] == client.user_agent


def test_get_http_profile_missing_returns_none():
    client, _ = _client(lambda request: httpx.Response(404, json={"code": 404, "message": "Object not found"}))

    assert client.get_http_profile("/Common/absent") is None


def test_get_http_profile_server_error_raises():
    client, _ = _client(lambda request: httpx.Response(500, json={"code": 500, "message": "mcpd is restarting"}))

    with pytest.raises(RemoteCallError) as excinfo:
        client.get_http_profile("/Common/test-http")

    assert excinfo.value.status_code == 500
    assert "mcpd is restarting" in str(excinfo.value)


def test_add_http_profile_posts_full_payload():
    client, seen = _client(lambda request: httpx.Response(200, json={}))

    client.add_http_profile(HttpProfile(name="/Common/test-http", proxy_type="reverse"))

    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == HTTP_PROFILE_PATH
    assert json.loads(request.content) == {
        "name": "/Common/test-http",
        "proxyType": "reverse",
        "fallbackHost": "",
        "hsts": {},
        "enforcement": {},
    }


def test_modify_http_profile_puts_without_name():
    client, seen = _client(lambda request: httpx.Response(200, json={}))

    client.modify_http_profile("/Common/test-http", HttpProfile(name="/Common/other", description="changed"))

    request = seen[0]
    assert request.method == "PUT"
    assert request.url.path == f"{HTTP_PROFILE_PATH}/~Common~test-http"
    body = json.loads(request.content)
    assert "name" not in body
    assert body["description"] == "changed"


def test_delete_missing_profile_raises():
    client, seen = _client(lambda request: httpx.Response(404, json={"code": 404, "message": "01020036:3: The requested profile was not found."}))

    with pytest.raises(RemoteCallError) as excinfo:
        client.delete_http_profile("/Common/absent")

    assert seen[0].method == "DELETE"
    assert excinfo.value.status_code == 404
    assert "01020036:3" in str(excinfo.value)


def test_transport_errors_become_remote_call_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client, _ = _client(handler)

    with pytest.raises(RemoteCallError) as excinfo:
        client.get_http_profile("/Common/test-http")

    assert excinfo.value.status_code is None


def test_from_settings_requires_credentials():
    with pytest.raises(AdapterError) as excinfo:
        BigIPClient.from_settings(DeviceSettings(address="10.0.0.1"))

    assert "username" in str(excinfo.value)
    assert "password" in str(excinfo.value)


def test_from_settings_builds_client():
    client = BigIPClient.from_settings(
        DeviceSettings(address="10.0.0.1", username="admin", password="secret", port=8443, verify_tls=True),
        teem_disabled=True,
    )

    assert client.base_url == "https://10.0.0.1:8443"
    assert client.verify is True
    assert client.teem_disabled is True
    assert client.auth == ("admin", "secret")
