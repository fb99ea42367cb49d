from __future__ import annotations

import pytest

from bigip_ltm.adapters.api.base import RemoteCallError
from bigip_ltm.core import Presence, ResourceData
from bigip_ltm.resources import HttpProfileResource, build_http_profile

NAME = "/Common/test-http"


def _resource(device, reporter) -> HttpProfileResource:
    return HttpProfileResource(client=device, reporter=reporter)


def test_create_round_trips_declared_fields(fake_device, reporter):
    resource = _resource(fake_device, reporter)
    data = resource.new_data(
        {
            "name": NAME,
            "defaults_from": "/Common/http",
            "description": "some_profile",
            "fallback_host": "titanic",
            "fallback_status_codes": ["502", "500"],
            "head_insert": "X-Forwarded-IP: [expr {[IP::client_addr]}]",
            "lws_width": 120,
            "server_agent_name": "myBIG-IP",
        }
    )

    identity = resource.create(data)

    assert identity == NAME
    assert data.id == NAME
    state = data.state
    assert state["name"] == NAME
    assert state["description"] == "some_profile"
    assert state["fallback_host"] == "titanic"
    assert state["fallback_status_codes"] == frozenset({"500", "502"})
    assert state["head_insert"] == "X-Forwarded-IP: [expr {[IP::client_addr]}]"
    assert state["lws_width"] == 120
    assert state["server_agent_name"] == "myBIG-IP"
    assert state["proxy_type"] == "reverse"
    assert state["response_headers_permitted"] == frozenset()
    assert "encrypt_cookies" not in state
    assert "via_request" not in state

    posted = fake_device.payloads("add")[0]
    assert posted["fallbackStatusCodes"] == ["500", "502"]
    assert posted["headerInsert"] == "X-Forwarded-IP: [expr {[IP::client_addr]}]"


def test_create_without_fallback_host_sends_empty_string(fake_device, reporter):
    resource = _resource(fake_device, reporter)
    data = resource.new_data({"name": NAME, "defaults_from": "/Common/http", "proxy_type": "reverse"})

    resource.create(data)

    posted = fake_device.payloads("add")[0]
    assert posted["fallbackHost"] == ""
    assert posted["proxyType"] == "reverse"
    assert posted["hsts"] == {}
    assert posted["enforcement"] == {}
    assert "fallback_host" not in data.state
    assert data.get("fallback_host") == ""


def test_explicit_empty_values_are_sent_and_kept(fake_device, reporter):
    resource = _resource(fake_device, reporter)
    data = resource.new_data({"name": NAME, "description": "", "encrypt_cookies": []})

    resource.create(data)

    posted = fake_device.payloads("add")[0]
    assert posted["description"] == ""
    assert posted["encryptCookies"] == []
    assert data.state["description"] == ""
    assert data.presence("description") is Presence.EMPTY


def test_create_reports_usage(fake_device, reporter):
    resource = _resource(fake_device, reporter)

    resource.create(resource.new_data({"name": NAME}))

    assert reporter.reports == [
        {
            "records": {"Client Version": fake_device.user_agent},
            "document_type": "bigip_ltm_profile_http",
            "document_version": "0.1.0",
            "asset_version": fake_device.user_agent,
        }
    ]


def test_telemetry_failure_does_not_fail_create(fake_device, reporter):
    reporter.fail = True
    resource = _resource(fake_device, reporter)
    data = resource.new_data({"name": NAME})

    resource.create(data)

    assert data.id == NAME
    assert NAME in fake_device.profiles


def test_disabled_telemetry_skips_reporting(fake_device, reporter):
    fake_device.teem_disabled = True
    resource = _resource(fake_device, reporter)

    resource.create(resource.new_data({"name": NAME}))

    assert reporter.reports == []


def test_create_failure_records_no_identity(fake_device, reporter, monkeypatch):
    def refuse(profile):
        raise RemoteCallError("01070734:3: Configuration error: profile already exists", status_code=409)

    monkeypatch.setattr(fake_device, "add_http_profile", refuse)
    resource = _resource(fake_device, reporter)
    data = resource.new_data({"name": NAME})

    with pytest.raises(RemoteCallError):
        resource.create(data)

    assert data.id == ""
    assert reporter.reports == []


def test_enforcement_block_reads_back_computed_values(fake_device, reporter):
    resource = _resource(fake_device, reporter)
    data = resource.new_data({"name": NAME, "enforcement": {"max_header_count": 64, "unknown_method": "reject"}})

    resource.create(data)

    assert fake_device.payloads("add")[0]["enforcement"] == {"maxHeaderCount": 64, "unknownMethod": "reject"}
    assert data.state["enforcement"] == {
        "max_header_count": 64,
        "max_header_size": 32768,
        "unknown_method": "reject",
    }


def test_enforcement_known_methods_copied_only_when_declared(fake_device, reporter):
    resource = _resource(fake_device, reporter)
    data = resource.new_data({"name": NAME, "enforcement": [{"known_methods": ["GET", "POST"], "max_header_count": 40}]})

    resource.create(data)

    assert data.state["enforcement"]["known_methods"] == ("GET", "POST")
    assert data.state["enforcement"]["max_header_count"] == 40


def test_hsts_block_is_flattened(fake_device, reporter):
    resource = _resource(fake_device, reporter)
    data = resource.new_data({"name": NAME, "http_strict_transport_security": {"mode": "enabled", "maximum_age": 3600}})

    resource.create(data)

    assert data.state["http_strict_transport_security"] == {
        "include_subdomains": "enabled",
        "maximum_age": 3600,
        "mode": "enabled",
        "preload": "disabled",
    }


def test_undeclared_blocks_are_not_recorded(fake_device, reporter):
    resource = _resource(fake_device, reporter)
    data = resource.new_data({"name": NAME})

    resource.create(data)

    assert "enforcement" not in data.state
    assert "http_strict_transport_security" not in data.state


def test_read_absent_profile_clears_identity(fake_device, reporter):
    resource = _resource(fake_device, reporter)
    data = resource.new_data({"name": NAME}, resource_id=NAME)

    resource.read(data)

    assert data.id == ""


def test_read_failure_propagates(fake_device, reporter, monkeypatch):
    def broken(name):
        raise RemoteCallError("HTTP 401 error", status_code=401)

    monkeypatch.setattr(fake_device, "get_http_profile", broken)
    resource = _resource(fake_device, reporter)

    with pytest.raises(RemoteCallError):
        resource.read(resource.new_data({"name": NAME}, resource_id=NAME))


def test_update_never_sends_name(fake_device, reporter):
    resource = _resource(fake_device, reporter)
    created = resource.new_data({"name": NAME, "description": "before", "fallback_host": "titanic"})
    resource.create(created)

    data = resource.new_data(
        {"name": NAME, "description": "after", "fallback_status_codes": ["404"]},
        state=created.state,
        resource_id=created.id,
    )
    resource.update(data)

    name, payload = fake_device.calls[-2][1:]
    assert fake_device.calls[-2][0] == "modify"
    assert name == NAME
    assert "name" not in payload
    assert payload["description"] == "after"
    assert payload["fallbackHost"] == ""
    assert data.id == NAME
    assert data.state["description"] == "after"
    assert data.state["fallback_status_codes"] == frozenset({"404"})
    assert "fallback_host" not in data.state


def test_update_ignores_renamed_declaration(fake_device, reporter):
    resource = _resource(fake_device, reporter)
    created = resource.new_data({"name": NAME})
    resource.create(created)

    data = resource.new_data({"name": "/Common/renamed"}, state=created.state, resource_id=NAME)
    resource.update(data)

    kind, key, payload = fake_device.calls[-2]
    assert kind == "modify"
    assert key == NAME
    assert "name" not in payload
    assert data.id == NAME
    assert data.state["name"] == NAME
    assert "/Common/renamed" not in fake_device.profiles


def test_update_keeps_computed_values_from_state(fake_device, reporter):
    resource = _resource(fake_device, reporter)
    created = resource.new_data({"name": NAME, "via_request": "append"})
    resource.create(created)

    data = resource.new_data({"name": NAME}, state=created.state, resource_id=created.id)
    resource.update(data)

    payload = fake_device.payloads("modify")[0]
    assert payload["viaRequest"] == "append"
    assert payload["proxyType"] == "reverse"
    assert data.state["via_request"] == "append"


def test_sets_compare_order_insensitively(fake_device, reporter):
    resource = _resource(fake_device, reporter)
    data = resource.new_data({"name": NAME, "fallback_status_codes": ["502", "500"]})
    resource.create(data)

    fake_device.profiles[NAME]["fallbackStatusCodes"] = ["500", "502"]
    resource.read(data)

    assert data.state["fallback_status_codes"] == frozenset(["502", "500"])


def test_delete_removes_profile(fake_device, reporter):
    resource = _resource(fake_device, reporter)
    data = resource.new_data({"name": NAME})
    resource.create(data)

    resource.delete(data)

    assert data.id == ""
    assert NAME not in fake_device.profiles


def test_delete_missing_profile_raises(fake_device, reporter):
    resource = _resource(fake_device, reporter)
    data = resource.new_data({"name": NAME}, resource_id=NAME)

    with pytest.raises(RemoteCallError):
        resource.delete(data)

    assert data.id == NAME


def test_import_state_copies_always_present_fields(fake_device, reporter):
    resource = _resource(fake_device, reporter)
    resource.create(resource.new_data({"name": NAME, "description": "imported"}))

    data = resource.import_state(NAME)

    assert data.id == NAME
    assert data.state == {
        "name": NAME,
        "defaults_from": "/Common/http",
        "proxy_type": "reverse",
        "response_headers_permitted": frozenset(),
        "xff_alternative_names": frozenset(),
    }


def test_import_state_of_missing_profile(fake_device, reporter):
    data = _resource(fake_device, reporter).import_state("/Common/absent")

    assert data.id == ""
    assert data.state == {}


def test_build_http_profile_for_modify(http_schema):
    data = ResourceData(http_schema, {"name": NAME, "tm_partition": "Common", "lws_width": 0})

    profile = build_http_profile(data, name=None)

    assert profile.name is None
    assert profile.tm_partition == "Common"
    assert profile.lws_width == 0
    assert profile.fallback_host == ""
