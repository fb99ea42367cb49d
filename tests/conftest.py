from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional

import pytest
from typer.testing import CliRunner

from bigip_ltm.adapters.api.base import RemoteCallError
from bigip_ltm.adapters.api.http_profile import HttpProfile
from bigip_ltm.adapters.telemetry import TelemetryError
from bigip_ltm.core import ResourceSchema, configure_logging, load_schema
from bigip_ltm.resources import HTTP_PROFILE_RESOURCE

DEVICE_DEFAULTS: Dict[str, Any] = {
    "defaultsFrom": "/Common/http",
    "proxyType": "reverse",
    "basicAuthRealm": "none",
    "headerErase": "none",
    "headerInsert": "none",
    "insertXforwardedFor": "disabled",
    "lwsSeparator": "none",
    "lwsWidth": 80,
    "acceptXff": "disabled",
    "oneconnectTransformations": "enabled",
    "redirectRewrite": "none",
    "requestChunking": "preserve",
    "responseChunking": "selective",
    "serverAgentName": "BigIP",
    "viaRequest": "preserve",
    "viaResponse": "preserve",
    "responseHeadersPermitted": [],
    "xffAlternativeNames": [],
    "hsts": {
        "includeSubdomains": "enabled",
        "maximumAge": 16070400,
        "mode": "disabled",
        "preload": "disabled",
    },
    "enforcement": {
        "knownMethods": ["CONNECT", "DELETE", "GET", "HEAD", "LOCK", "OPTIONS", "POST", "PROPFIND", "PUT", "TRACE", "UNLOCK"],
        "maxHeaderCount": 64,
        "maxHeaderSize": 32768,
        "unknownMethod": "allow",
    },
}


class FakeBigIP:
    """In-memory device that stores profiles as REST documents."""

    def __init__(self, *, teem_disabled: bool = False) -> None:
        self.user_agent = "python/bigip-ltm/0.1.0"
        self.teem_disabled = teem_disabled
        self.profiles: Dict[str, Dict[str, Any]] = {}
        self.calls: List[tuple] = []

    @staticmethod
    def _merge(base: Dict[str, Any], payload: Dict[str, Any]) -> Dict[str, Any]:
        merged = copy.deepcopy(base)
        for key, value in payload.items():
            if isinstance(value, dict):
                merged[key] = {**merged.get(key, {}), **value}
            else:
                merged[key] = value
        return merged

    def add_http_profile(self, profile: HttpProfile) -> None:
        payload = profile.to_payload()
        self.calls.append(("add", payload))
        self.profiles[payload["name"]] = self._merge(DEVICE_DEFAULTS, payload)

    def get_http_profile(self, name: str) -> Optional[HttpProfile]:
        self.calls.append(("get", name))
        stored = self.profiles.get(name)
        if stored is None:
            return None
        return HttpProfile.from_payload(stored)

    def modify_http_profile(self, name: str, profile: HttpProfile) -> None:
        payload = profile.to_payload(include_name=False)
        self.calls.append(("modify", name, payload))
        if name not in self.profiles:
            raise RemoteCallError(f"01020036:3: The requested profile ({name}) was not found.", status_code=404)
        self.profiles[name] = self._merge(self.profiles[name], payload)

    def delete_http_profile(self, name: str) -> None:
        self.calls.append(("delete", name))
        if name not in self.profiles:
            raise RemoteCallError(f"01020036:3: The requested profile ({name}) was not found.", status_code=404)
        del self.profiles[name]

    def payloads(self, kind: str) -> List[Dict[str, Any]]:
        return [call[-1] for call in self.calls if call[0] == kind]


class RecordingReporter:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.reports: List[Dict[str, Any]] = []

    def report(self, records, *, document_type, document_version, asset_version) -> None:
        self.reports.append(
            {
                "records": dict(records),
                "document_type": document_type,
                "document_version": document_version,
                "asset_version": asset_version,
            }
        )
        if self.fail:
            raise TelemetryError("telemetry endpoint unreachable")


@pytest.fixture(scope="session", autouse=True)
def structured_logging() -> None:
    configure_logging()


@pytest.fixture(scope="session")
def http_schema() -> ResourceSchema:
    return load_schema(HTTP_PROFILE_RESOURCE)


@pytest.fixture()
def fake_device() -> FakeBigIP:
    return FakeBigIP()


@pytest.fixture()
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture()
def cli_runner() -> CliRunner:
    return CliRunner()

