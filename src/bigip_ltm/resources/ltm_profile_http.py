"""
Resource adapter for ``bigip_ltm_profile_http``.

Translates an HTTP profile declaration into iControl REST calls and copies
the device's answer back into the engine's state view.

Read only copies back the optional fields the user declared, so values the
device computes for untouched fields never show up as drift. ``defaults_from``,
``proxy_type``, ``response_headers_permitted`` and ``xff_alternative_names``
are always copied. ``fallback_host`` is the one optional field that is cleared
on the device when it is left out of the declaration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import Any, Dict, Mapping, Optional, Sequence

from ..adapters.api.base import RemoteCallError
from ..adapters.api.bigip import BigIPClient
from ..adapters.api.http_profile import EnforcementSettings, HstsSettings, HttpProfile
from ..adapters.base import ResourceAdapter, TelemetryReporter
from ..adapters.telemetry import TeemReporter, TelemetryError, agent_version
from ..core.logging import get_logger, log_progress
from ..core.schema import ResourceSchema, load_schema
from ..core.state import ResourceData

RESOURCE_TYPE = "bigip_ltm_profile_http"

# Declaration field -> HttpProfile attribute.
ALWAYS_COPIED: Mapping[str, str] = {
    "defaults_from": "defaults_from",
    "proxy_type": "proxy_type",
    "response_headers_permitted": "response_headers_permitted",
    "xff_alternative_names": "xff_alternative_names",
}

COPIED_WHEN_SET: Mapping[str, str] = {
    "accept_xff": "accept_xff",
    "app_service": "app_service",
    "basic_auth_realm": "basic_auth_realm",
    "description": "description",
    "encrypt_cookie_secret": "encrypt_cookie_secret",
    "encrypt_cookies": "encrypt_cookies",
    "fallback_host": "fallback_host",
    "fallback_status_codes": "fallback_status_codes",
    "head_erase": "header_erase",
    "head_insert": "header_insert",
    "insert_xforwarded_for": "insert_xforwarded_for",
    "lws_separator": "lws_separator",
    "lws_width": "lws_width",
    "oneconnect_transformations": "oneconnect_transformations",
    "tm_partition": "tm_partition",
    "redirect_rewrite": "redirect_rewrite",
    "request_chunking": "request_chunking",
    "response_chunking": "response_chunking",
    "server_agent_name": "server_agent_name",
    "via_host_name": "via_host_name",
    "via_request": "via_request",
    "via_response": "via_response",
}

HSTS_FIELD = "http_strict_transport_security"
ENFORCEMENT_FIELD = "enforcement"


def _hsts_settings(block: Optional[Mapping[str, Any]]) -> HstsSettings:
    if not block:
        return HstsSettings()
    return HstsSettings(
        include_subdomains=block.get("include_subdomains"),
        maximum_age=block.get("maximum_age"),
        mode=block.get("mode"),
        preload=block.get("preload"),
    )


def _enforcement_settings(block: Optional[Mapping[str, Any]]) -> EnforcementSettings:
    if not block:
        return EnforcementSettings()
    return EnforcementSettings(
        known_methods=block.get("known_methods"),
        max_header_count=block.get("max_header_count"),
        max_header_size=block.get("max_header_size"),
        unknown_method=block.get("unknown_method"),
    )


def build_http_profile(data: ResourceData, *, name: Optional[str]) -> HttpProfile:
    """
    Build the remote object from the current configuration.

    ``name`` is ``None`` for modify calls. Undeclared blocks produce empty
    nested structs, which are still sent.
    """

    values: Dict[str, Any] = {attr: data.raw(key) for key, attr in {**ALWAYS_COPIED, **COPIED_WHEN_SET}.items()}
    if not data.is_set("fallback_host"):
        values["fallback_host"] = ""
    return HttpProfile(
        name=name,
        hsts=_hsts_settings(data.raw(HSTS_FIELD)),
        enforcement=_enforcement_settings(data.raw(ENFORCEMENT_FIELD)),
        **values,
    )


def flatten_hsts(hsts: HstsSettings) -> Dict[str, Any]:
    return {
        "include_subdomains": hsts.include_subdomains or "",
        "maximum_age": hsts.maximum_age or 0,
        "mode": hsts.mode or "",
        "preload": hsts.preload or "",
    }


def flatten_enforcement(enforcement: EnforcementSettings, declared: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Rebuild the enforcement block; ``known_methods`` only when the declaration lists some."""

    block: Dict[str, Any] = {
        "max_header_count": enforcement.max_header_count or 0,
        "max_header_size": enforcement.max_header_size or 0,
        "unknown_method": enforcement.unknown_method or "",
    }
    if declared and declared.get("known_methods"):
        block["known_methods"] = enforcement.known_methods or ()
    return block


@dataclass(slots=True)
class HttpProfileResource(ResourceAdapter):
    """Create, read, update, delete and import HTTP profiles on one device."""

    client: BigIPClient
    reporter: TelemetryReporter = field(default_factory=TeemReporter)
    schema: ResourceSchema = field(default_factory=lambda: load_schema(RESOURCE_TYPE))
    resource_type: str = RESOURCE_TYPE
    tags: Sequence[str] = ()
    logger: LoggerAdapter = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = get_logger(__name__, tags=self.tags or None, extra={"resource": self.resource_type})

    def new_data(
        self,
        config: Optional[Mapping[str, Any]] = None,
        *,
        state: Optional[Mapping[str, Any]] = None,
        resource_id: str = "",
    ) -> ResourceData:
        return ResourceData(self.schema, config, state=state, resource_id=resource_id)

    def create(self, data: ResourceData) -> str:
        name = data.get("name")
        log_progress(self.logger, "Creating HTTP profile", phase="create", status="started", extra={"identity": name})
        profile = build_http_profile(data, name=name)
        try:
            self.client.add_http_profile(profile)
        except RemoteCallError as exc:
            log_progress(self.logger, "Unable to create HTTP profile", phase="create", status="failed", level=logging.ERROR, extra={"identity": name, "error": str(exc)})
            raise
        data.set_id(name)
        self._report_usage()
        self.read(data)
        return data.id

    def read(self, data: ResourceData) -> None:
        name = data.id
        log_progress(self.logger, "Fetching HTTP profile", phase="read", extra={"identity": name})
        try:
            profile = self.client.get_http_profile(name)
        except RemoteCallError as exc:
            log_progress(self.logger, "Unable to retrieve HTTP profile", phase="read", status="failed", level=logging.ERROR, extra={"identity": name, "error": str(exc)})
            raise
        if profile is None:
            log_progress(self.logger, "HTTP profile not found, removing from state", phase="read", result="gone", level=logging.WARNING, extra={"identity": name})
            data.set_id("")
            return

        data.set("name", name)
        for key, attr in ALWAYS_COPIED.items():
            data.set(key, getattr(profile, attr))
        for key, attr in COPIED_WHEN_SET.items():
            if data.is_set(key):
                data.set(key, getattr(profile, attr))
            else:
                data.discard(key)

        if data.is_set(ENFORCEMENT_FIELD):
            data.set(ENFORCEMENT_FIELD, flatten_enforcement(profile.enforcement, data.raw(ENFORCEMENT_FIELD)))
        if data.is_set(HSTS_FIELD):
            data.set(HSTS_FIELD, flatten_hsts(profile.hsts))

    def update(self, data: ResourceData) -> None:
        name = data.id
        log_progress(self.logger, "Updating HTTP profile", phase="update", status="started", extra={"identity": name})
        profile = build_http_profile(data, name=None)
        try:
            self.client.modify_http_profile(name, profile)
        except RemoteCallError as exc:
            log_progress(self.logger, "Unable to modify HTTP profile", phase="update", status="failed", level=logging.ERROR, extra={"identity": name, "error": str(exc)})
            raise
        self.read(data)

    def delete(self, data: ResourceData) -> None:
        name = data.id
        log_progress(self.logger, "Deleting HTTP profile", phase="delete", status="started", extra={"identity": name})
        try:
            self.client.delete_http_profile(name)
        except RemoteCallError as exc:
            log_progress(self.logger, "Unable to delete HTTP profile", phase="delete", status="failed", level=logging.ERROR, extra={"identity": name, "error": str(exc)})
            raise
        data.set_id("")

    def import_state(self, identity: str) -> ResourceData:
        """Adopt an existing profile by name; the returned view has an empty id if it does not exist."""

        data = self.new_data(resource_id=identity)
        self.read(data)
        return data

    def _report_usage(self) -> None:
        if self.client.teem_disabled:
            return
        user_agent = self.client.user_agent
        try:
            self.reporter.report(
                {"Client Version": user_agent},
                document_type=self.resource_type,
                document_version=agent_version(user_agent),
                asset_version=user_agent,
            )
        except TelemetryError as exc:
            self.logger.error("Sending telemetry data failed", extra={"error": str(exc)})
