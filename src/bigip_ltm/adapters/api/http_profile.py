"""
Remote representation of an LTM HTTP profile.

The dataclasses mirror the iControl REST ``ltm/profile/http`` document. An
attribute left at ``None`` is unset and omitted from the request body; an empty
string, zero or empty collection is an explicit value and is sent. The one
exception is ``fallback_host``, which is always sent so that leaving it out of
a declaration clears it on the device.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

# Python attribute -> REST property.
_PROFILE_KEYS: Mapping[str, str] = {
    "name": "name",
    "app_service": "appService",
    "accept_xff": "acceptXff",
    "basic_auth_realm": "basicAuthRealm",
    "defaults_from": "defaultsFrom",
    "description": "description",
    "encrypt_cookie_secret": "encryptCookieSecret",
    "encrypt_cookies": "encryptCookies",
    "fallback_host": "fallbackHost",
    "fallback_status_codes": "fallbackStatusCodes",
    "header_erase": "headerErase",
    "header_insert": "headerInsert",
    "insert_xforwarded_for": "insertXforwardedFor",
    "lws_separator": "lwsSeparator",
    "lws_width": "lwsWidth",
    "oneconnect_transformations": "oneconnectTransformations",
    "tm_partition": "tmPartition",
    "proxy_type": "proxyType",
    "redirect_rewrite": "redirectRewrite",
    "request_chunking": "requestChunking",
    "response_chunking": "responseChunking",
    "response_headers_permitted": "responseHeadersPermitted",
    "server_agent_name": "serverAgentName",
    "via_host_name": "viaHostName",
    "via_request": "viaRequest",
    "via_response": "viaResponse",
    "xff_alternative_names": "xffAlternativeNames",
}

_HSTS_KEYS: Mapping[str, str] = {
    "include_subdomains": "includeSubdomains",
    "maximum_age": "maximumAge",
    "mode": "mode",
    "preload": "preload",
}

_ENFORCEMENT_KEYS: Mapping[str, str] = {
    "known_methods": "knownMethods",
    "max_header_count": "maxHeaderCount",
    "max_header_size": "maxHeaderSize",
    "unknown_method": "unknownMethod",
}

_SET_ATTRS = frozenset({"encrypt_cookies", "fallback_status_codes", "response_headers_permitted", "xff_alternative_names"})
_INT_ATTRS = frozenset({"lws_width", "maximum_age", "max_header_count", "max_header_size"})


def _encode(value: Any) -> Any:
    if isinstance(value, frozenset):
        return sorted(value)
    if isinstance(value, tuple):
        return list(value)
    return value


def _decode(attr: str, value: Any) -> Any:
    if value is None:
        return None
    if attr in _SET_ATTRS:
        if isinstance(value, str):
            return frozenset(value.split())
        return frozenset(str(item) for item in value)
    if attr == "known_methods":
        return tuple(str(item) for item in value)
    if attr in _INT_ATTRS:
        return int(value)
    return str(value)


def _to_payload(obj: Any, keys: Mapping[str, str], *, skip: Tuple[str, ...] = ()) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    for attr, key in keys.items():
        if attr in skip:
            continue
        value = getattr(obj, attr)
        if value is not None:
            payload[key] = _encode(value)
    return payload


def _from_payload(payload: Mapping[str, Any], keys: Mapping[str, str]) -> Dict[str, Any]:
    return {attr: _decode(attr, payload.get(key)) for attr, key in keys.items()}


@dataclass(slots=True)
class HstsSettings:
    """HTTP Strict Transport Security settings (``hsts``)."""

    include_subdomains: Optional[str] = None
    maximum_age: Optional[int] = None
    mode: Optional[str] = None
    preload: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return _to_payload(self, _HSTS_KEYS)

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]]) -> "HstsSettings":
        return cls(**_from_payload(payload or {}, _HSTS_KEYS))


@dataclass(slots=True)
class EnforcementSettings:
    """HTTP protocol enforcement limits (``enforcement``)."""

    known_methods: Optional[Tuple[str, ...]] = None
    max_header_count: Optional[int] = None
    max_header_size: Optional[int] = None
    unknown_method: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return _to_payload(self, _ENFORCEMENT_KEYS)

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]]) -> "EnforcementSettings":
        return cls(**_from_payload(payload or {}, _ENFORCEMENT_KEYS))


@dataclass(slots=True)
class HttpProfile:
    """An ``ltm/profile/http`` object as sent to and returned by the device."""

    name: Optional[str] = None
    app_service: Optional[str] = None
    accept_xff: Optional[str] = None
    basic_auth_realm: Optional[str] = None
    defaults_from: Optional[str] = None
    description: Optional[str] = None
    encrypt_cookie_secret: Optional[str] = None
    encrypt_cookies: Optional[FrozenSet[str]] = None
    fallback_host: Optional[str] = None
    fallback_status_codes: Optional[FrozenSet[str]] = None
    header_erase: Optional[str] = None
    header_insert: Optional[str] = None
    insert_xforwarded_for: Optional[str] = None
    lws_separator: Optional[str] = None
    lws_width: Optional[int] = None
    oneconnect_transformations: Optional[str] = None
    tm_partition: Optional[str] = None
    proxy_type: Optional[str] = None
    redirect_rewrite: Optional[str] = None
    request_chunking: Optional[str] = None
    response_chunking: Optional[str] = None
    response_headers_permitted: Optional[FrozenSet[str]] = None
    server_agent_name: Optional[str] = None
    via_host_name: Optional[str] = None
    via_request: Optional[str] = None
    via_response: Optional[str] = None
    xff_alternative_names: Optional[FrozenSet[str]] = None
    hsts: HstsSettings = field(default_factory=HstsSettings)
    enforcement: EnforcementSettings = field(default_factory=EnforcementSettings)

    def to_payload(self, *, include_name: bool = True) -> Dict[str, Any]:
        """
        Build the JSON request body.

        ``include_name`` is false for modify calls, where the name is part of
        the URL and must not be changed.
        """

        skip = () if include_name else ("name",)
        payload = _to_payload(self, _PROFILE_KEYS, skip=skip)
        payload["fallbackHost"] = self.fallback_host or ""
        payload["hsts"] = self.hsts.to_payload()
        payload["enforcement"] = self.enforcement.to_payload()
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "HttpProfile":
        values = _from_payload(payload, _PROFILE_KEYS)
        if values["tm_partition"] is None and payload.get("partition") is not None:
            values["tm_partition"] = str(payload["partition"])
        hsts = payload.get("hsts")
        enforcement = payload.get("enforcement")
        return cls(
            **values,
            hsts=HstsSettings.from_payload(hsts if isinstance(hsts, Mapping) else None),
            enforcement=EnforcementSettings.from_payload(enforcement if isinstance(enforcement, Mapping) else None),
        )


__all__ = ["EnforcementSettings", "HstsSettings", "HttpProfile"]
