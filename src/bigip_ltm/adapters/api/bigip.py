"""
iControl REST client for BIG-IP LTM profiles.

Objects are addressed by their full path (``/Common/http-prof-1``), which the
REST API expects with ``~`` as the separator
(``/mgmt/tm/ltm/profile/http/~Common~http-prof-1``).
"""

from __future__ import annotations

from typing import MutableMapping, Optional

from ...config import DEFAULT_PORT, DEFAULT_TIMEOUT, DEFAULT_USER_AGENT, DeviceSettings
from ..base import AdapterError
from .base import BaseAPIClient, RemoteCallError
from .http_profile import HttpProfile

HTTP_PROFILE_PATH = "/mgmt/tm/ltm/profile/http"


def uri_name(name: str) -> str:
    """Translate ``/Partition/name`` into the ``~Partition~name`` URI form."""

    return name.replace("/", "~")


def build_base_url(address: str, port: int = DEFAULT_PORT) -> str:
    address = address.rstrip("/")
    if "://" not in address:
        address = f"https://{address}"
    return f"{address}:{port}"


class BigIPClient(BaseAPIClient):
    """
    Client handle shared by all resource adapters of one provider configuration.

    ``teem_disabled`` and ``user_agent`` are not used for REST calls; adapters
    read them to decide whether and how to send usage reports.
    """

    def __init__(
        self,
        *,
        address: str,
        username: str,
        password: str,
        port: int = DEFAULT_PORT,
        verify_tls: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        teem_disabled: bool = False,
        default_headers: Optional[MutableMapping[str, str]] = None,
    ) -> None:
        headers: MutableMapping[str, str] = {"Accept": "application/json", "User-Agent": user_agent}
        if default_headers:
            headers.update(default_headers)
        super().__init__(
            base_url=build_base_url(address, port),
            timeout=timeout,
            default_headers=headers,
            auth=(username, password),
            verify=verify_tls,
        )
        self.user_agent = user_agent
        self.teem_disabled = teem_disabled

    @classmethod
    def from_settings(cls, settings: DeviceSettings, *, teem_disabled: bool = False) -> "BigIPClient":
        missing = settings.missing()
        if missing:
            raise AdapterError(f"BIG-IP connection settings missing: {', '.join(missing)}.")
        return cls(
            address=settings.address or "",
            username=settings.username or "",
            password=settings.password or "",
            port=settings.port,
            verify_tls=settings.verify_tls,
            timeout=settings.timeout,
            user_agent=settings.user_agent,
            teem_disabled=teem_disabled,
        )

    def add_http_profile(self, profile: HttpProfile) -> None:
        """Create a new HTTP profile; the payload carries the name."""

        self._post_json(HTTP_PROFILE_PATH, json_body=profile.to_payload())

    def get_http_profile(self, name: str) -> Optional[HttpProfile]:
        """Fetch a profile by full path, or ``None`` when the device does not know it."""

        payload = self._get_json(f"{HTTP_PROFILE_PATH}/{uri_name(name)}", allow_missing=True)
        if payload is None:
            return None
        if not isinstance(payload, dict):
            raise RemoteCallError(f"Unexpected payload for HTTP profile {name}.")
        return HttpProfile.from_payload(payload)

    def modify_http_profile(self, name: str, profile: HttpProfile) -> None:
        """Replace the settings of an existing profile; the name itself is never sent."""

        self._put_json(f"{HTTP_PROFILE_PATH}/{uri_name(name)}", json_body=profile.to_payload(include_name=False))

    def delete_http_profile(self, name: str) -> None:
        self._delete(f"{HTTP_PROFILE_PATH}/{uri_name(name)}")
