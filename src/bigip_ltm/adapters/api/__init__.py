"""
iControl REST clients and the remote object models they exchange.

* :class:`BaseAPIClient` wraps single-shot HTTPX calls and error translation.
* :class:`BigIPClient` exposes the LTM profile verbs used by resource adapters.
* :mod:`.http_profile` holds the typed HTTP profile document.
"""

from .base import BaseAPIClient, RemoteCallError
from .bigip import HTTP_PROFILE_PATH, BigIPClient, uri_name
from .http_profile import EnforcementSettings, HstsSettings, HttpProfile

__all__ = [
    "BaseAPIClient",
    "BigIPClient",
    "EnforcementSettings",
    "HTTP_PROFILE_PATH",
    "HstsSettings",
    "HttpProfile",
    "RemoteCallError",
    "uri_name",
]
