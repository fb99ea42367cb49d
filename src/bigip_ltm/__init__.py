"""
Declarative management of BIG-IP LTM objects over iControl REST.

:class:`~bigip_ltm.resources.HttpProfileResource` implements the create, read,
update, delete and import lifecycle of ``bigip_ltm_profile_http``;
:class:`~bigip_ltm.provider.ProviderContext` wires it to a device client and a
usage reporter built from :func:`~bigip_ltm.config.load_settings`.
"""

from .adapters.api import BigIPClient, HttpProfile, RemoteCallError
from .config import PACKAGE_VERSION as __version__
from .core import Presence, ResourceData, SchemaError, load_schema
from .provider import ProviderContext, ProviderOptions
from .resources import HttpProfileResource

__all__ = [
    "BigIPClient",
    "HttpProfile",
    "HttpProfileResource",
    "Presence",
    "ProviderContext",
    "ProviderOptions",
    "RemoteCallError",
    "ResourceData",
    "SchemaError",
    "__version__",
    "load_schema",
]
