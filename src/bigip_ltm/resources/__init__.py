"""
Resource adapters, one module per declarative resource type.

Each adapter maps a configuration block onto create, read, update and delete
calls against the device and implements
:class:`~bigip_ltm.adapters.base.ResourceAdapter`.
"""

from .ltm_profile_http import RESOURCE_TYPE as HTTP_PROFILE_RESOURCE, HttpProfileResource, build_http_profile

__all__ = ["HTTP_PROFILE_RESOURCE", "HttpProfileResource", "build_http_profile"]
