"""
Adapter interfaces and the collaborators resource adapters talk to.

REST clients live in :mod:`.api`, usage reporters in :mod:`.telemetry`.
"""

from .base import AdapterError, ResourceAdapter, TelemetryReporter

__all__ = ["AdapterError", "ResourceAdapter", "TelemetryReporter"]
