"""
Base protocols for resource adapters and their collaborators.

A resource adapter owns the mapping between one declarative resource type and
the device REST API. Schema validation, diffing and ordering belong to the
engine that calls it; transport belongs to the API clients under
:mod:`bigip_ltm.adapters.api`.
"""

from __future__ import annotations

from typing import Mapping, Protocol

from ..core.state import ResourceData


class AdapterError(RuntimeError):
    """Raised when an adapter or one of its collaborators hits a non-recoverable error."""


class ResourceAdapter(Protocol):
    """Lifecycle contract implemented by every resource adapter."""

    resource_type: str

    def create(self, data: ResourceData) -> str:
        """Create the remote object and return its identity."""

    def read(self, data: ResourceData) -> None:
        """Refresh ``data`` from the device, clearing the identity when the object is gone."""

    def update(self, data: ResourceData) -> None:
        """Push the current configuration to the object named by ``data.id``."""

    def delete(self, data: ResourceData) -> None:
        """Remove the remote object and clear the identity."""


class TelemetryReporter(Protocol):
    """Sink for anonymous usage reports."""

    def report(
        self,
        records: Mapping[str, object],
        *,
        document_type: str,
        document_version: str,
        asset_version: str,
    ) -> None:
        """Send one report. Implementations raise ``TelemetryError`` on failure."""
