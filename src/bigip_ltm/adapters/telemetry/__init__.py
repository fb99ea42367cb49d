"""Usage reporters injected into resource adapters."""

from .teem import NullReporter, TeemReporter, TelemetryError, agent_version

__all__ = ["NullReporter", "TeemReporter", "TelemetryError", "agent_version"]
