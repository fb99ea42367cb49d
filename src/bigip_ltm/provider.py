"""
Provider-level wiring shared by every resource adapter.

A :class:`ProviderContext` bundles the resolved settings, the client handle
and the usage reporter, and hands out resource adapters bound to them. It is
the only place that decides which reporter is used, so tests and operators can
swap or disable telemetry without touching the adapters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from .adapters.api.bigip import BigIPClient
from .adapters.base import TelemetryReporter
from .adapters.telemetry import NullReporter, TeemReporter
from .config import Settings, load_settings
from .resources import HttpProfileResource


@dataclass(slots=True)
class ProviderOptions:
    """
    Flags controlling how commands behave at runtime.

    Attributes
    ----------
    dry_run:
        Print request payloads instead of calling the device.
    observability_tags:
        Tags attached to every log record emitted by the resource adapters.
    """

    dry_run: bool = False
    observability_tags: Sequence[str] = field(default_factory=tuple)


@dataclass(slots=True)
class ProviderContext:
    """Settings, client handle and reporter shared by the adapters of one provider block."""

    settings: Settings
    client: BigIPClient
    reporter: TelemetryReporter
    options: ProviderOptions = field(default_factory=ProviderOptions)

    @classmethod
    def build_default(
        cls,
        *,
        settings: Optional[Settings] = None,
        options: Optional[ProviderOptions] = None,
        client: Optional[BigIPClient] = None,
        reporter: Optional[TelemetryReporter] = None,
    ) -> "ProviderContext":
        """
        Construct a context from settings.

        Parameters
        ----------
        settings:
            Preloaded settings. When omitted :func:`load_settings` is called.
        options:
            Runtime flags, :class:`ProviderOptions` defaults when omitted.
        client:
            Prebuilt client handle. When omitted one is built from
            ``settings.device``; missing credentials raise ``AdapterError``.
        reporter:
            Usage reporter. Defaults to :class:`NullReporter` when telemetry is
            disabled and :class:`TeemReporter` otherwise.
        """

        resolved_settings = settings or load_settings(strict=False)
        telemetry = resolved_settings.telemetry
        resolved_client = client or BigIPClient.from_settings(resolved_settings.device, teem_disabled=telemetry.disabled)
        if reporter is None:
            reporter = NullReporter() if telemetry.disabled else TeemReporter(api_key=telemetry.api_key)
        return cls(
            settings=resolved_settings,
            client=resolved_client,
            reporter=reporter,
            options=options or ProviderOptions(),
        )

    def http_profile(self) -> HttpProfileResource:
        """Adapter for ``bigip_ltm_profile_http`` bound to this context."""

        return HttpProfileResource(client=self.client, reporter=self.reporter, tags=tuple(self.options.observability_tags))
