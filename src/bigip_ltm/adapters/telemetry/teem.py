"""
Anonymous usage reporting through the F5 TEEM service.

Reports are best effort: the reporter retries transport failures a few times,
then raises :class:`TelemetryError`, which callers log and ignore. Without an
API key nothing is sent.
"""

from __future__ import annotations

import os
import uuid
from datetime import UTC, datetime
from typing import Any, Dict, Mapping, MutableMapping, Optional

from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from ..base import AdapterError
from ..api.base import BaseAPIClient, RemoteCallError

TEEM_BASE_URL = "https://product.apis.f5.com"
TEEM_REPORT_PATH = "/ee/v1/telemetry"
DEFAULT_ASSET_NAME = "bigip-ltm"
API_KEY_ENV = "TEEM_API_KEY"


class TelemetryError(AdapterError):
    """Raised when a usage report cannot be delivered."""


def _is_transient(exc: BaseException) -> bool:
    """Transport failures and 5xx answers."""

    if not isinstance(exc, RemoteCallError):
        return False
    return exc.status_code is None or exc.status_code >= 500


class NullReporter:
    """Reporter that drops every report; used when telemetry is switched off."""

    def report(
        self,
        records: Mapping[str, object],
        *,
        document_type: str,
        document_version: str,
        asset_version: str,
    ) -> None:
        return None


class TeemReporter(BaseAPIClient):
    """
    Send one anonymous report per call to the TEEM endpoint.

    Every report gets a fresh random asset identifier, so nothing ties two
    reports to the same installation.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        asset_name: str = DEFAULT_ASSET_NAME,
        base_url: str = TEEM_BASE_URL,
        timeout: float = 10.0,
        max_attempts: int = 3,
    ) -> None:
        super().__init__(base_url=base_url, timeout=timeout, default_headers={"Content-Type": "application/json"})
        self.api_key = api_key
        self.asset_name = asset_name
        self.max_attempts = max(1, max_attempts)

    def _resolve_api_key(self) -> Optional[str]:
        return self.api_key or os.getenv(API_KEY_ENV) or None

    @staticmethod
    def build_document(
        records: Mapping[str, object],
        *,
        asset_id: str,
        asset_name: str,
        asset_version: str,
        document_type: str,
        document_version: str,
    ) -> Dict[str, Any]:
        now = datetime.now(UTC)
        stamp = now.isoformat()
        return {
            "documentType": document_type,
            "documentVersion": document_version,
            "digitalAssetId": asset_id,
            "digitalAssetName": asset_name,
            "digitalAssetVersion": asset_version,
            "observationStartTime": stamp,
            "observationEndTime": stamp,
            "epochTime": stamp,
            "telemetryId": str(uuid.uuid4()),
            "telemetryRecords": [dict(records)],
        }

    def report(
        self,
        records: Mapping[str, object],
        *,
        document_type: str,
        document_version: str,
        asset_version: str,
    ) -> None:
        api_key = self._resolve_api_key()
        if not api_key:
            self.logger.debug("TEEM API key not configured; usage report skipped")
            return

        asset_id = str(uuid.uuid4())
        document = self.build_document(
            records,
            asset_id=asset_id,
            asset_name=self.asset_name,
            asset_version=asset_version,
            document_type=document_type,
            document_version=document_version,
        )
        headers: MutableMapping[str, str] = {
            "F5-ApiKey": api_key,
            "F5-DigitalAssetId": asset_id,
            "F5-TraceId": str(uuid.uuid4()),
        }
        retrying = Retrying(
            retry=retry_if_exception(_is_transient),
            wait=wait_exponential(multiplier=1, min=1, max=4),
            stop=stop_after_attempt(self.max_attempts),
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    self._post_json(TEEM_REPORT_PATH, json_body=document, headers=headers)
        except RemoteCallError as exc:
            raise TelemetryError(f"Failed to send usage report for {document_type}: {exc}") from exc


def agent_version(user_agent: str) -> str:
    """Return the trailing version component of a ``name/.../version`` user agent."""

    parts = [part for part in user_agent.split("/") if part]
    return parts[-1] if parts else ""
