"""
Shared HTTP utilities for REST API clients.

The helper is a thin HTTPX wrapper: it keeps calls synchronous, holds no state
between requests apart from connection settings, and turns every transport or
status failure into a :class:`RemoteCallError` carrying the server's message.
Requests are sent exactly once; callers that want retries wrap the call
themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import Any, Mapping, MutableMapping, Optional, Tuple

import httpx

from ...core.logging import get_logger
from ..base import AdapterError

DEFAULT_TIMEOUT = 30.0


class RemoteCallError(AdapterError):
    """Raised when a REST call fails, whatever the cause."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class BaseAPIClient:
    """
    Base synchronous HTTP client.

    Parameters
    ----------
    base_url:
        Root URL for the upstream service.
    timeout:
        Request timeout in seconds, applied by the transport.
    default_headers:
        Headers automatically attached to every request.
    auth:
        Optional ``(username, password)`` pair for HTTP basic authentication.
    verify:
        Whether TLS certificates are verified.
    """

    base_url: str
    timeout: float = DEFAULT_TIMEOUT
    default_headers: MutableMapping[str, str] = field(default_factory=dict)
    auth: Optional[Tuple[str, str]] = field(default=None, repr=False)
    verify: bool = True
    logger: LoggerAdapter = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = get_logger(
            f"{self.__class__.__module__}.{self.__class__.__name__}",
            extra={"base_url": self.base_url},
        )

    def _build_client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=dict(self.default_headers),
            auth=self.auth,
            verify=self.verify,
        )

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text
        if isinstance(payload, Mapping) and payload.get("message"):
            return str(payload["message"])
        return response.text

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        request = response.request
        raise RemoteCallError(
            f"HTTP {response.status_code} error for {request.method} {request.url}: {self._error_detail(response)}",
            status_code=response.status_code,
        )

    def _request(self, method: str, url: str, *, allow_missing: bool = False, **kwargs: Any) -> Optional[httpx.Response]:
        """
        Send one request.

        Returns ``None`` instead of raising when ``allow_missing`` is set and the
        server answers 404.
        """

        self.logger.debug("HTTP request", extra={"method": method, "url": url})
        try:
            with self._build_client() as client:
                response = client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            self.logger.error(
                "HTTP error during request",
                extra={"method": method, "url": url, "error": str(exc)},
            )
            raise RemoteCallError(f"HTTP error while calling {method} {url}: {exc}") from exc

        if allow_missing and response.status_code == httpx.codes.NOT_FOUND:
            return None
        self._raise_for_status(response)
        self.logger.debug(
            "HTTP response",
            extra={"status_code": response.status_code, "url": str(response.url)},
        )
        return response

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteCallError(f"Failed to decode JSON from {response.url}: {exc}", status_code=response.status_code) from exc

    def _get_json(self, url: str, *, params: Optional[Mapping[str, Any]] = None, allow_missing: bool = False) -> Any:
        response = self._request("GET", url, params=params, allow_missing=allow_missing)
        if response is None:
            return None
        return self._decode(response)

    def _post_json(
        self,
        url: str,
        *,
        json_body: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        response = self._request("POST", url, json=json_body, headers=headers)
        return self._decode(response)

    def _put_json(self, url: str, *, json_body: Optional[Mapping[str, Any]] = None) -> Any:
        response = self._request("PUT", url, json=json_body)
        return self._decode(response)

    def _delete(self, url: str) -> None:
        self._request("DELETE", url)
