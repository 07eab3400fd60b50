from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Tuple

import requests
from curl_cffi import requests as curl_requests

from .errors import TransportError, TransportTimeout
from .models import RawResponse, Request

DEFAULT_TIMEOUT = 100.0
DEFAULT_IMPERSONATE = "chrome120"

# libcurl's CURLE_OPERATION_TIMEDOUT
_CURL_TIMEOUT_CODE = 28


class Transport(ABC):
    """Send one request, get one response or a TransportError.

    ``timeout`` applies to each request individually."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout

    @abstractmethod
    def send(self, request: Request) -> RawResponse:
        ...

    def close(self) -> None:
        pass


class RequestsTransport(Transport):
    """Default transport backed by a shared requests.Session."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, session: requests.Session | None = None) -> None:
        super().__init__(timeout)
        self._session = session or requests.Session()

    def send(self, request: Request) -> RawResponse:
        try:
            resp = self._session.request(
                method=request.method,
                url=request.url,
                headers=request.flat_headers() or None,
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            raise TransportTimeout(f"{request.url}: {exc}") from exc
        except requests.RequestException as exc:
            raise TransportError(f"{request.url}: {exc}") from exc

        return RawResponse(
            status_code=resp.status_code,
            reason=resp.reason or "",
            headers=_requests_headers(resp),
            text=resp.text,
        )

    def close(self) -> None:
        self._session.close()


class CurlTransport(Transport):
    """Transport that impersonates a browser's TLS fingerprint via curl_cffi."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, impersonate: str = DEFAULT_IMPERSONATE) -> None:
        super().__init__(timeout)
        self._impersonate = impersonate
        self._session = curl_requests.Session()

    def send(self, request: Request) -> RawResponse:
        try:
            resp = self._session.request(
                method=request.method,
                url=request.url,
                headers=request.flat_headers() or None,
                impersonate=self._impersonate,
                timeout=self.timeout,
            )
        except curl_requests.RequestsError as exc:
            if getattr(exc, "code", None) == _CURL_TIMEOUT_CODE:
                raise TransportTimeout(f"{request.url}: {exc}") from exc
            raise TransportError(f"{request.url}: {exc}") from exc

        headers = resp.headers
        pairs = headers.multi_items() if hasattr(headers, "multi_items") else headers.items()
        return RawResponse(
            status_code=resp.status_code,
            reason=getattr(resp, "reason", "") or "",
            headers=[(str(k), str(v)) for k, v in pairs],
            text=resp.text,
        )

    def close(self) -> None:
        self._session.close()


def _requests_headers(resp: Any) -> List[Tuple[str, str]]:
    # requests folds repeated headers into one comma-joined value; urllib3 keeps them apart.
    raw_headers = getattr(getattr(resp, "raw", None), "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "getlist"):
        return [(k, v) for k, v in raw_headers.items()]
    return list(resp.headers.items())
