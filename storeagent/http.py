"""HTTP transport used by provider adapters."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import httpx

from storeagent.errors import ApiError

log = logging.getLogger(__name__)


@dataclass
class HttpResponse:
    """Status code plus decoded JSON body (None when the body is not JSON)."""
    status_code: int
    body: Any = None
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@runtime_checkable
class HttpClient(Protocol):
    """Blocking request interface the adapters depend on."""

    def request(
        self,
        url: str,
        method: str = "POST",
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        timeout: float = 60,
    ) -> HttpResponse:
        ...


class HttpxClient:
    """Default HttpClient backed by a shared ``httpx.Client``."""

    def __init__(self, client: httpx.Client | None = None):
        self._client = client or httpx.Client()

    def request(
        self,
        url: str,
        method: str = "POST",
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        timeout: float = 60,
    ) -> HttpResponse:
        kwargs: dict[str, Any] = {"headers": headers or {}, "timeout": timeout}
        if json_body is not None and method.upper() != "GET":
            kwargs["json"] = json_body

        try:
            response = self._client.request(method.upper(), url, **kwargs)
        except httpx.TimeoutException as e:
            raise ApiError(
                f"Request timed out after {timeout}s.",
                hint="Increase the timeout option or try again later.",
            ) from e
        except httpx.HTTPError as e:
            raise ApiError(f"Request failed: {e}") from e

        return HttpResponse(
            status_code=response.status_code,
            body=_decode(response.text),
            text=response.text,
        )

    def close(self) -> None:
        self._client.close()


def _decode(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        log.debug("Non-JSON response body (%d chars)", len(text))
        return None
