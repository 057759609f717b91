# cryptocharts/adapters/http.py
from __future__ import annotations

from typing import Any, TypeVar

import httpx

from cryptocharts.core.errors import ProtocolError, TransportError


ClientT = TypeVar("ClientT", bound="JsonApiClient")


def _ensure_path(path: str) -> str:
    return path if path.startswith("/") else "/" + path


class NotFound(Exception):  # noqa: N818
    """Raised by `JsonApiClient._get_json` on HTTP 404 so callers can decide what it means."""


class JsonApiClient:
    """
    Plain GET-and-decode client shared by the price and ledger adapters.
    Maps httpx failures onto TransportError and undecodable bodies onto ProtocolError.
    """

    service_name = "API"

    def __init__(
        self,
        base_url: str,
        *,
        http_client: httpx.Client | None = None,
        timeout_seconds: float = 20.0,
        user_agent: str = "cryptocharts/0.1",
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = http_client or httpx.Client(
            base_url=self.base_url,
            timeout=timeout_seconds,
            headers={
                "Accept": "application/json",
                "User-Agent": user_agent,
            },
        )

    # --- housekeeping ---------------------------------------------------------

    def close(self) -> None:
        self._http.close()

    def __enter__(self: ClientT) -> ClientT:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()

    # --- request ----------------------------------------------------------------

    def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        path = _ensure_path(path)
        try:
            resp = self._http.get(path, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:  # noqa: PLR2004
                raise NotFound(path) from e
            # include server payload for debugging
            raise TransportError(f"{self.service_name} HTTP {e.response.status_code}: {e.response.text}") from e  # noqa: TRY003
        except httpx.HTTPError as e:
            raise TransportError(f"{self.service_name} network error: {e}") from e  # noqa: TRY003

        try:
            return resp.json()
        except ValueError as e:
            raise ProtocolError(f"{self.service_name} returned non-JSON body: {resp.text[:200]!r}") from e  # noqa: TRY003
