"""HTTP client for the paginated image search endpoint."""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from gallery.config import SourceSettings
from gallery.domain.models import ImageRecord
from gallery.services.exceptions import NetworkError

_PAGE_ADAPTER = TypeAdapter(tuple[ImageRecord, ...])


class ImageSource:
    """Fetch one page of image records for a search term."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: SourceSettings | None = None,
    ) -> None:
        self._client = http_client
        self._settings = settings or SourceSettings()

    @property
    def page_size(self) -> int:
        return self._settings.page_size

    def query_for(self, term: str) -> str:
        return term or self._settings.fallback_query

    async def fetch_page(
        self, term: str, page: int, per_page: int | None = None
    ) -> tuple[ImageRecord, ...]:
        params: dict[str, Any] = {
            "query": self.query_for(term),
            "page": page,
            "per_page": per_page or self._settings.page_size,
        }
        try:
            response = await self._client.get(
                str(self._settings.base_url),
                params=params,
                timeout=self._settings.request_timeout_seconds,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = exc.response.text[:500] if exc.response is not None else str(exc)
            status_code = exc.response.status_code if exc.response is not None else "unknown"
            raise NetworkError(f"Image search failed ({status_code}): {detail}") from exc
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Image search timed out: {exc}") from exc
        except httpx.RequestError as exc:
            raise NetworkError(f"Image search failed: {exc}") from exc

        try:
            return _PAGE_ADAPTER.validate_python(response.json())
        except (ValueError, ValidationError) as exc:
            raise NetworkError(f"Malformed image search response: {exc}") from exc


__all__ = ["ImageSource"]
