"""HTTP clients for the remote search and suggestion backends."""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError
from result import Err, Ok, Result

from fsearch.models.search import FilterSet, RemoteSearchResponse

SEMANTIC_PATH = "/search/semantic"
HYBRID_PATH = "/search/hybrid"
KEYWORD_PATH = "/search"
SUGGESTIONS_PATH = "/suggestions"


class HttpBackend:
    """Shared JSON transport. Owns its client unless one is injected."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"), timeout=timeout
        )

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _post_search(
        self, path: str, payload: dict[str, Any]
    ) -> Result[RemoteSearchResponse, str]:
        try:
            response = await self._client.post(path, json=payload)
            response.raise_for_status()
            return Ok(RemoteSearchResponse.model_validate(response.json()))
        except httpx.HTTPError as exc:
            return Err(f"{path} request failed: {exc}")
        except (ValidationError, ValueError) as exc:
            return Err(f"{path} returned an invalid payload: {exc}")


class HttpSemanticResolver(HttpBackend):
    """Natural-language resolver. ``path`` selects the semantic or hybrid endpoint."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
        path: str = SEMANTIC_PATH,
    ) -> None:
        super().__init__(base_url, timeout, client)
        self._path = path

    async def resolve(
        self, text: str, limit: int = 20, offset: int = 0
    ) -> Result[RemoteSearchResponse, str]:
        return await self._post_search(
            self._path, {"query": text, "limit": limit, "offset": offset}
        )


class HttpKeywordBackend(HttpBackend):
    """Full-text and filter backend."""

    async def resolve(
        self,
        text: str,
        filters: FilterSet | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Result[RemoteSearchResponse, str]:
        payload: dict[str, Any] = {"query": text, "limit": limit, "offset": offset}
        if filters is not None:
            payload["filters"] = filters.to_payload()
        return await self._post_search(KEYWORD_PATH, payload)


class HttpSuggestionBackend(HttpBackend):
    """Query-completion endpoint returning a JSON list of strings."""

    async def suggest(self, partial: str) -> Result[list[str], str]:
        try:
            response = await self._client.get(SUGGESTIONS_PATH, params={"q": partial})
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            return Err(f"Suggestion request failed: {exc}")
        except ValueError as exc:
            return Err(f"Suggestion response is not JSON: {exc}")
        if isinstance(data, dict):
            data = data.get("suggestions", [])
        if not isinstance(data, list):
            return Err("Suggestion response is not a list")
        return Ok([str(item) for item in data if isinstance(item, str)])
