"""Read access to The Movie Database (TMDB) catalog."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import Settings
from ..errors import NotFound, ProviderError
from ..models import DetailRecord, ImageVariant, MediaKind, SearchPage

logger = logging.getLogger(__name__)

DETAIL_EXPANSIONS: tuple[str, ...] = ("credits", "videos", "similar", "recommendations")
LIST_CATEGORIES: tuple[str, ...] = ("trending", "popular", "top_rated")


class CatalogClient:
    """Client responsible for fetching titles and listings from TMDB."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        if not settings.tmdb_api_key:
            raise ValueError("TMDB API key is required when initialising CatalogClient")
        self._settings = settings
        self._client = http_client

    async def fetch_detail(self, title_id: str, kind: MediaKind) -> DetailRecord:
        """Fetch a title together with its credits, videos and related rows.

        All sub-resources are expanded in a single request.
        """

        title_id = str(title_id).strip()
        if not title_id:
            raise NotFound("Title id is empty")

        endpoint = f"/{kind.value}/{title_id}"
        payload = await self._get_json(
            endpoint,
            {"append_to_response": ",".join(DETAIL_EXPANSIONS)},
            not_found_message=f"{kind.value} {title_id} not found",
        )
        try:
            return DetailRecord.from_tmdb_payload(payload, kind=kind)
        except ValueError as exc:
            logger.warning("Malformed TMDB detail for %s %s: %s", kind.value, title_id, exc)
            raise ProviderError(f"Malformed catalog response for {kind.value} {title_id}") from exc

    async def search_titles(self, query: str, *, page: int = 1) -> SearchPage:
        """Search movies and TV shows by free text; people are left out."""

        normalized = (query or "").strip()
        if not normalized:
            return SearchPage()

        payload = await self._get_json(
            "/search/multi",
            {"query": normalized, "page": max(page, 1), "include_adult": "false"},
        )
        return SearchPage.from_tmdb_payload(payload)

    async def list_titles(
        self, kind: MediaKind, category: str, *, page: int = 1
    ) -> SearchPage:
        """Return one of the discovery listings (trending, popular, top rated)."""

        if category not in LIST_CATEGORIES:
            raise ValueError(f"Unsupported listing category: {category}")
        if category == "trending":
            endpoint = f"/trending/{kind.value}/week"
        else:
            endpoint = f"/{kind.value}/{category}"

        payload = await self._get_json(endpoint, {"page": max(page, 1)})
        return SearchPage.from_tmdb_payload(payload, kind=kind)

    def resolve_image_url(
        self, path: str | None, variant: ImageVariant = ImageVariant.MEDIUM
    ) -> str:
        """Return an absolute image URL, or the placeholder for missing art."""

        return build_image_url(
            path,
            variant,
            base_url=self._settings.image_base_url,
            placeholder=self._settings.image_placeholder_url,
        )

    async def _get_json(
        self,
        endpoint: str,
        params: dict[str, Any],
        *,
        not_found_message: str | None = None,
    ) -> dict[str, Any]:
        request_params = {
            **params,
            "api_key": self._settings.tmdb_api_key,
            "language": self._settings.tmdb_language,
        }
        try:
            response = await self._client.get(endpoint, params=request_params)
        except httpx.HTTPError as exc:
            logger.warning("TMDB request to %s failed: %s", endpoint, exc)
            raise ProviderError(f"Catalog request failed: {exc.__class__.__name__}") from exc

        if response.status_code == 404 and not_found_message is not None:
            raise NotFound(not_found_message)
        if response.status_code >= 400:
            logger.warning(
                "TMDB request to %s returned %s: %s",
                endpoint,
                response.status_code,
                response.text,
            )
            raise ProviderError(f"Catalog responded with HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            logger.warning("Unexpected non-JSON TMDB response for %s", endpoint)
            raise ProviderError("Catalog returned a non-JSON response") from exc
        if not isinstance(data, dict):
            logger.warning("Unexpected TMDB response structure for %s", endpoint)
            raise ProviderError("Catalog returned an unexpected payload")
        return data


def build_image_url(
    path: str | None,
    variant: ImageVariant | str,
    *,
    base_url: str,
    placeholder: str,
) -> str:
    """Combine an image path with the CDN root and a size segment.

    Unknown variants fall back to the medium size class.
    """

    if not path or not path.strip():
        return placeholder
    path = path.strip()
    if path.startswith(("http://", "https://")):
        return path
    try:
        size = ImageVariant.parse(variant).value
    except ValueError:
        logger.debug("Unknown image variant %r, using %s", variant, ImageVariant.MEDIUM.value)
        size = ImageVariant.MEDIUM.value
    return f"{base_url.rstrip('/')}/{size}/{path.lstrip('/')}"
