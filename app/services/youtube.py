"""Best-effort lookup of full-length titles on YouTube."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable

import httpx
from pydantic import ValidationError

from ..config import Settings
from ..models import VideoCandidate, VideoMatch
from ..utils import coerce_int, parse_iso8601_duration, slugify

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _items(data: dict[str, Any]) -> list[dict[str, Any]]:
    items = data.get("items")
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def _published(candidate: VideoCandidate) -> datetime:
    if candidate.published_at is None:
        return _EPOCH
    if candidate.published_at.tzinfo is None:
        return candidate.published_at.replace(tzinfo=timezone.utc)
    return candidate.published_at


class VideoMatchResolver:
    """Find the single video that most plausibly holds a whole movie.

    The lookup is an enhancement: provider failures of any kind (quota,
    transport, odd payloads) resolve to an absent match and are never retried.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._client = http_client

    def build_query(self, title: str, year: str | None = None) -> str:
        """Return a search query biased towards full-length uploads."""

        parts = [title.strip()]
        if year and str(year).strip():
            parts.append(str(year).strip())
        if self._settings.video_query_suffix:
            parts.append(self._settings.video_query_suffix)
        return " ".join(parts)

    async def resolve_full_title_video(
        self, title: str, year: str | None = None
    ) -> VideoMatch:
        """Return the best full-length match for ``title`` or an absent match."""

        if not (title or "").strip():
            return VideoMatch.absent()
        if not self._settings.youtube_api_key:
            logger.info("YouTube API key missing, skipping full video lookup for %s", title)
            return VideoMatch.absent()

        query = self.build_query(title, year)
        try:
            video_ids = await self._search(query)
            if not video_ids:
                logger.info("No YouTube results for %r", query)
                return VideoMatch.absent()
            candidates = await self._fetch_candidates(video_ids)
        except httpx.HTTPError as exc:
            logger.warning("YouTube lookup failed for %r: %s", query, exc)
            return VideoMatch.absent()
        except ValueError as exc:
            logger.warning("Unexpected YouTube payload for %r: %s", query, exc)
            return VideoMatch.absent()

        ranked = self.rank_candidates(title, candidates)
        if not ranked:
            logger.info(
                "No YouTube result for %r reached %ss",
                query,
                self._settings.video_min_duration_seconds,
            )
            return VideoMatch.absent()

        best = ranked[0]
        logger.debug(
            "Matched %r to %s (%ss, %s views)",
            query,
            best.key,
            best.duration_seconds,
            best.view_count,
        )
        return VideoMatch(key=best.key)

    def rank_candidates(
        self, title: str, candidates: Iterable[VideoCandidate]
    ) -> list[VideoCandidate]:
        """Drop clip-length candidates and order the rest best-first.

        Longer videos win; view count and publish time only break ties. With
        ``VIDEO_PREFER_TITLE_MATCH`` enabled, videos whose title contains the
        work's title as whole words rank ahead of all others.
        """

        threshold = self._settings.video_min_duration_seconds
        prefer_title = self._settings.video_prefer_title_match
        target = f"-{slugify(title)}-"

        def mentions_title(candidate: VideoCandidate) -> bool:
            if not prefer_title or target == "--":
                return False
            return target in f"-{slugify(candidate.title)}-"

        plausible = [
            candidate for candidate in candidates if candidate.duration_seconds >= threshold
        ]
        plausible.sort(
            key=lambda candidate: (
                mentions_title(candidate),
                candidate.duration_seconds,
                candidate.view_count,
                _published(candidate),
            ),
            reverse=True,
        )
        return plausible

    async def _search(self, query: str) -> list[str]:
        data = await self._get_json(
            "/search",
            {
                "part": "snippet",
                "type": "video",
                "q": query,
                "maxResults": self._settings.video_search_max_results,
                "videoDuration": "long",
            },
        )
        video_ids: list[str] = []
        for item in _items(data):
            identifier = item.get("id")
            video_id = identifier.get("videoId") if isinstance(identifier, dict) else None
            if isinstance(video_id, str) and video_id and video_id not in video_ids:
                video_ids.append(video_id)
        return video_ids

    async def _fetch_candidates(self, video_ids: list[str]) -> list[VideoCandidate]:
        data = await self._get_json(
            "/videos",
            {
                "part": "snippet,contentDetails,statistics",
                "id": ",".join(video_ids),
            },
        )
        candidates: list[VideoCandidate] = []
        for item in _items(data):
            if not item.get("id"):
                continue
            snippet = _mapping(item.get("snippet"))
            details = _mapping(item.get("contentDetails"))
            statistics = _mapping(item.get("statistics"))
            try:
                candidate = VideoCandidate(
                    key=str(item["id"]),
                    title=str(snippet.get("title") or ""),
                    duration_seconds=parse_iso8601_duration(details.get("duration")) or 0,
                    view_count=coerce_int(statistics.get("viewCount")),
                    published_at=snippet.get("publishedAt"),
                )
            except ValidationError as exc:
                logger.debug("Skipping malformed YouTube item %s: %s", item.get("id"), exc)
                continue
            candidates.append(candidate)
        return candidates

    async def _get_json(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        response = await self._client.get(
            endpoint, params={**params, "key": self._settings.youtube_api_key}
        )
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected response structure from {endpoint}")
        return data
