"""Assemble the detail page record for a title."""

from __future__ import annotations

import logging
from typing import Iterable

from ..config import Settings
from ..models import DetailRecord, MediaKind, TrailerCandidate, VideoMatch
from .tmdb import CatalogClient
from .youtube import VideoMatchResolver

logger = logging.getLogger(__name__)


def select_trailer(
    candidates: Iterable[TrailerCandidate], site: str
) -> TrailerCandidate | None:
    """Return the first trailer hosted on ``site``, if any."""

    for candidate in candidates:
        if candidate.type == "Trailer" and candidate.site == site:
            return candidate
    return None


class DetailAggregator:
    """Combine the catalog detail with trailer selection and a full video match."""

    def __init__(
        self,
        settings: Settings,
        catalog: CatalogClient,
        resolver: VideoMatchResolver,
    ) -> None:
        self._settings = settings
        self._catalog = catalog
        self._resolver = resolver

    async def aggregate(self, title_id: str, kind: MediaKind) -> DetailRecord:
        """Build the detail record for ``title_id``.

        Catalog failures propagate as ``DetailUnavailable`` subclasses. The
        full video lookup only runs for movies and never fails the call.
        """

        record = await self._catalog.fetch_detail(title_id, kind)
        update: dict[str, object] = {
            "trailer": select_trailer(record.trailers, self._settings.trailer_site),
        }
        if kind is MediaKind.MOVIE:
            update["video_match"] = await self._match_video(record)
        return record.model_copy(update=update)

    async def _match_video(self, record: DetailRecord) -> VideoMatch:
        try:
            return await self._resolver.resolve_full_title_video(record.title, record.year)
        except Exception:
            logger.exception("Full video lookup failed for %s", record.title)
            return VideoMatch.absent()
