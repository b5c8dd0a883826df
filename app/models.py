"""Pydantic models describing catalog and video payloads."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from .utils import coerce_int, extract_year


class MediaKind(str, Enum):
    """Kinds of titles the catalog can describe."""

    MOVIE = "movie"
    TV = "tv"

    @property
    def title_field(self) -> str:
        return "title" if self is MediaKind.MOVIE else "name"

    @property
    def date_field(self) -> str:
        return "release_date" if self is MediaKind.MOVIE else "first_air_date"


class ImageVariant(str, Enum):
    """Image size segments understood by the image CDN."""

    W92 = "w92"
    W185 = "w185"
    W342 = "w342"
    W500 = "w500"
    W780 = "w780"
    ORIGINAL = "original"

    # Size classes used by the presentation layer
    THUMBNAIL = "w185"
    MEDIUM = "w500"

    @classmethod
    def parse(cls, value: ImageVariant | str) -> ImageVariant:
        """Look up a variant by size segment (``w185``) or class name (``thumbnail``)."""

        if isinstance(value, cls):
            return value
        text = str(value).strip()
        try:
            return cls(text.lower())
        except ValueError:
            pass
        try:
            return cls[text.upper()]
        except KeyError:
            raise ValueError(f"{value!r} is not a valid ImageVariant") from None


class ReelScoutModel(BaseModel):
    """Base model: immutable, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


def _text(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _results(container: Any) -> list[dict[str, Any]]:
    """Return the dict entries of a ``{"results": [...]}`` sub-resource."""

    if isinstance(container, dict):
        container = container.get("results")
    if not isinstance(container, list):
        return []
    return [entry for entry in container if isinstance(entry, dict)]


class CastMember(ReelScoutModel):
    name: str
    character: str | None = None
    profile_path: str | None = None
    order: int | None = None


class TrailerCandidate(ReelScoutModel):
    """A video attached to a title by the catalog provider."""

    site: str
    key: str
    type: str
    name: str | None = None
    official: bool | None = None


class TitleSummary(ReelScoutModel):
    """Lightweight title reference used in listings and related rows."""

    id: str
    kind: MediaKind
    title: str
    overview: str | None = None
    release_date: str | None = None
    rating: float | None = Field(default=None, ge=0, le=10)
    poster_path: str | None = None
    backdrop_path: str | None = None

    @classmethod
    def from_tmdb_payload(
        cls, data: dict[str, Any], *, kind: MediaKind | None = None
    ) -> "TitleSummary | None":
        """Build a summary from a list entry, or ``None`` when it is unusable."""

        media_type = data.get("media_type")
        if media_type is not None:
            try:
                kind = MediaKind(media_type)
            except ValueError:
                return None
        if kind is None:
            kind = MediaKind.TV if "first_air_date" in data else MediaKind.MOVIE

        identifier = data.get("id")
        title = _text(data.get(kind.title_field)) or _text(
            data.get("title") or data.get("name")
        )
        if identifier in (None, "") or not title:
            return None

        return cls(
            id=str(identifier),
            kind=kind,
            title=title,
            overview=_text(data.get("overview")),
            release_date=_text(data.get(kind.date_field)),
            rating=data.get("vote_average"),
            poster_path=_text(data.get("poster_path")),
            backdrop_path=_text(data.get("backdrop_path")),
        )


def _summaries(
    entries: Iterable[dict[str, Any]], kind: MediaKind | None
) -> tuple[TitleSummary, ...]:
    summaries: list[TitleSummary] = []
    for entry in entries:
        try:
            summary = TitleSummary.from_tmdb_payload(entry, kind=kind)
        except ValueError:
            continue
        if summary is not None:
            summaries.append(summary)
    return tuple(summaries)


class VideoMatch(ReelScoutModel):
    """Outcome of a full-length video lookup: a platform key or nothing."""

    key: str | None = None

    @classmethod
    def absent(cls) -> "VideoMatch":
        return cls()

    @computed_field(alias="found")  # type: ignore[prop-decorator]
    @property
    def found(self) -> bool:
        return self.key is not None

    @computed_field(alias="watchUrl")  # type: ignore[prop-decorator]
    @property
    def watch_url(self) -> str | None:
        if self.key is None:
            return None
        return f"https://www.youtube.com/watch?v={self.key}"


class VideoCandidate(ReelScoutModel):
    """A video returned by the video-search provider."""

    key: str
    title: str = ""
    duration_seconds: int = 0
    view_count: int = 0
    published_at: datetime | None = None


class DetailRecord(ReelScoutModel):
    """Composite detail view for a single title."""

    id: str
    kind: MediaKind
    title: str
    overview: str | None = None
    release_date: str | None = None
    rating: float | None = Field(default=None, ge=0, le=10)
    runtime: int | None = None
    season_count: int | None = None
    tagline: str | None = None
    poster_path: str | None = None
    backdrop_path: str | None = None
    genres: tuple[str, ...] = ()
    cast: tuple[CastMember, ...] = ()
    trailers: tuple[TrailerCandidate, ...] = ()
    trailer: TrailerCandidate | None = None
    similar: tuple[TitleSummary, ...] = ()
    recommendations: tuple[TitleSummary, ...] = ()
    video_match: VideoMatch = Field(default_factory=VideoMatch.absent)

    @computed_field(alias="year")  # type: ignore[prop-decorator]
    @property
    def year(self) -> str | None:
        return extract_year(self.release_date)

    @classmethod
    def from_tmdb_payload(cls, data: dict[str, Any], *, kind: MediaKind) -> "DetailRecord":
        """Coerce a detail response with appended sub-resources into a record.

        Raises ``ValueError`` (pydantic's ``ValidationError`` included) when the
        payload lacks an identifier or title, or when a field has the wrong type.
        """

        identifier = data.get("id")
        title = _text(data.get(kind.title_field)) or _text(
            data.get("original_title") or data.get("original_name")
        )
        if identifier in (None, ""):
            raise ValueError("Catalog payload is missing an id")
        if not title:
            raise ValueError(f"Catalog payload for {identifier} is missing a title")

        raw_genres = data.get("genres")
        if not isinstance(raw_genres, list):
            raw_genres = []
        genres = tuple(
            name
            for name in (
                _text(genre.get("name"))
                for genre in raw_genres
                if isinstance(genre, dict)
            )
            if name
        )

        cast: list[CastMember] = []
        credits = data.get("credits")
        cast_entries = credits.get("cast") if isinstance(credits, dict) else None
        for person in _results(cast_entries):
            name = _text(person.get("name"))
            if not name:
                continue
            cast.append(
                CastMember(
                    name=name,
                    character=_text(person.get("character")),
                    profile_path=_text(person.get("profile_path")),
                    order=person.get("order"),
                )
            )

        trailers: list[TrailerCandidate] = []
        for video in _results(data.get("videos")):
            site, key, video_type = (
                _text(video.get("site")),
                _text(video.get("key")),
                _text(video.get("type")),
            )
            if not (site and key and video_type):
                continue
            trailers.append(
                TrailerCandidate(
                    site=site,
                    key=key,
                    type=video_type,
                    name=_text(video.get("name")),
                    official=video.get("official"),
                )
            )

        runtime = season_count = None
        if kind is MediaKind.MOVIE:
            runtime = data.get("runtime") or None
        else:
            season_count = data.get("number_of_seasons") or None

        return cls(
            id=str(identifier),
            kind=kind,
            title=title,
            overview=_text(data.get("overview")),
            release_date=_text(data.get(kind.date_field)),
            rating=data.get("vote_average"),
            runtime=runtime,
            season_count=season_count,
            tagline=_text(data.get("tagline")),
            poster_path=_text(data.get("poster_path")),
            backdrop_path=_text(data.get("backdrop_path")),
            genres=genres,
            cast=tuple(cast),
            trailers=tuple(trailers),
            similar=_summaries(_results(data.get("similar")), kind),
            recommendations=_summaries(_results(data.get("recommendations")), kind),
        )


class SearchPage(ReelScoutModel):
    """One page of title listings."""

    page: int = 1
    total_pages: int = 0
    total_results: int = 0
    results: tuple[TitleSummary, ...] = ()

    @classmethod
    def from_tmdb_payload(
        cls, data: dict[str, Any], *, kind: MediaKind | None = None
    ) -> "SearchPage":
        return cls(
            page=coerce_int(data.get("page"), default=1),
            total_pages=coerce_int(data.get("total_pages")),
            total_results=coerce_int(data.get("total_results")),
            results=_summaries(_results(data.get("results")), kind),
        )
