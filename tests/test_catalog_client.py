"""Tests for the TMDB catalog client."""

from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from app.config import Settings
from app.errors import DetailUnavailable, NotFound, ProviderError
from app.models import ImageVariant, MediaKind
from app.services.tmdb import CatalogClient, build_image_url

PLACEHOLDER = "https://img.example.com/placeholder.png"

MATRIX_PAYLOAD: dict[str, Any] = {
    "id": 603,
    "title": "The Matrix",
    "overview": "A hacker learns the truth about reality.",
    "release_date": "1999-03-31",
    "vote_average": 8.2,
    "runtime": 136,
    "tagline": "Welcome to the Real World.",
    "poster_path": "/poster.jpg",
    "backdrop_path": "/backdrop.jpg",
    "genres": [{"id": 28, "name": "Action"}, {"id": 878, "name": "Science Fiction"}],
    "credits": {
        "cast": [
            {"name": "Keanu Reeves", "character": "Neo", "profile_path": "/keanu.jpg", "order": 0},
            {"name": "Carrie-Anne Moss", "character": "Trinity", "profile_path": None, "order": 1},
        ]
    },
    "videos": {
        "results": [
            {"site": "YouTube", "key": "teaser1", "type": "Teaser", "name": "Teaser"},
            {"site": "YouTube", "key": "vKQi3bBA1y8", "type": "Trailer", "name": "Trailer"},
        ]
    },
    "similar": {"results": [{"id": 604, "title": "The Matrix Reloaded", "release_date": "2003-05-15"}]},
    "recommendations": {"results": [{"id": 605, "title": "The Matrix Revolutions"}]},
}


def build_settings(**overrides: Any) -> Settings:
    """Return a settings object with defaults suitable for tests."""

    base = {
        "TMDB_API_KEY": "tmdb-key",
        "TMDB_IMAGE_BASE_URL": "https://img.example.com/t/p",
        "IMAGE_PLACEHOLDER_URL": PLACEHOLDER,
    }
    base.update(overrides)
    return Settings(_env_file=None, **base)  # type: ignore[arg-type]


async def _call(
    handler: Callable[[httpx.Request], httpx.Response],
    method: str,
    *args: Any,
    **kwargs: Any,
) -> Any:
    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport, base_url="https://api.example.com/3") as http_client:
        client = CatalogClient(build_settings(), http_client)
        return await getattr(client, method)(*args, **kwargs)


def test_client_requires_api_key() -> None:
    with pytest.raises(ValueError, match="TMDB API key is required"):
        CatalogClient(Settings(_env_file=None, TMDB_API_KEY=""), httpx.AsyncClient())


@pytest.mark.anyio("asyncio")
async def test_fetch_detail_expands_sub_resources_in_one_request() -> None:
    """All sub-resources should come back from a single detail request."""

    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=MATRIX_PAYLOAD)

    record = await _call(handler, "fetch_detail", "603", MediaKind.MOVIE)

    assert len(requests) == 1
    assert requests[0].url.path == "/3/movie/603"
    assert requests[0].url.params["append_to_response"] == "credits,videos,similar,recommendations"
    assert requests[0].url.params["api_key"] == "tmdb-key"

    assert record.id == "603"
    assert record.title == "The Matrix"
    assert record.year == "1999"
    assert record.runtime == 136
    assert record.season_count is None
    assert record.genres == ("Action", "Science Fiction")
    assert [member.name for member in record.cast] == ["Keanu Reeves", "Carrie-Anne Moss"]
    assert record.cast[1].profile_path is None
    assert [video.key for video in record.trailers] == ["teaser1", "vKQi3bBA1y8"]
    assert record.similar[0].title == "The Matrix Reloaded"
    assert record.similar[0].kind is MediaKind.MOVIE
    assert record.recommendations[0].id == "605"
    assert record.video_match.found is False


@pytest.mark.anyio("asyncio")
async def test_fetch_detail_for_tv_uses_name_and_seasons() -> None:
    payload = {
        "id": 1399,
        "name": "Game of Thrones",
        "first_air_date": "2011-04-17",
        "number_of_seasons": 8,
        "episode_run_time": [60],
    }
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=payload)

    record = await _call(handler, "fetch_detail", "1399", MediaKind.TV)

    assert requests[0].url.path == "/3/tv/1399"
    assert record.title == "Game of Thrones"
    assert record.release_date == "2011-04-17"
    assert record.season_count == 8
    assert record.runtime is None


@pytest.mark.anyio("asyncio")
async def test_fetch_detail_tolerates_missing_optional_fields() -> None:
    """Absent tagline, runtime, genres and sub-resources degrade to empty."""

    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "id": 42,
                "title": "Sparse",
                "tagline": "",
                "genres": None,
                "credits": [],
                "videos": {"results": ["junk", {"site": "YouTube"}]},
            },
        )

    record = await _call(handler, "fetch_detail", "42", MediaKind.MOVIE)

    assert record.tagline is None
    assert record.runtime is None
    assert record.genres == ()
    assert record.cast == ()
    assert record.trailers == ()
    assert record.similar == ()
    assert record.recommendations == ()


@pytest.mark.anyio("asyncio")
async def test_fetch_detail_maps_404_to_not_found() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"status_code": 34})

    with pytest.raises(NotFound):
        await _call(handler, "fetch_detail", "999999", MediaKind.MOVIE)


@pytest.mark.anyio("asyncio")
async def test_fetch_detail_rejects_blank_id_without_request() -> None:
    def handler(_: httpx.Request) -> httpx.Response:  # pragma: no cover - must not be called
        raise AssertionError("No request expected for a blank id")

    with pytest.raises(NotFound):
        await _call(handler, "fetch_detail", "  ", MediaKind.MOVIE)


@pytest.mark.anyio("asyncio")
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="upstream exploded"),
        httpx.Response(401, json={"status_message": "Invalid API key"}),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json=[1, 2, 3]),
        httpx.Response(200, json={"title": "No id"}),
        httpx.Response(200, json={"id": 1}),
        httpx.Response(200, json={"id": 1, "title": "Bad runtime", "runtime": "long"}),
    ],
)
async def test_fetch_detail_maps_failures_to_provider_error(response: httpx.Response) -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return response

    with pytest.raises(ProviderError) as excinfo:
        await _call(handler, "fetch_detail", "1", MediaKind.MOVIE)

    assert isinstance(excinfo.value, DetailUnavailable)
    assert not isinstance(excinfo.value, NotFound)


@pytest.mark.anyio("asyncio")
async def test_fetch_detail_maps_transport_errors_to_provider_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ProviderError):
        await _call(handler, "fetch_detail", "603", MediaKind.MOVIE)


@pytest.mark.anyio("asyncio")
async def test_search_titles_drops_people() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json={
                "page": 1,
                "total_pages": 1,
                "total_results": 3,
                "results": [
                    {"id": 603, "media_type": "movie", "title": "The Matrix"},
                    {"id": 6384, "media_type": "person", "name": "Keanu Reeves"},
                    {"id": 1399, "media_type": "tv", "name": "Game of Thrones"},
                ],
            },
        )

    page = await _call(handler, "search_titles", "  matrix ")

    assert requests[0].url.path == "/3/search/multi"
    assert requests[0].url.params["query"] == "matrix"
    assert [(item.id, item.kind) for item in page.results] == [
        ("603", MediaKind.MOVIE),
        ("1399", MediaKind.TV),
    ]
    assert page.total_results == 3


@pytest.mark.anyio("asyncio")
async def test_search_titles_blank_query_skips_request() -> None:
    def handler(_: httpx.Request) -> httpx.Response:  # pragma: no cover - must not be called
        raise AssertionError("No request expected for a blank query")

    page = await _call(handler, "search_titles", "   ")

    assert page.results == ()
    assert page.total_results == 0


@pytest.mark.anyio("asyncio")
@pytest.mark.parametrize(
    ("kind", "category", "expected_path"),
    [
        (MediaKind.MOVIE, "trending", "/3/trending/movie/week"),
        (MediaKind.TV, "popular", "/3/tv/popular"),
        (MediaKind.MOVIE, "top_rated", "/3/movie/top_rated"),
    ],
)
async def test_list_titles_routes_categories(
    kind: MediaKind, category: str, expected_path: str
) -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200, json={"page": 2, "results": [{"id": 1, "title": "A", "name": "A"}]}
        )

    page = await _call(handler, "list_titles", kind, category, page=2)

    assert requests[0].url.path == expected_path
    assert requests[0].url.params["page"] == "2"
    assert page.page == 2
    assert page.results[0].kind is kind


@pytest.mark.anyio("asyncio")
async def test_list_titles_rejects_unknown_category() -> None:
    def handler(_: httpx.Request) -> httpx.Response:  # pragma: no cover - must not be called
        raise AssertionError("No request expected for an unknown category")

    with pytest.raises(ValueError, match="Unsupported listing category"):
        await _call(handler, "list_titles", MediaKind.MOVIE, "upcoming-ish")


def test_resolve_image_url_uses_placeholder_for_every_variant() -> None:
    client = CatalogClient(build_settings(), httpx.AsyncClient())

    for variant in ImageVariant:
        assert client.resolve_image_url(None, variant) == PLACEHOLDER
        assert client.resolve_image_url("", variant) == PLACEHOLDER


def test_resolve_image_url_is_deterministic() -> None:
    client = CatalogClient(build_settings(), httpx.AsyncClient())

    first = client.resolve_image_url("/poster.jpg", ImageVariant.W500)
    second = client.resolve_image_url("/poster.jpg", ImageVariant.W500)

    assert first == second == "https://img.example.com/t/p/w500/poster.jpg"
    assert client.resolve_image_url("/poster.jpg", ImageVariant.ORIGINAL) == (
        "https://img.example.com/t/p/original/poster.jpg"
    )


def test_build_image_url_keeps_absolute_paths_and_joins_cleanly() -> None:
    assert (
        build_image_url(
            "https://cdn.example.com/a.jpg",
            ImageVariant.THUMBNAIL,
            base_url="https://img.example.com/t/p",
            placeholder=PLACEHOLDER,
        )
        == "https://cdn.example.com/a.jpg"
    )
    assert (
        build_image_url(
            "poster.jpg",
            "w185",
            base_url="https://img.example.com/t/p/",
            placeholder=PLACEHOLDER,
        )
        == "https://img.example.com/t/p/w185/poster.jpg"
    )


@pytest.mark.parametrize(
    ("variant", "segment"),
    [
        ("thumbnail", "w185"),
        ("medium", "w500"),
        ("ORIGINAL", "original"),
        ("w342", "w342"),
        ("huge", "w500"),
    ],
)
def test_build_image_url_accepts_size_class_names(variant: str, segment: str) -> None:
    url = build_image_url(
        "/poster.jpg",
        variant,
        base_url="https://img.example.com/t/p",
        placeholder=PLACEHOLDER,
    )

    assert url == f"https://img.example.com/t/p/{segment}/poster.jpg"
