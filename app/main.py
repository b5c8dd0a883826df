"""Entry point for the FastAPI-powered media detail service."""

from __future__ import annotations

import logging
import secrets
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, settings
from .errors import NotFound, ProviderError
from .models import DetailRecord, ImageVariant, MediaKind, SearchPage
from .services.aggregator import DetailAggregator
from .services.tmdb import CatalogClient
from .services.youtube import VideoMatchResolver

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    app_settings = get_app_settings(fastapi_app)
    try:
        tmdb_http_client = await exit_stack.enter_async_context(
            httpx.AsyncClient(
                base_url=str(app_settings.tmdb_api_url),
                timeout=httpx.Timeout(15.0, connect=5.0),
            )
        )
        youtube_http_client = await exit_stack.enter_async_context(
            httpx.AsyncClient(
                base_url=str(app_settings.youtube_api_url),
                timeout=httpx.Timeout(10.0, connect=5.0),
            )
        )

        catalog = CatalogClient(app_settings, tmdb_http_client)
        resolver = VideoMatchResolver(app_settings, youtube_http_client)

        fastapi_app.state.catalog_client = catalog
        fastapi_app.state.detail_aggregator = DetailAggregator(app_settings, catalog, resolver)

        yield
    finally:
        await exit_stack.aclose()


def create_app(app_settings: Settings | None = None) -> FastAPI:
    resolved_settings = app_settings or settings
    fastapi_app = FastAPI(
        title=resolved_settings.app_name,
        description="Aggregated movie and TV detail pages with full video lookup",
        version="1.0.0",
        lifespan=lifespan,
    )
    fastapi_app.state.settings = resolved_settings

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_app_settings(fastapi_app: FastAPI) -> Settings:
    configured = getattr(fastapi_app.state, "settings", None)
    if isinstance(configured, Settings):
        return configured
    return settings


def get_catalog_client(fastapi_app: FastAPI) -> CatalogClient:
    client = getattr(fastapi_app.state, "catalog_client", None)
    if not isinstance(client, CatalogClient):
        raise RuntimeError("Catalog client not initialised")
    return client


def get_detail_aggregator(fastapi_app: FastAPI) -> DetailAggregator:
    aggregator = getattr(fastapi_app.state, "detail_aggregator", None)
    if not isinstance(aggregator, DetailAggregator):
        raise RuntimeError("Detail aggregator not initialised")
    return aggregator


def register_routes(fastapi_app: FastAPI) -> None:
    def _require_session(request: Request) -> None:
        expected = get_app_settings(fastapi_app).access_token
        if not expected:
            return
        header = request.headers.get("authorization") or ""
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not secrets.compare_digest(
            token.strip(), expected
        ):
            raise HTTPException(
                status_code=401,
                detail="Sign in to view title details",
                headers={"WWW-Authenticate": "Bearer"},
            )

    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/api/search", response_model=SearchPage)
    async def search(
        q: str = Query(default="", max_length=200),
        page: int = Query(default=1, ge=1, le=500),
    ) -> SearchPage:
        catalog = get_catalog_client(fastapi_app)
        try:
            return await catalog.search_titles(q, page=page)
        except ProviderError as exc:
            raise HTTPException(status_code=502, detail="Something went wrong") from exc

    @fastapi_app.get("/api/image")
    async def image_url(
        path: str | None = None,
        variant: str = ImageVariant.MEDIUM.value,
    ) -> dict[str, str]:
        try:
            resolved_variant = ImageVariant.parse(variant)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail="Unsupported image variant") from exc
        catalog = get_catalog_client(fastapi_app)
        return {"url": catalog.resolve_image_url(path, resolved_variant)}

    @fastapi_app.get("/api/{kind}/list/{category}", response_model=SearchPage)
    async def list_titles(
        kind: str,
        category: str,
        page: int = Query(default=1, ge=1, le=500),
    ) -> SearchPage:
        media_kind = _parse_kind(kind)
        catalog = get_catalog_client(fastapi_app)
        try:
            return await catalog.list_titles(media_kind, category, page=page)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except ProviderError as exc:
            raise HTTPException(status_code=502, detail="Something went wrong") from exc

    @fastapi_app.get("/api/{kind}/{title_id}", response_model=DetailRecord)
    async def title_detail(request: Request, kind: str, title_id: str) -> DetailRecord:
        _require_session(request)
        media_kind = _parse_kind(kind)
        aggregator = get_detail_aggregator(fastapi_app)
        try:
            return await aggregator.aggregate(title_id, media_kind)
        except NotFound as exc:
            raise HTTPException(status_code=404, detail="Title not found") from exc
        except ProviderError as exc:
            logger.warning("Detail for %s %s unavailable: %s", kind, title_id, exc)
            raise HTTPException(status_code=502, detail="Something went wrong") from exc


def _parse_kind(value: Any) -> MediaKind:
    try:
        return MediaKind(str(value).lower())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Unsupported media kind") from exc


app = create_app()
