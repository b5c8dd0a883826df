"""Run the ReelScout API with ``python -m reelscout``."""

from __future__ import annotations

import logging

import uvicorn

from app.config import get_settings

logger = logging.getLogger("reelscout")


def main() -> None:
    """Serve ``app.main:app``; auto-reload only in development."""

    current = get_settings()
    if not current.youtube_api_key:
        logger.warning("YOUTUBE_API_KEY is not set; full video matches are disabled")
    uvicorn.run(
        "app.main:app",
        host=current.server_host,
        port=current.server_port,
        reload=current.environment == "development",
    )


if __name__ == "__main__":  # pragma: no cover - runtime entrypoint
    main()
