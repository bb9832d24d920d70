"""
Run the API with uvicorn: ``python -m listings_api``.
"""

from __future__ import annotations

import logging

import uvicorn

from listings_api.config import get_settings


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info(
        "Starting server on port %s (environment: %s)",
        settings.port,
        settings.environment,
    )
    uvicorn.run(
        "listings_api.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=False,
    )


if __name__ == "__main__":
    main()
