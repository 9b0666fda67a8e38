"""Run the backend with uvicorn: ``python -m revelax``."""

from __future__ import annotations

import logging

import uvicorn

from revelax.core.config import load_settings


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.revelax_log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "revelax.main:app",
        host=settings.revelax_app_host,
        port=settings.revelax_app_port,
        log_level=settings.revelax_log_level.lower(),
    )


if __name__ == "__main__":
    main()
