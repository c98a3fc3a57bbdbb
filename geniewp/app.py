from __future__ import annotations

import logging
import os
from typing import Optional

from fastapi import FastAPI

from .config import GenieSettings
from .router import create_geniewp_router
from .sqlite_store import create_sqlite_store
from .store import OptionStore


def create_app(settings: Optional[GenieSettings] = None, store: Optional[OptionStore] = None) -> FastAPI:
    settings = settings or GenieSettings.from_env()
    store = store or create_sqlite_store(settings.database_url)
    app = FastAPI(title="GenieWP Theme Generator")
    app.state.settings = settings
    app.state.store = store
    app.include_router(create_geniewp_router(settings, store))
    return app


def main() -> None:
    logging.basicConfig(
        level=os.getenv("GENIEWP_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    import uvicorn

    uvicorn.run(
        create_app(),
        host=os.getenv("GENIEWP_HOST", "127.0.0.1"),
        port=int(os.getenv("GENIEWP_PORT", "9000")),
    )
