"""
OAuth integrations service: application entry point.
"""

from __future__ import annotations

import logging
import sys

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.errors import register_error_handlers
from api.middleware import register_middleware
from api.routes import router as api_router
from config.settings import config
from database.encryption import default_cipher
from database.session import create_tables
from integrations.registry import default_catalog

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s: %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx", "urllib3", "aiosqlite"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="OAuth Integrations",
        version="1.0.0",
        description="Store OAuth configurations and authentications, and refresh provider tokens.",
    )

    register_middleware(app)
    register_error_handlers(app)

    # CORS stays outermost: preflights skip the API gates
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routes
    app.include_router(api_router, prefix="/api")

    @app.on_event("startup")
    async def on_startup():
        catalog = default_catalog()
        logger.info("Loaded %d integrations", len(catalog.list()))

        default_cipher()
        if not config.secret_key:
            logger.warning("SECRET_KEY not set; the API is open to any caller")

        if config.create_tables:
            await create_tables()

        logger.info("Application ready to accept requests.")

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
