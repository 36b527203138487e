from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from books import router as books_router
from books.repository import BookRepository
from books.service import BookStore
from core import messages
from core.config import Settings
from core.db import Database
from core.errors import register_exception_handlers
from core.log import configure_logging, install_access_log, release_logging

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, repository: BookStore | None = None) -> FastAPI:
    """
    Build the API. Passing `repository` skips the database pool and the
    process logging setup entirely.

    Also usable as an ASGI factory: `uvicorn main:create_app --factory`.
    """
    settings = settings or Settings.from_env()
    if repository is None:
        configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if repository is not None:
            app.state.books = repository
            yield
            return

        # Open the DB pool once per process.
        database = Database(
            settings.require_database_url(),
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout_s,
        )
        try:
            await database.open()
        except Exception:
            logger.critical(messages.DB_CONNECT_FAILED, exc_info=True)
            raise
        books = BookRepository(database)
        try:
            await books.ensure_schema()
            app.state.books = books
            yield
        finally:
            await database.close()

    app = FastAPI(title="Book Library API", version="1.0", lifespan=lifespan)
    # Set up front too, for clients that never enter the lifespan.
    if repository is not None:
        app.state.books = repository

    register_exception_handlers(app)
    install_access_log(app)
    app.include_router(books_router.router, prefix="/v1", tags=["books"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


def run(settings: Settings | None = None) -> None:
    settings = settings or Settings.from_env()
    try:
        uvicorn.run(
            create_app(settings),
            host=settings.host,
            port=settings.port,
            log_level="debug" if settings.debug else "info",
            access_log=False,
        )
    finally:
        release_logging()


if __name__ == "__main__":
    run()
