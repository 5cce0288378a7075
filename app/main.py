from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import get_app_settings

REQUIRED_UNIQUE_CONSTRAINTS = {"products": "uq_products_sku_source"}


def _validate_env() -> None:
    """
    Validate crawler environment variables at startup.

    Raises RuntimeError listing every problem at once.
    """

    from db.config import resolve_database_url

    errors: list[str] = []

    try:
        resolve_database_url()
    except RuntimeError as exc:
        errors.append(str(exc))

    synthetic_mode = os.getenv("CRAWLER_SYNTHETIC_SKU_MODE", "random").strip().lower()
    if synthetic_mode not in {"random", "hash"}:
        errors.append(
            f"CRAWLER_SYNTHETIC_SKU_MODE='{synthetic_mode}' is not valid. "
            "Allowed values: ['hash', 'random']."
        )

    if errors:
        raise RuntimeError(
            "Startup validation failed, missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, get_app_settings().log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_database() -> None:
    """
    The database must be reachable, every ORM table must exist and the
    products table must carry the (sku, source) constraint used by bulk
    inserts. Does NOT auto-migrate.
    """

    from sqlalchemy import inspect as sa_inspect
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError

    import db.models  # noqa: F401 registers all ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
            inspector = sa_inspect(connection)
            tables = set(inspector.get_table_names())
            missing = sorted(set(Base.metadata.tables) - tables)
            constraints = {
                table: {item["name"] for item in inspector.get_unique_constraints(table)}
                for table in REQUIRED_UNIQUE_CONSTRAINTS
                if table in tables
            }
    except SQLAlchemyError as exc:
        raise RuntimeError("Database unavailable.") from exc

    missing.extend(
        f"{table}.{name}"
        for table, name in REQUIRED_UNIQUE_CONSTRAINTS.items()
        if table in constraints and name not in constraints[table]
    )
    if missing:
        logging.getLogger(__name__).critical(
            "Schema mismatch, missing from the database: %s. Run 'alembic upgrade head' and restart.",
            ", ".join(missing),
        )
        raise RuntimeError(f"Schema mismatch ({', '.join(missing)}). Run migrations and restart.")


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Check the database on boot; release the browser session and HTTP pool on exit."""
    log = logging.getLogger(__name__)
    if get_app_settings().check_database_on_startup:
        _check_database()
        log.info("Database connectivity and schema confirmed")

    from app.services.crawl_service import get_crawl_service

    try:
        yield
    finally:
        if get_crawl_service.cache_info().currsize:
            get_crawl_service().close()
            get_crawl_service.cache_clear()
        log.info("Crawl resources shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title=get_app_settings().title,
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import crawl_router, scrape_preview_router

    application.include_router(crawl_router)
    application.include_router(scrape_preview_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
