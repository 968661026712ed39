"""FastAPI application main entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from .middleware import register_error_handlers
from .routes import ai, docs, system
from ..services.config import get_config
from ..services.database import get_database_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler to run startup tasks."""
    logger.info("Running startup: ensuring Mongo indexes...")
    try:
        get_database_service().ensure_indexes()
    except Exception as exc:
        # The API stays up; document routes fail until Mongo is reachable.
        logger.exception("Startup index creation failed: %s", exc)
    logger.info(
        "Firebase token verification %s",
        "enabled" if config.firebase_enabled else "disabled (x-owner header only)",
    )
    yield
    get_database_service().close()


app = FastAPI(
    title="Notely API",
    description="Note editor backend with an AI writing assistant",
    version="0.1.0",
    lifespan=lifespan,
)

config = get_config()

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allow_origins,
    allow_credentials="*" not in config.allow_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "x-owner"],
)

register_error_handlers(app)

app.include_router(system.router, tags=["system"])
app.include_router(docs.router, tags=["docs"])
app.include_router(ai.router, tags=["ai"])


frontend_dist = config.frontend_dist
if frontend_dist.exists():
    assets_dir = frontend_dist / "assets"
    if assets_dir.is_dir():
        app.mount("/assets", StaticFiles(directory=str(assets_dir)), name="assets")

    # Catch-all route for SPA - serve index.html for all non-API routes
    @app.get("/{full_path:path}")
    async def serve_spa(full_path: str):
        """Serve the SPA for all non-API routes."""
        if full_path.startswith("api/") or full_path in ("api", "health"):
            raise HTTPException(status_code=404, detail="Not found")

        file_path = (frontend_dist / full_path).resolve()
        if file_path.is_file() and file_path.is_relative_to(frontend_dist):
            return FileResponse(file_path)
        return FileResponse(frontend_dist / "index.html")

    logger.info(f"Serving frontend SPA from: {frontend_dist}")
else:
    logger.warning(f"Frontend dist not found at: {frontend_dist}")

    @app.get("/")
    async def root():
        """API health check endpoint."""
        return {"status": "ok", "service": "Notely API"}


__all__ = ["app"]
