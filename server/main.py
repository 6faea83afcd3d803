"""
Wall FastAPI application.

Entry point for the wall server:
    uvicorn server.main:app
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from server import db
from server.routes import admin as admin_routes
from server.routes import images as image_routes
from server.routes import ws as ws_routes
from server.services.wall_service import wall_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Handles startup and shutdown logic:
    - Initialize database pool
    - Restore the wall from history (fatal on failure)
    - Close database pool on shutdown
    """
    # Startup
    await db.init_pool()
    print("Database pool initialized")

    try:
        restored = await wall_service.recover()
    except Exception:
        await db.close_pool()
        raise
    print(f"Wall restored: {restored}/{len(wall_service.state)} tiles")

    yield

    # Shutdown
    await db.close_pool()
    print("Database pool closed")


app = FastAPI(
    title="Wall",
    docs_url=None,
    redoc_url=None,
    lifespan=lifespan,
)

# Register routes
app.include_router(ws_routes.router)
app.include_router(admin_routes.router)
app.include_router(image_routes.router)


@app.get("/health")
async def health():
    """Health check endpoint for uptime monitoring."""
    return {"status": "ok"}


# Serve frontend — must be after all API routes
_PUBLIC = Path(__file__).parent.parent / "public"

if _PUBLIC.is_dir():
    app.mount("/", StaticFiles(directory=str(_PUBLIC), html=True), name="public")
