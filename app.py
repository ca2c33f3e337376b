"""Main FastAPI application entry point for the TaskFlow API."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from config.settings import Settings, settings as default_settings
from config.database import Database
from config.logging_utils import log_error, log_success
from api.errors import register_exception_handlers
from api.routers.auth import router as auth_router
from api.routers.tasks import router as tasks_router
from services.context import AppContext


def create_app(config: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the application.

    Args:
        config: Settings to use instead of the environment-loaded defaults
        database: Database manager to use instead of one built from ``config``
    """
    config = config or default_settings
    database = database or Database.from_settings(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Handle startup and shutdown events."""
        await database.connect()
        log_success(f"Connected to MongoDB: {database.name}", prefix="DB")
        context = AppContext.build(config, database)
        await context.ensure_indexes()
        log_success("Database indexes created", prefix="DB")
        app.state.context = context
        yield
        await database.disconnect()
        log_success("Disconnected from MongoDB", prefix="DB")

    app = FastAPI(
        title=config.APP_NAME,
        version=config.APP_VERSION,
        description="Multi-user task tracker with JWT access/refresh authentication",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.CLIENT_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, expose_internal_errors=not config.is_production)

    api_router = APIRouter(prefix=config.API_PREFIX)
    api_router.include_router(auth_router)
    api_router.include_router(tasks_router)

    @api_router.get("/health")
    async def health_check(request: Request):
        """Health check endpoint for monitoring."""
        db_healthy = await request.app.state.context.database.health_check()
        if not db_healthy:
            log_error("Database ping failed", prefix="DB")
        return {
            "success": True,
            "message": f"{config.APP_NAME} API is healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": "connected" if db_healthy else "disconnected",
        }

    app.include_router(api_router)

    @app.get("/")
    async def api_info():
        """API information endpoint."""
        return {
            "message": f"{config.APP_NAME} API is running",
            "version": config.APP_VERSION,
            "endpoints": {
                "auth": f"{config.API_PREFIX}/auth",
                "tasks": f"{config.API_PREFIX}/tasks",
                "health": f"{config.API_PREFIX}/health",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.DEBUG
    )
