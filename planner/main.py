"""FastAPI application entry point"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Optional
from planner import __version__
from planner.config import settings
from planner.api import tasks, time_logs, analytics
from planner.services.persistence import JsonFilePersistence
from planner.services.planner_store import PlannerStore
from planner.utils.monitoring import StructuredLogger, persistence_metrics


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan"""
    StructuredLogger.log_event(
        "app_startup",
        "Planner API starting",
        metadata={"environment": settings.ENVIRONMENT, "storage_path": settings.STORAGE_PATH},
    )
    yield
    StructuredLogger.log_event("app_shutdown", "Planner API stopping", metadata=persistence_metrics.get_metrics())


def create_app(store: Optional[PlannerStore] = None) -> FastAPI:
    """Build the application around a store; by default one backed by the JSON file"""
    app = FastAPI(
        title="Planner API",
        description="Task and habit planner with time tracking",
        version=__version__,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    # The application owns exactly one store for its lifetime
    app.state.store = store or PlannerStore(
        persistence=JsonFilePersistence(),
        tz=settings.get_timezone(),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(tasks.router, prefix="/api/tasks", tags=["tasks"])
    app.include_router(time_logs.router, prefix="/api/time-logs", tags=["time-logs"])
    app.include_router(analytics.router, prefix="/api/analytics", tags=["analytics"])

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "Planner API",
            "metrics": persistence_metrics.get_metrics(),
        }

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {"message": "Planner API", "version": __version__}

    return app


app = create_app()
