"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from diet_planner.api.custom_plans import router as custom_plans_router
from diet_planner.api.diet_plans import router as diet_plans_router
from diet_planner.api.errors import register_exception_handlers
from diet_planner.api.nutrition import router as nutrition_router
from diet_planner.api.trackers import router as trackers_router
from diet_planner.app_logging import configure_logging
from diet_planner.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="Diet Planner", lifespan=lifespan)
    app.state.container = container
    register_exception_handlers(app)

    app.include_router(nutrition_router)
    app.include_router(diet_plans_router)
    app.include_router(custom_plans_router)
    app.include_router(trackers_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
