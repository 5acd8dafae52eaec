"""FastAPI application for the Patient Registry.

``create_app`` builds an application around a ServiceContainer. Each app
owns its store, so tests and embedded uses never share state.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from patient_registry.api.errors import register_exception_handlers
from patient_registry.api.logging_config import setup_logging
from patient_registry.api.middleware import setup_middleware
from patient_registry.api.routes import attachments, diagnosed_conditions, health, patients, users
from patient_registry.infrastructure.settings import APP_DESCRIPTION, APP_VERSION
from patient_registry.main import ServiceContainer, build_container

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    settings = app.state.container.settings
    logger.info(f"{settings.app_name} starting up...")
    logger.info("API documentation available at /public/docs")
    logger.info(f"Logging level: {settings.log_level}")
    yield
    logger.info(f"{settings.app_name} shutting down...")


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """Create the registry API.

    Parameters:
        container: Wired services; a fresh container built from the
            environment is used when omitted

    Returns:
        FastAPI: Application with routes, middleware and error handlers
    """
    container = container or build_container()
    settings = container.settings
    server_config = settings.server

    app = FastAPI(
        title=settings.app_name,
        description=APP_DESCRIPTION,
        version=APP_VERSION,
        docs_url="/public/docs",
        redoc_url=None,
        openapi_url="/public/openapi.json",
        lifespan=lifespan,
    )
    app.state.container = container

    register_exception_handlers(app)
    setup_middleware(app, enable_hsts=server_config.enable_hsts)

    # Outermost, so preflight responses are produced before token checks
    app.add_middleware(
        CORSMiddleware,
        allow_origins=server_config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Process-Time"],
    )

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(patients.router)
    app.include_router(attachments.router)
    app.include_router(diagnosed_conditions.router)

    return app


def build_app() -> FastAPI:
    """Factory for ``uvicorn --factory``: configure logging from the environment, then build."""
    container = build_container()
    setup_logging(use_json=container.settings.json_logs, log_level=container.settings.log_level)
    return create_app(container)


if __name__ == "__main__":
    import uvicorn

    application = build_app()
    server_config = application.state.container.settings.server
    uvicorn.run(application, host=server_config.host, port=server_config.port, log_level="info")
