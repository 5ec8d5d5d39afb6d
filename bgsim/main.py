"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.types import Receive, Scope, Send

from bgsim import __version__
from bgsim.api import builder, cards, sim
from bgsim.api.dependencies import AppServices, build_services
from bgsim.api.errors import register_exception_handlers
from bgsim.core.config import ServiceConfig, get_service_config
from bgsim.middleware.logging_middleware import RequestLoggingMiddleware
from bgsim.middleware.path_normalization import PathNormalizationMiddleware


class HealthCheck:
    """Health check endpoint answering every HTTP method."""

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await JSONResponse({"status": "ok"})(scope, receive, send)


def create_app(
    services: AppServices | None = None,
    config: ServiceConfig | None = None,
) -> FastAPI:
    """Build the application around one set of services.

    Args:
        services: Pre-wired services (tests pass fakes here). Built from
            ``config`` when omitted.
        config: Service configuration; read from the environment when omitted.
    """
    config = config or get_service_config()
    services = services or build_services(config)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        await services.startup()
        yield
        services.shutdown()

    app = FastAPI(
        title="Battlegrounds Simulation API",
        description="Local API for Hearthstone Battlegrounds combat simulations",
        version=__version__,
        lifespan=lifespan,
        redirect_slashes=False,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.services = services

    app.add_middleware(RequestLoggingMiddleware)
    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(config.cors_origins),
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.add_middleware(PathNormalizationMiddleware)

    register_exception_handlers(app)

    app.include_router(builder.router, tags=["builder"])
    app.include_router(cards.router, tags=["cards"])
    app.include_router(sim.router, tags=["simulation"])

    # Mounted as a raw ASGI endpoint so the route carries no method list
    app.add_route("/health", HealthCheck(), include_in_schema=False)

    return app


app = create_app()
