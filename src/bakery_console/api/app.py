"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from bakery_console.adapters.strapi_client import StrapiError, StrapiHTTPError
from bakery_console.api.console import router as console_router
from bakery_console.app_logging import configure_logging
from bakery_console.containers import AppContainer
from bakery_console.domain.models import InvalidStatusTransitionError

HTTP_BAD_GATEWAY = 502
HTTP_CONFLICT = 409
HTTP_CLIENT_ERRORS = range(400, 500)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(console_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.exception_handler(StrapiError)
    async def strapi_error_handler(request: Request, exc: StrapiError) -> JSONResponse:
        status_code = HTTP_BAD_GATEWAY
        detail = str(exc)
        if isinstance(exc, StrapiHTTPError):
            detail = exc.message
            if exc.status_code in HTTP_CLIENT_ERRORS:
                status_code = exc.status_code
        logger.warning("Backend call failed for %s: %s", request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"detail": detail})

    @app.exception_handler(InvalidStatusTransitionError)
    async def transition_error_handler(
        request: Request, exc: InvalidStatusTransitionError
    ) -> JSONResponse:
        return JSONResponse(status_code=HTTP_CONFLICT, content={"detail": str(exc)})

    return app
