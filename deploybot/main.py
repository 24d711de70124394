"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from deploybot import __version__
from deploybot.api.middleware import RequestLoggingMiddleware
from deploybot.api.v1.router import router as v1_router
from deploybot.config import settings
from deploybot.core.deps import HandlerDeps
from deploybot.core.events import EventRouter
from deploybot.core.exceptions import (
    DeploybotError,
    ProviderError,
    WebhookPayloadError,
    WebhookSignatureError,
)
from deploybot.core.locks import LockStore
from deploybot.services.github import GitHubProvider
from deploybot.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

# Errors that escape a route, by HTTP status
ERROR_STATUS: dict[type[DeploybotError], int] = {
    WebhookSignatureError: status.HTTP_401_UNAUTHORIZED,
    WebhookPayloadError: status.HTTP_400_BAD_REQUEST,
    ProviderError: status.HTTP_502_BAD_GATEWAY,
}


def _error_body(code: str, message: str, **extra: object) -> dict[str, object]:
    return {"error": {"code": code, "message": message, **extra}}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    configure_logging()
    logger.info(
        "application.starting",
        version=__version__,
        environment=settings.app_env,
        github_api_url=settings.github_api_url,
        verify_signatures=settings.verify_signatures,
    )
    if not settings.verify_signatures:
        logger.warning("application.unsigned_webhooks")

    yield

    await app.state.provider.close()
    logger.info("application.shutdown")


async def deploybot_error_handler(request: Request, exc: DeploybotError) -> JSONResponse:
    """Map application errors onto HTTP statuses."""
    status_code = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    logger.warning("request.failed", error=exc.message, error_type=type(exc).__name__)
    return JSONResponse(
        status_code=status_code,
        content=_error_body(type(exc).__name__, exc.message, details=exc.details),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort for anything a handler did not turn into an outcome."""
    logger.error("unhandled_exception", error=str(exc), path=request.url.path, exc_info=True)
    message = str(exc) if settings.is_development else "An unexpected error occurred"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("INTERNAL_ERROR", message),
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    The GitHub client and the lock store are shared by every delivery the
    process handles, so they hang off ``app.state``.
    """
    app = FastAPI(
        title="Deploybot API",
        description="Deployment orchestration for GitHub repositories",
        version=__version__,
        docs_url="/docs" if settings.app_debug else None,
        redoc_url=None,
        lifespan=lifespan,
    )

    provider = GitHubProvider()
    app.state.provider = provider
    app.state.handler_deps = HandlerDeps.create(provider, LockStore(), settings)
    app.state.event_router = EventRouter()

    if settings.is_development:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(DeploybotError, deploybot_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(v1_router)
    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "deploybot.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
    )


if __name__ == "__main__":
    run()
