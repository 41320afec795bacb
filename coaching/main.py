"""
FastAPI application factory
"""
import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from coaching.config import get_settings
from coaching.domain.errors import CoachingValidationError, NotFoundError, TaskConflictError
from coaching.infrastructure.db.session import check_db_connection
from coaching.api.v1 import subscriptions, tasks, calendar, chat

logging.basicConfig(
    level=get_settings().LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every unhandled exception with its traceback and answers 500"""

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            tb_str = traceback.format_exc()
            logger.error(f"\n{'='*60}\nERROR on {request.method} {request.url.path}\n{tb_str}{'='*60}")
            return Response(content=f"Internal Server Error: {exc}", status_code=500)


def _status_for(exc: CoachingValidationError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, TaskConflictError):
        return 409
    return 400


async def validation_error_handler(request: Request, exc: CoachingValidationError):
    return JSONResponse(
        status_code=_status_for(exc),
        content={"detail": exc.message, "code": exc.code},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    if settings.SCHEDULER_ENABLED:
        from coaching.application.scheduler import start_scheduler, shutdown_scheduler
        start_scheduler()
        try:
            yield
        finally:
            shutdown_scheduler()
    else:
        yield


def create_app() -> FastAPI:
    """
    Application factory - builds and wires the FastAPI app

    Returns:
        Configured FastAPI app
    """
    settings = get_settings()

    app = FastAPI(
        title="Coaching Engine",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    app.add_middleware(ErrorLoggingMiddleware)
    app.add_exception_handler(CoachingValidationError, validation_error_handler)

    app.include_router(subscriptions.router)
    app.include_router(tasks.router)
    app.include_router(calendar.router)
    app.include_router(chat.router)

    # Health checks
    @app.get("/health", response_class=PlainTextResponse, tags=["system"])
    def health():
        """Health check endpoint"""
        return "ok"

    @app.get("/ready", response_class=PlainTextResponse, tags=["system"])
    def ready():
        """Readiness check endpoint (database reachable)"""
        check_db_connection()
        return "ok"

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "coaching.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
