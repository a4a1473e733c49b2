"""Main FastAPI application for the intelligence dashboard."""
import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from milintel.core.logger import setup_logging
from milintel.service import IntelService

from .api.routes import router as api_router
from .config import settings

_log = logging.getLogger("app.intel_launcher")

ServiceFactory = Callable[[], IntelService]


def create_app(
    service_factory: Optional[ServiceFactory] = None,
    enable_scheduler: Optional[bool] = None,
) -> FastAPI:
    """Build the app. The engine is created in the lifespan, not at import."""
    factory = service_factory or IntelService.from_env
    scheduler_on = settings.ENABLE_SCHEDULER if enable_scheduler is None else enable_scheduler

    @asynccontextmanager
    async def lifespan(app_instance: FastAPI):
        setup_logging(settings.LOG_LEVEL)
        service = factory()
        app_instance.state.intel = service
        service.start(scheduler=scheduler_on)
        if scheduler_on:
            _log.info("Cadence scheduler started")
        else:
            _log.info("Cadence scheduler disabled; runs only on request")

        yield  # FastAPI serves requests here

        await service.stop()
        _log.info("Intelligence engine stopped")

    app = FastAPI(
        title=settings.TITLE,
        description="OSINT aggregation with tiered AI threat analysis",
        version=settings.VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        message = "Endpoint not found" if exc.status_code == 404 else exc.detail
        return JSONResponse({"error": message}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        _log.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=exc)
        return JSONResponse({"error": str(exc)}, status_code=500)

    app.include_router(api_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
