import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from weatherhub.core.config import Settings, settings, validate_settings
from weatherhub.core.container import ServiceContainer
from weatherhub.core.exceptions import WeatherHubError
from weatherhub.core.logger import CORRELATION_ID_HEADER, correlation_id, logs, new_correlation_id
from weatherhub.models.base_model import ErrorResponse, ValidationErrorDetail
from weatherhub.routes.bulk_route import router as bulk_router
from weatherhub.routes.composite_route import router as composite_router
from weatherhub.routes.forecast_route import router as forecast_router
from weatherhub.routes.location_route import router as location_router
from weatherhub.routes.maintenance_route import router as maintenance_router
from weatherhub.routes.weather_route import router as weather_router


def _error_response(status_code: int, code: str, message: str, request: Request, **extra) -> JSONResponse:
    body = ErrorResponse(code=code, message=message, path=request.url.path, **extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body, exclude_none=True))


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(WeatherHubError)
    async def weatherhub_error_handler(request: Request, exc: WeatherHubError):
        level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        logs.log(level, f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
        return _error_response(exc.status_code, exc.code, exc.message, request, details=exc.details)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            ValidationErrorDetail(
                field=".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")),
                rejected_value=error.get("input"),
                message=error.get("msg", "Invalid value"),
            )
            for error in exc.errors()
        ]
        logs.log(logging.WARNING, f"Validation failed on {request.method} {request.url.path}: {len(errors)} error(s)")
        return _error_response(400, "VALIDATION_ERROR", "Validation failed", request, validation_errors=errors)

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        logs.log(logging.WARNING, f"Data integrity violation on {request.url.path}: {exc.orig}")
        return _error_response(
            409, "DATA_INTEGRITY_VIOLATION", "The request conflicts with existing data", request
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logs.log(logging.ERROR, f"Unexpected error on {request.method} {request.url.path}: {exc}", exc_info=True)
        return _error_response(500, "INTERNAL_ERROR", "An unexpected error occurred", request)


def create_app(config: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None) -> FastAPI:
    config = config or settings
    container = ServiceContainer(config, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        validate_settings(config, logs.logger)
        await container.database.create_tables()
        logs.log(logging.INFO, "WeatherHub started")
        yield
        await container.aclose()
        logs.log(logging.INFO, "WeatherHub stopped")

    app = FastAPI(title="WeatherHub", lifespan=lifespan)
    app.state.container = container

    @app.middleware("http")
    async def correlation_and_logging(request: Request, call_next):
        token = correlation_id.set(request.headers.get(CORRELATION_ID_HEADER) or new_correlation_id())
        started = time.perf_counter()
        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - started) * 1000
            logs.log(
                logging.INFO,
                f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f} ms)",
            )
            response.headers[CORRELATION_ID_HEADER] = correlation_id.get()
            return response
        finally:
            correlation_id.reset(token)

    register_exception_handlers(app)

    app.include_router(location_router)
    app.include_router(weather_router)
    app.include_router(forecast_router)
    app.include_router(composite_router)
    app.include_router(bulk_router)
    app.include_router(maintenance_router)

    # --- Root Endpoint ---
    @app.get("/")
    async def root():
        return {
            "message": "Welcome to WeatherHub API",
            "status": "running",
            "endpoints": {
                "health": "/health",
                "locations": "/api/locations",
                "weather": "/api/weather",
                "forecast": "/api/forecast",
                "metrics": "/api/metrics",
                "docs": "/docs"
            },
            "version": "1.0.0"
        }

    # --- Health Check ---
    @app.get("/health")
    async def health_check():
        return {"status": "ok", "service": "WeatherHub"}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("weatherhub.main:app", host="0.0.0.0", port=8000, reload=True)
