"""Users service main application."""

import time
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import router as api_router
from .runtime.metrics import get_metrics_collector
from .store import UserStore
from libs.common.config import UsersServiceConfig
from libs.common.logging import configure_logging

SERVICE_NAME = "users-service"
UNMATCHED_ENDPOINT = "unmatched"

logger = structlog.get_logger("users_service")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    config = UsersServiceConfig()
    configure_logging(SERVICE_NAME, config.app_log_level, config.app_log_format)

    logger.info("Starting users service", env=config.app_env)

    app.state.user_store = UserStore()
    app.state.metrics_collector = get_metrics_collector(SERVICE_NAME)
    app.state.metrics_collector.set_user_records(app.state.user_store.count())

    logger.info("Users service started successfully", seeded=app.state.user_store.count())

    yield

    # Shutdown
    logger.info("Users service shutdown complete")


app = FastAPI(
    title="Users Service",
    description="In-memory CRUD API over user records",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time header to responses."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    """Collect metrics for HTTP requests."""
    start_time = time.time()

    try:
        response = await call_next(request)
        status_code = response.status_code
    except Exception as e:
        logger.exception("Unhandled request error", method=request.method, path=request.url.path)
        status_code = 500
        response = JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "detail": str(e)}
        )

    duration = time.time() - start_time

    # Label by route template so /users/1 and /users/2 share a series;
    # requests that match no route share one fixed label
    route = request.scope.get("route")
    endpoint = getattr(route, "path", UNMATCHED_ENDPOINT)

    if hasattr(app.state, 'metrics_collector'):
        app.state.metrics_collector.record_http_request(
            method=request.method,
            endpoint=endpoint,
            status=status_code,
            duration=duration
        )

    return response


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    if hasattr(app.state, 'user_store'):
        return {"status": "healthy", "service": SERVICE_NAME}
    return JSONResponse(
        status_code=503,
        content={"status": "unhealthy", "service": SERVICE_NAME}
    )


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    if hasattr(app.state, 'metrics_collector'):
        metrics_data = app.state.metrics_collector.get_metrics()
        return Response(content=metrics_data, media_type="text/plain")
    else:
        return Response(content="# No metrics available\n", media_type="text/plain")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": SERVICE_NAME,
        "version": "0.1.0",
        "status": "running",
        "endpoints": {
            "health": "/health",
            "metrics": "/metrics",
            "users": "/users",
            "user": "/users/{user_id}"
        }
    }


def run() -> None:
    """Serve the application with uvicorn using ``UsersServiceConfig``."""
    config = UsersServiceConfig()
    uvicorn.run(
        "service_users.main:app",
        host=config.users_service_host,
        port=config.users_service_port,
        log_level=config.app_log_level.lower()
    )


if __name__ == "__main__":
    run()
