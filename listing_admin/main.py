from __future__ import annotations
import logging
import time

from fastapi import FastAPI, Request

from listing_admin.core.config import settings, configure_cors
from listing_admin.core.exceptions import register_exception_handlers
from listing_admin.core.logging import setup_logging
from listing_admin.db.session import init_models

# Routers (import once, include once)
from listing_admin.api.v1.auth import router as auth_router
from listing_admin.api.v1.properties import router as properties_router
from listing_admin.api.v1.public import router as public_router

setup_logging(settings.log_level)
logger = logging.getLogger("listing_admin")

app = FastAPI(title=settings.app_name)
configure_cors(app)

# Global exception handlers: every failure renders {"error": ...}
register_exception_handlers(app)


@app.on_event("startup")
def on_startup():
    """
    - Create tables (the record store is the only durable state)
    """
    init_models()
    logger.info("%s started; listing order %s", settings.app_name, settings.list_order)


# Mount API routers (once)
app.include_router(auth_router)
app.include_router(properties_router)
app.include_router(public_router)


@app.get("/health", include_in_schema=False)
def health():
    return {"status": "ok"}


@app.middleware("http")
async def _log_requests(request: Request, call_next):
    started = time.perf_counter()
    status_code = 500  # unless the app produces a response
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, status_code, elapsed_ms)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
