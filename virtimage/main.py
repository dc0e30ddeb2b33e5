import time
import logging
from fastapi import FastAPI, Request

# Local imports
from .core.config import APP_NAME, APP_VERSION, CONFIG_FILE, get_settings
from .core.logging import setup_logging
from .api import health, images
from .deps import close_host

# Initialize Logging
setup_logging()
logger = logging.getLogger(APP_NAME)

# FastAPI Initialize
app = FastAPI(
    title=APP_NAME,
    version=APP_VERSION,
    description="REST API for importing, cloning and removing libvirt disk images",
)


# Simple request timing middleware for visibility
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration_ms = int((time.time() - start) * 1000)
    logger.info(
        "%s %s -> %d (%d ms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response

# Routers
app.include_router(health.router, prefix='/api')
app.include_router(images.router, prefix='/api')


@app.on_event("startup")
async def on_startup():
    settings = get_settings()
    logger.info("Starting %s v%s (config %s)", APP_NAME, APP_VERSION, CONFIG_FILE)
    logger.info(
        "Managing pool %s on %s (upload chunk %d bytes)",
        settings.pool,
        settings.libvirt_uri,
        settings.upload_chunk_size,
    )


@app.on_event("shutdown")
async def on_shutdown():
    logger.info("Shutting down %s", APP_NAME)
    close_host()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"{APP_NAME} API is running",
        "version": APP_VERSION,
        "docs": "/docs",
    }
