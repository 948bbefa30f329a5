import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from pagefetch.api.routes import router
from pagefetch.core.config import settings

__version__ = "1.0.0"

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Configure logging on startup.
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting pagefetch %s", __version__)

    yield

    logger.info("Shutting down pagefetch")

app = FastAPI(
    title="pagefetch",
    description="Safe fetching and readable-text extraction for untrusted URLs",
    version=__version__,
    lifespan=lifespan
)

# Include API routes
app.include_router(router)

@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "service": "pagefetch",
        "version": __version__,
        "endpoints": {
            "content": "POST /content",
            "health": "GET /health"
        }
    }
