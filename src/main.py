"""FastAPI application for reflective-access hint resolution."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config import load_settings
from src.routes import resolve

settings = load_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown events."""
    # Startup
    logger.info("Starting Spring Native Hints Service...")
    logger.info(f"Server running on port {settings.port}")
    logger.info(f"Built-in hint sources: {', '.join(settings.hint_sources)}")
    logger.info("Ready for requests")
    yield
    # Shutdown
    logger.info("Shutting down Spring Native Hints Service...")


# Create FastAPI app
app = FastAPI(
    title="Spring Native Hints",
    description="Reflective-access hint resolution for native-image builds",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(resolve.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
