"""
FastAPI application entry point
"""

import sys
import logging
import traceback
from pathlib import Path

# Add parent directory to path so we can import core modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from backend.config import CORS_ORIGINS, API_HOST, API_PORT
from backend.api import sessions, export
from core.errors import (
    AnnotatorError, ImageDecodeError, ResourceUnavailable, SessionNotFoundError,
    SessionRemovedError, UserInputRejected, WorkspaceFullError,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Status codes for core errors, most specific first
ERROR_STATUS = [
    (UserInputRejected, 400),
    (SessionNotFoundError, 404),
    (WorkspaceFullError, 409),
    (SessionRemovedError, 410),
    (ImageDecodeError, 422),
    (ResourceUnavailable, 500),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info("Annotator API starting...")
    yield
    # Shutdown
    sessions.reset_workspace()
    logger.info("Annotator API shutting down...")


app = FastAPI(
    title="Annotator API",
    description="Polygon outline annotation for uploaded images",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(AnnotatorError)
async def annotator_exception_handler(request: Request, exc: AnnotatorError):
    """Report core errors to the client."""
    status_code = next(
        (code for cls, code in ERROR_STATUS if isinstance(exc, cls)), 500
    )
    level = logging.ERROR if status_code >= 500 else logging.WARNING
    logger.log(level, f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log all unhandled exceptions with full traceback."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}:")
    logger.error(traceback.format_exc())
    return JSONResponse(status_code=500, content={"detail": str(exc)})


# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(sessions.router, prefix="/api/sessions", tags=["Sessions"])
app.include_router(export.router, prefix="/api/export", tags=["Export"])


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "annotator-api"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=API_HOST, port=API_PORT)
