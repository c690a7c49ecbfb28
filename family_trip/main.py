"""
FastAPI Application Entry Point - the trip server.
Stores the shared trip record and extracts trip data from PDFs and images.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import router
from .config import extraction_enabled, settings

logger = logging.getLogger(__name__)


# Create FastAPI app
app = FastAPI(
    title="Family Trip Planner",
    description="Shared trip data and PDF/image trip extraction",
    version="1.0.0"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies get the same ``{error}`` shape as other failures."""
    return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc) or "Internal server error"})


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "extraction": "enabled" if extraction_enabled() else "disabled"
    }


if __name__ == "__main__":
    import uvicorn
    if not extraction_enabled():
        logger.warning("Set LLM_API_KEY for automatic extraction from PDFs and images.")
    uvicorn.run(
        "family_trip.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
