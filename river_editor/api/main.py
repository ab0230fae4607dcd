"""FastAPI main application."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog

from .. import __version__
from ..config import settings
from ..logging_config import configure_logging
from . import editor

configure_logging()

logger = structlog.get_logger()

# Initialize FastAPI app
app = FastAPI(
    title="River Network Editor API",
    description="Draw river networks on a pixel grid and export them as BMP textures",
    version=__version__,
    debug=settings.debug,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(editor.router)


# API endpoints
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "River Network Editor API",
        "version": __version__,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "open_sessions": len(editor.sessions)}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
