"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import router
from .config import get_settings
from . import __version__

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - handles startup and shutdown."""
    settings = get_settings()
    logger.info("Starting Label Review API...")
    logger.info(
        f"Fuzzy threshold={settings.fuzzy_match_threshold}, "
        f"ABV tolerance={settings.abv_tolerance}, "
        f"auto-approval={'on' if settings.auto_approval_enabled else 'off'}"
    )
    logger.info(f"API ready - Version {__version__}")

    yield

    logger.info("Shutting down Label Review API...")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="""
## Alcohol Label Review API

Compares the fields declared in a label application against the fields
extracted from the label artwork and proposes an overall disposition.

### Features
- **Field Comparison**: Exact, fuzzy, normalized, contains and enum matching
- **Adjudication**: Approved, conditionally approved, needs correction or rejected
- **Validation**: Full comparison and adjudication for one application
- **Batch Processing**: Validate several applications at once

### Quick Start
1. Use `/health` to check API status
2. Use `/compare` to compare a single field
3. Use `/validate` to validate an application against extraction output
        """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # Include routes
    app.include_router(router, prefix="/api/v1")

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": "Label Review API",
            "version": __version__,
            "docs": "/docs"
        }

    return app


# Create app instance
app = create_app()
