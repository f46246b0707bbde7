"""
FastAPI app assembly: logging, error handlers and router wiring.
"""
import logging
import os

from fastapi import FastAPI

# Configure logging
LOG_LEVEL_NAME = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)

ENVIRONMENT = os.getenv("CATALOG_ENV", "development")
APP_VERSION = "1.0.0"

from catalog.api.errors import register_error_handlers
from catalog.api.products import router as products_router
from catalog.api.reviews import router as reviews_router

# Database schema is managed by Alembic migrations.

app = FastAPI(
    title="Catalog Service",
    description="API for products and their reviews with filtered, paginated listing.",
    version=APP_VERSION,
)

# Avoid implicit trailing-slash redirects for predictable URLs
app.router.redirect_slashes = False

register_error_handlers(app)
app.include_router(products_router)
app.include_router(reviews_router)

logger.info("app_startup: log_level=%s environment=%s", LOG_LEVEL_NAME, ENVIRONMENT)


@app.get("/healthcheck", tags=["operational"])
def healthcheck():
    return {
        "status": "available",
        "system_info": {"environment": ENVIRONMENT, "version": APP_VERSION},
    }
