"""
App assembly entry point.

Re-exports the FastAPI `app` from `catalog.api.main` so the service can be
started with `uvicorn app:app` from this directory.
"""

from catalog.api.main import app  # noqa: F401
