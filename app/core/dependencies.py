"""Dependencies for FastAPI routes."""
from fastapi import Request

from app.services.catalog import CatalogCache


def get_catalog_cache(request: Request) -> CatalogCache:
    """Provide the app-wide catalog cache to routes."""
    return request.app.state.catalog_cache
