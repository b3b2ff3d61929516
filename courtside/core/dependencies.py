"""
Dependency injection for FastAPI endpoints.
"""
from functools import lru_cache

from courtside.core.config import settings
from courtside.services.database import DatabaseService


@lru_cache()
def get_database_service() -> DatabaseService:
    """
    Create and cache a DatabaseService instance.

    One Supabase client is shared across requests; tests replace it
    through app.dependency_overrides.
    """
    return DatabaseService(
        url=settings.SUPABASE_URL,
        key=settings.SUPABASE_SERVICE_ROLE_KEY,
    )
