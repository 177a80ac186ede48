"""System endpoints: health check."""

from fastapi import APIRouter, Depends

from runway.web.app import API_VERSION
from runway.web.cache import CacheService
from runway.web.dependencies import get_cache
from runway.web.schemas import HealthResponse

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
async def health(cache: CacheService = Depends(get_cache)):
    """API health check."""
    return HealthResponse(
        status="ok",
        version=API_VERSION,
        cache_type="redis" if cache.is_redis else "memory",
        cache_hits=cache.hits,
        cache_misses=cache.misses,
    )
