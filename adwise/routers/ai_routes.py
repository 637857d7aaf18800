# adwise/routers/ai_routes.py
"""
AI billboard recommendation endpoint, rate limited per profile through Redis.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from redis.asyncio import Redis

from adwise.ai.config import MAX_REQUESTS_PER_MINUTE
from adwise.ai.recommendations import RecommendationService
from adwise.auth import require_capability
from adwise.core.errors import RecommendationError
from adwise.core.principal import REQUEST_RECOMMENDATIONS, Principal
from adwise.core.redis import check_rate_limit
from adwise.database import schemas
from adwise.deps import get_rate_limit_redis, get_recommendation_service, get_repository, http_error
from adwise.services.repository import MarketplaceRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["AI Recommendations"])


@router.post("/recommendations", response_model=schemas.RecommendationResponse)
async def recommend_billboards(
    payload: schemas.RecommendationRequest,
    principal: Principal = Depends(require_capability(REQUEST_RECOMMENDATIONS)),
    repository: MarketplaceRepository = Depends(get_repository),
    service: RecommendationService = Depends(get_recommendation_service),
    redis: Optional[Redis] = Depends(get_rate_limit_redis),
):
    if not await check_rate_limit(redis, str(principal.profile_id), MAX_REQUESTS_PER_MINUTE):
        raise HTTPException(
            status_code=429,
            detail=f"Rate limit exceeded. Maximum {MAX_REQUESTS_PER_MINUTE} requests per minute.",
        )

    billboards = repository.list_available_billboards()
    try:
        return await service.recommend(
            billboards,
            budget=payload.budget,
            preferred_traffic=payload.preferred_traffic.value if payload.preferred_traffic else None,
            location_preference=payload.location_preference,
        )
    except RecommendationError as e:
        raise http_error(e) from e
