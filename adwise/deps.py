# adwise/deps.py
"""
FastAPI dependency providers. Tests swap these out through
``app.dependency_overrides``.
"""
from typing import Optional

from fastapi import Depends, HTTPException
from redis.asyncio import Redis
from sqlalchemy.orm import Session

from adwise.ai.recommendations import RecommendationService
from adwise.core.errors import AdWiseError
from adwise.core.redis import get_optional_redis
from adwise.database.database import get_db
from adwise.services.booking_service import BookingLifecycleManager
from adwise.services.payment_service import PaymentGatewayAdapter
from adwise.services.repository import MarketplaceRepository
from adwise.services.traffic_service import TrafficClient

_gateway: Optional[PaymentGatewayAdapter] = None


def http_error(error: AdWiseError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.to_dict())


def get_repository(db: Session = Depends(get_db)) -> MarketplaceRepository:
    return MarketplaceRepository(db)


def get_payment_gateway() -> PaymentGatewayAdapter:
    global _gateway
    if _gateway is None:
        _gateway = PaymentGatewayAdapter()
    return _gateway


def get_lifecycle_manager(
    repository: MarketplaceRepository = Depends(get_repository),
    gateway: PaymentGatewayAdapter = Depends(get_payment_gateway),
) -> BookingLifecycleManager:
    return BookingLifecycleManager(repository, gateway)


def get_traffic_client() -> TrafficClient:
    return TrafficClient()


def get_recommendation_service() -> RecommendationService:
    return RecommendationService()


async def get_rate_limit_redis() -> Optional[Redis]:
    return await get_optional_redis()
