# adwise/routers/traffic_routes.py
import logging

from fastapi import APIRouter, Depends, HTTPException

from adwise.auth import get_current_principal
from adwise.core.errors import TrafficLookupError
from adwise.core.principal import Principal
from adwise.database import schemas
from adwise.deps import get_traffic_client
from adwise.services.traffic_service import TrafficClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/traffic", tags=["Traffic"])


@router.post("")
async def get_traffic_data(
    payload: schemas.TrafficRequest,
    principal: Principal = Depends(get_current_principal),
    traffic_client: TrafficClient = Depends(get_traffic_client),
):
    """Live traffic tier and impressions estimate for a coordinate."""
    try:
        report = await traffic_client.lookup(payload.latitude, payload.longitude)
    except TrafficLookupError as e:
        raise HTTPException(status_code=e.details.get("status", e.status_code), detail=e.to_dict()) from e
    return report.to_dict()
