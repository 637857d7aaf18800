import logging
from typing import Any, Dict, Optional

from adwise.core.errors import AuthorizationError, TrafficLookupError, ValidationError
from adwise.core.principal import MANAGE_BILLBOARDS, Principal
from adwise.database.models import Billboard
from adwise.services.repository import MarketplaceRepository
from adwise.services.traffic_service import TrafficClient

logger = logging.getLogger(__name__)


async def _score_location(data: Dict[str, Any], traffic_client: Optional[TrafficClient]) -> Dict[str, Any]:
    """Fill traffic_score/daily_impressions from live traffic when coordinates are known.

    A failed lookup keeps whatever the owner entered.
    """
    if traffic_client is None or not traffic_client.configured:
        return data
    if data.get("latitude") is None or data.get("longitude") is None:
        return data
    try:
        report = await traffic_client.lookup(data["latitude"], data["longitude"])
    except TrafficLookupError as e:
        logger.warning("Traffic lookup failed; keeping owner-provided traffic values: %s", e)
        return data
    scored = dict(data)
    scored["traffic_score"] = report.traffic_score
    scored["daily_impressions"] = report.daily_impressions
    return scored


async def create_billboard(
    repository: MarketplaceRepository,
    principal: Principal,
    data: Dict[str, Any],
    traffic_client: Optional[TrafficClient] = None,
) -> Billboard:
    principal.require(MANAGE_BILLBOARDS)
    if not data.get("price_per_month") or data["price_per_month"] <= 0:
        raise ValidationError("price_per_month must be greater than 0")

    record = await _score_location(dict(data), traffic_client)
    record["owner_id"] = principal.profile_id
    with repository.atomic():
        billboard = repository.insert("billboards", record)
    logger.info("Billboard %s created by owner %s (traffic=%s)", billboard.id, principal.profile_id, billboard.traffic_score)
    return billboard


async def update_billboard(
    repository: MarketplaceRepository,
    principal: Principal,
    billboard_id: int,
    patch: Dict[str, Any],
    traffic_client: Optional[TrafficClient] = None,
) -> Billboard:
    principal.require(MANAGE_BILLBOARDS)
    billboard = repository.get("billboards", billboard_id)
    if billboard.owner_id != principal.profile_id:
        raise AuthorizationError("Only the owner can edit this billboard")
    if "price_per_month" in patch and (patch["price_per_month"] is None or patch["price_per_month"] <= 0):
        raise ValidationError("price_per_month must be greater than 0")

    if "latitude" in patch or "longitude" in patch:
        located = {
            "latitude": patch.get("latitude", billboard.latitude),
            "longitude": patch.get("longitude", billboard.longitude),
        }
        scored = await _score_location(located, traffic_client)
        for key in ("traffic_score", "daily_impressions"):
            if key in scored:
                patch[key] = scored[key]

    if not patch:
        return billboard
    with repository.atomic():
        repository.update("billboards", billboard_id, patch)
    logger.info("Billboard %s updated by owner %s: %s", billboard_id, principal.profile_id, sorted(patch))
    return repository.get("billboards", billboard_id)
