import logging
from typing import Any, Dict, List

from adwise.core.errors import InvalidRange
from adwise.core.principal import MANAGE_CAMPAIGNS, Principal
from adwise.database.models import Campaign
from adwise.services.repository import MarketplaceRepository

logger = logging.getLogger(__name__)


def list_campaigns(repository: MarketplaceRepository, principal: Principal) -> List[Campaign]:
    principal.require(MANAGE_CAMPAIGNS)
    return repository.select("campaigns", order_by="-id", customer_id=principal.profile_id)


def create_campaign(repository: MarketplaceRepository, principal: Principal, data: Dict[str, Any]) -> Campaign:
    """Create a draft campaign; paid bookings create active ones on their own."""
    principal.require(MANAGE_CAMPAIGNS)
    start, end = data.get("start_date"), data.get("end_date")
    if start and end and end <= start:
        raise InvalidRange(
            "Campaign end date must be after its start date",
            details={"start_date": start.isoformat(), "end_date": end.isoformat()},
        )

    record = dict(data)
    record["customer_id"] = principal.profile_id
    record["status"] = None
    with repository.atomic():
        campaign = repository.insert("campaigns", record)
    logger.info("Campaign %s created by customer %s", campaign.id, principal.profile_id)
    return campaign
