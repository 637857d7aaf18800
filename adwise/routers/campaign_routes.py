# adwise/routers/campaign_routes.py
from typing import List

from fastapi import APIRouter, Depends, status

from adwise.auth import require_capability
from adwise.core.errors import AdWiseError
from adwise.core.principal import MANAGE_CAMPAIGNS, Principal
from adwise.database import schemas
from adwise.deps import get_repository, http_error
from adwise.services import campaign_service
from adwise.services.repository import MarketplaceRepository

router = APIRouter(prefix="/campaigns", tags=["Campaigns"])


@router.get("", response_model=List[schemas.CampaignResponse])
def list_campaigns(
    principal: Principal = Depends(require_capability(MANAGE_CAMPAIGNS)),
    repository: MarketplaceRepository = Depends(get_repository),
):
    return campaign_service.list_campaigns(repository, principal)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=schemas.CampaignResponse)
def create_campaign(
    payload: schemas.CampaignCreate,
    principal: Principal = Depends(require_capability(MANAGE_CAMPAIGNS)),
    repository: MarketplaceRepository = Depends(get_repository),
):
    try:
        return campaign_service.create_campaign(repository, principal, payload.model_dump())
    except AdWiseError as e:
        raise http_error(e) from e
