# adwise/routers/billboard_routes.py
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from adwise.auth import require_capability
from adwise.core.errors import AdWiseError
from adwise.core.principal import MANAGE_BILLBOARDS, Principal
from adwise.database import schemas
from adwise.deps import get_repository, get_traffic_client, http_error
from adwise.services import billboard_service
from adwise.services.repository import MarketplaceRepository
from adwise.services.traffic_service import TrafficClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billboards", tags=["Billboards"])


@router.get("", response_model=List[schemas.BillboardResponse])
def list_billboards(repository: MarketplaceRepository = Depends(get_repository)):
    """Billboards open for booking."""
    return repository.list_available_billboards()


@router.get("/mine", response_model=List[schemas.BillboardResponse])
def my_billboards(
    principal: Principal = Depends(require_capability(MANAGE_BILLBOARDS)),
    repository: MarketplaceRepository = Depends(get_repository),
):
    return repository.select("billboards", order_by="-id", owner_id=principal.profile_id)


@router.get("/{billboard_id}", response_model=schemas.BillboardResponse)
def get_billboard(billboard_id: int, repository: MarketplaceRepository = Depends(get_repository)):
    try:
        return repository.get("billboards", billboard_id)
    except AdWiseError as e:
        raise http_error(e) from e


@router.post("", status_code=status.HTTP_201_CREATED, response_model=schemas.BillboardResponse)
async def create_billboard(
    payload: schemas.BillboardCreate,
    principal: Principal = Depends(require_capability(MANAGE_BILLBOARDS)),
    repository: MarketplaceRepository = Depends(get_repository),
    traffic_client: TrafficClient = Depends(get_traffic_client),
):
    """Create a billboard; coordinates trigger live traffic scoring when TomTom is configured."""
    try:
        return await billboard_service.create_billboard(
            repository, principal, payload.model_dump(mode="json"), traffic_client
        )
    except AdWiseError as e:
        raise http_error(e) from e


@router.put("/{billboard_id}", response_model=schemas.BillboardResponse)
async def update_billboard(
    billboard_id: int,
    payload: schemas.BillboardUpdate,
    principal: Principal = Depends(require_capability(MANAGE_BILLBOARDS)),
    repository: MarketplaceRepository = Depends(get_repository),
    traffic_client: TrafficClient = Depends(get_traffic_client),
):
    try:
        return await billboard_service.update_billboard(
            repository, principal, billboard_id, payload.model_dump(mode="json", exclude_unset=True), traffic_client
        )
    except AdWiseError as e:
        raise http_error(e) from e
