# adwise/routers/dashboard_routes.py
from fastapi import APIRouter, Depends

from adwise.auth import get_current_principal
from adwise.core.principal import MANAGE_BILLBOARDS, Principal
from adwise.database import schemas
from adwise.deps import get_repository
from adwise.services.repository import MarketplaceRepository

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=schemas.DashboardStats)
def dashboard_stats(
    principal: Principal = Depends(get_current_principal),
    repository: MarketplaceRepository = Depends(get_repository),
):
    """Owner: inventory and revenue. Customer: campaigns and spend. Both get the last five bookings."""
    if principal.can(MANAGE_BILLBOARDS):
        stats = repository.owner_stats(principal.profile_id)
    else:
        stats = repository.customer_stats(principal.profile_id)
    stats["recent_activity"] = [schemas.BookingResponse.model_validate(b) for b in stats["recent_activity"]]
    return {"role": principal.role, **stats}
