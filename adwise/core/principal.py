"""
Authenticated principal and the capabilities each role carries.
"""
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional

from adwise.core.errors import AuthorizationError
from adwise.database.models import UserRole

MANAGE_BILLBOARDS = "billboard:manage"
REVIEW_BOOKINGS = "booking:review"
CREATE_BOOKINGS = "booking:create"
PAY_BOOKINGS = "booking:pay"
MANAGE_CAMPAIGNS = "campaign:manage"
REQUEST_RECOMMENDATIONS = "recommendation:request"

ROLE_CAPABILITIES: Dict[str, FrozenSet[str]] = {
    UserRole.customer.value: frozenset({CREATE_BOOKINGS, PAY_BOOKINGS, MANAGE_CAMPAIGNS, REQUEST_RECOMMENDATIONS}),
    UserRole.owner.value: frozenset({MANAGE_BILLBOARDS, REVIEW_BOOKINGS}),
}


@dataclass(frozen=True)
class Principal:
    profile_id: int
    role: str
    capabilities: FrozenSet[str] = field(default_factory=frozenset)
    email: Optional[str] = None

    @classmethod
    def for_role(cls, profile_id: int, role: str, email: Optional[str] = None) -> "Principal":
        return cls(profile_id=profile_id, role=role, capabilities=ROLE_CAPABILITIES.get(role, frozenset()), email=email)

    def can(self, capability: str) -> bool:
        return capability in self.capabilities

    def require(self, capability: str) -> None:
        if not self.can(capability):
            raise AuthorizationError(f"Access forbidden: {capability} capability required")
