"""
Error taxonomy shared by services and routers.

Services raise these; routers translate them into HTTP responses using
``status_code``, ``code`` and, for payment errors, a ``hint`` telling the
customer whether money may have moved.
"""
from typing import Any, Dict, Optional


class AdWiseError(Exception):
    status_code = 500
    code = "internal_error"
    hint: Optional[str] = None

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if hint is not None:
            self.hint = hint

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": False, "error": self.message, "code": self.code}
        if self.hint:
            payload["hint"] = self.hint
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(AdWiseError):
    status_code = 422
    code = "validation_error"


class InvalidRange(ValidationError):
    code = "invalid_range"


class NotFound(AdWiseError):
    status_code = 404
    code = "not_found"


class AuthorizationError(AdWiseError):
    status_code = 403
    code = "forbidden"


class InvalidTransition(AdWiseError):
    status_code = 409
    code = "invalid_transition"


class PersistenceError(AdWiseError):
    status_code = 500
    code = "persistence_error"


class GatewayUnavailable(AdWiseError):
    """Order creation did not happen; the customer was not charged."""
    status_code = 502
    code = "gateway_unavailable"
    hint = "Payment was not attempted; it is safe to try again."


class VerificationFailed(AdWiseError):
    """The payment callback could not be trusted; money may have moved."""
    status_code = 400
    code = "verification_failed"
    hint = "Your payment may have been charged; contact support before paying again."


class TrafficLookupError(AdWiseError):
    status_code = 502
    code = "traffic_unavailable"


class RecommendationError(AdWiseError):
    status_code = 502
    code = "recommendation_unavailable"

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        if status_code is not None:
            self.status_code = status_code
